"""
living_trees/gene.py - Payload contracts for evolvable genes
"""
from abc import ABC, abstractmethod
from typing import Optional


class Gene(ABC):
    """Anything that can be mutated in place and copied independently"""

    @abstractmethod
    def mutate(self, rate: float, environment) -> None:
        """Mutate in place with the given rate under the given environment"""
        pass

    @abstractmethod
    def copy(self) -> 'Gene':
        """Create an independent copy sharing no mutable state"""
        pass


class TreeGeneType(Gene):
    """Payload carried by a single tree node"""

    # Number of children this payload expects, None when unconstrained.
    arity: Optional[int] = None
