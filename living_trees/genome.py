"""
living_trees/genome.py - Tree genome with whole-tree mutation and subtree crossover
"""
import logging
from typing import Tuple

from .environment import Environment
from .gene import Gene
from .tree import LivingTreeGene, TreeStructureError

logger = logging.getLogger(__name__)


class LivingTreeGenome(Gene):
    """An individual whose genetic material is a single tree of genes.

    A genome is itself a ``Gene``, so a tree genome can be nested as the
    payload of a larger composite genome.
    """

    def __init__(self, root_gene: LivingTreeGene):
        if not isinstance(root_gene, LivingTreeGene):
            raise TypeError(f"A genome needs a LivingTreeGene root, got {type(root_gene).__name__}")
        if root_gene.parent is not None:
            raise TreeStructureError("A genome must own its whole tree; the root has a parent")
        self.root_gene = root_gene

    @property
    def raw_value(self) -> LivingTreeGene:
        return self.root_gene

    @classmethod
    def from_raw_value(cls, root_gene: LivingTreeGene) -> 'LivingTreeGenome':
        return cls(root_gene)

    def size(self) -> int:
        return self.root_gene.size()

    def depth(self) -> int:
        return self.root_gene.depth()

    def mutate(self, rate: float, environment: Environment) -> None:
        """Offer every gene one mutation, children before parents"""
        self.root_gene.bottom_up_enumerate(lambda gene: gene.mutate(rate, environment))

    def crossover(self, partner: 'LivingTreeGenome', rate: float,
                  environment: Environment) -> Tuple['LivingTreeGenome', 'LivingTreeGenome']:
        """Exchange one random subtree between copies of both parents.

        With probability ``1 - rate``, or when either root has fewer than two
        children, the parents themselves are returned and nothing is copied.
        Otherwise both trees are copied, one crossover point is drawn in each
        copy, and each point takes the other's slot (same parent, same child
        index). A point that was a root makes the other point the new root of
        that offspring.
        """
        if environment.uniform() >= rate:
            logger.debug("Crossover skipped by rate gate (rate=%s)", rate)
            return self, partner

        if len(self.root_gene.children) <= 1 or len(partner.root_gene.children) <= 1:
            logger.debug("Crossover skipped: a parent root has fewer than two children")
            return self, partner

        child_root_a = self.root_gene.copy()
        child_root_b = partner.root_gene.copy()

        nodes_a = child_root_a.all_nodes
        nodes_b = child_root_b.all_nodes
        crossover_point_a = nodes_a[environment.choice_index(len(nodes_a))]
        crossover_point_b = nodes_b[environment.choice_index(len(nodes_b))]

        original_parent_a = crossover_point_a.parent
        original_index_a = crossover_point_a.index_in_parent()
        original_parent_b = crossover_point_b.parent
        original_index_b = crossover_point_b.index_in_parent()

        # Detach both points before splicing so neither slot shifts under the other.
        crossover_point_a.parent = None
        crossover_point_b.parent = None

        if original_parent_a is not None:
            original_parent_a.insert_child(original_index_a, crossover_point_b)
        else:
            child_root_a = crossover_point_b

        if original_parent_b is not None:
            original_parent_b.insert_child(original_index_b, crossover_point_a)
        else:
            child_root_b = crossover_point_a

        if __debug__:
            for root in (child_root_a, child_root_b):
                assert root.parent is None
                root.validate()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Crossover exchanged subtrees of size %d and %d",
                         crossover_point_a.size(), crossover_point_b.size())

        return LivingTreeGenome(child_root_a), LivingTreeGenome(child_root_b)

    def copy(self) -> 'LivingTreeGenome':
        """Create a deep copy of this genome"""
        return LivingTreeGenome(self.root_gene.copy())

    def __repr__(self) -> str:
        return f"LivingTreeGenome(size={self.size()}, depth={self.depth()})"
