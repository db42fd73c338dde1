"""
living_trees - Evolvable tree genomes for genetic programming

Tree-structured genomes whose nodes own their children and weakly reference
their parents, with whole-tree mutation and subtree-exchange crossover.
"""

__version__ = "0.1.0"
__author__ = "Living Trees Project"

from .gene import Gene, TreeGeneType
from .environment import Environment
from .tree import LivingTreeGene, TreeStructureError
from .genome import LivingTreeGenome
from .expressions import (
    ExpressionGene, random_tree, random_genome, evaluate_tree,
    VARIABLES, UNARY_OPS, BINARY_OPS
)

__all__ = [
    'Gene', 'TreeGeneType',
    'Environment',
    'LivingTreeGene', 'TreeStructureError',
    'LivingTreeGenome',
    'ExpressionGene', 'random_tree', 'random_genome', 'evaluate_tree',
    'VARIABLES', 'UNARY_OPS', 'BINARY_OPS'
]
