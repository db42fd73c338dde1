"""
Shared test payloads and tree builders.
"""
from living_trees.environment import Environment
from living_trees.gene import TreeGeneType
from living_trees.tree import LivingTreeGene


class CountingGene(TreeGeneType):
    """Payload that records every mutation offered to it"""

    def __init__(self, label, log=None):
        self.label = label
        self.mutations = 0
        self.log = log

    def mutate(self, rate, environment):
        self.mutations += 1
        if self.log is not None:
            self.log.append(self.label)

    def copy(self):
        clone = CountingGene(self.label, self.log)
        clone.mutations = self.mutations
        return clone

    def __repr__(self):
        return f"CountingGene({self.label!r})"


class ScriptedEnvironment(Environment):
    """Environment whose draws are given up front"""

    def __init__(self, indices=(), draws=(), **settings):
        super().__init__(seed=0, **settings)
        self._indices = list(indices)
        self._draws = list(draws)

    def uniform(self):
        return self._draws.pop(0) if self._draws else 0.0

    def choice_index(self, n):
        index = self._indices.pop(0)
        assert 0 <= index < n
        return index


def build(spec, log=None):
    """Build a tree from 'label' or ('label', [child specs])"""
    if isinstance(spec, tuple):
        label, children = spec
    else:
        label, children = spec, []
    return LivingTreeGene(CountingGene(label, log), [build(child, log) for child in children])


def shape(node):
    """Nested label structure of a tree, the inverse of build"""
    if node.is_leaf:
        return node.value.label
    return (node.value.label, [shape(child) for child in node.children])


def assert_well_formed(root):
    """Single root, one parent per node, and parent walks that terminate at the root"""
    assert root.parent is None
    root.validate()
    nodes = root.all_nodes
    assert sum(1 for node in nodes if node.parent is None) == 1
    for node in nodes:
        steps = 0
        current = node
        while current.parent is not None:
            current = current.parent
            steps += 1
            assert steps <= len(nodes)
        assert current is root
