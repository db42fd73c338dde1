"""
Tests for the arithmetic expression payload.
"""
import numpy as np
import pytest

from living_trees.environment import Environment
from living_trees.expressions import (
    BINARY_OPS, UNARY_OPS, VARIABLES, ExpressionGene,
    binary, constant, evaluate_tree, random_genome, random_tree, unary, variable,
)
from living_trees.genome import LivingTreeGenome
from tests.helpers import assert_well_formed


@pytest.fixture
def grid():
    coords = np.linspace(-1.0, 1.0, 5)
    return np.meshgrid(coords, coords)


class TestExpressionGene:

    def test_arity_by_kind(self):
        assert ExpressionGene('variable', 'x').arity == 0
        assert ExpressionGene('constant', constant=1.0).arity == 0
        assert ExpressionGene('unary', 'sin').arity == 1
        assert ExpressionGene('binary', 'add').arity == 2

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            ExpressionGene('ternary', 'if')

    def test_unknown_symbol_rejected(self):
        with pytest.raises(ValueError):
            ExpressionGene('unary', 'add')

    def test_constant_requires_value(self):
        with pytest.raises(ValueError):
            ExpressionGene('constant')

    def test_copy_is_equal_and_independent(self):
        gene = ExpressionGene('constant', constant=1.5)

        clone = gene.copy()
        clone.mutate(1.0, Environment(seed=0))

        assert clone is not gene
        assert gene.constant == 1.5
        assert clone != gene

    def test_rate_zero_never_mutates(self, env):
        gene = ExpressionGene('binary', 'add')

        for _ in range(50):
            gene.mutate(0.0, env)

        assert gene.symbol == 'add'

    @pytest.mark.parametrize("kind,symbol,options", [
        ('variable', 'x', VARIABLES),
        ('unary', 'sin', UNARY_OPS),
        ('binary', 'add', BINARY_OPS),
    ])
    def test_symbol_mutation_keeps_kind(self, env, kind, symbol, options):
        gene = ExpressionGene(kind, symbol)

        gene.mutate(1.0, env)

        assert gene.kind == kind
        assert gene.symbol in options
        assert gene.symbol != symbol

    def test_constant_mutation_respects_bounds(self):
        env = Environment(seed=0, constant_sigma=100.0, constant_bounds=(-1.0, 1.0))
        gene = ExpressionGene('constant', constant=0.0)

        for _ in range(20):
            gene.mutate(1.0, env)
            assert -1.0 <= gene.constant <= 1.0


class TestEvaluate:

    def test_variables_and_constants(self, grid):
        x, y = grid

        np.testing.assert_allclose(evaluate_tree(variable('x'), x, y), x)
        np.testing.assert_allclose(evaluate_tree(variable('t'), x, y, 0.5), np.full_like(x, 0.5))
        np.testing.assert_allclose(evaluate_tree(constant(2.0), x, y), np.full_like(x, 2.0))

    def test_nested_expression(self, grid):
        x, y = grid
        tree = binary('add', unary('neg', variable('x')), binary('mul', variable('y'), constant(2.0)))

        np.testing.assert_allclose(evaluate_tree(tree, x, y), -x + y * 2.0)

    def test_protected_division(self, grid):
        x, y = grid
        tree = binary('div', variable('x'), constant(0.0))

        result = evaluate_tree(tree, x, y)

        assert np.all(np.isfinite(result))
        np.testing.assert_allclose(result, x)

    def test_operand_order(self, grid):
        x, y = grid
        tree = binary('sub', variable('x'), variable('y'))

        np.testing.assert_allclose(evaluate_tree(tree, x, y), x - y)

    def test_evaluate_subtree(self, grid):
        x, y = grid
        tree = binary('add', unary('abs', variable('x')), variable('y'))

        np.testing.assert_allclose(evaluate_tree(tree.children[0], x, y), np.abs(x))


class TestRandomTrees:

    def test_random_tree_respects_max_depth(self, env):
        for _ in range(20):
            tree = random_tree(env, max_depth=4)
            assert tree.depth() <= 5
            assert_well_formed(tree)

    def test_children_match_arity(self, env):
        tree = random_tree(env, max_depth=6)

        for node in tree.all_nodes:
            assert len(node.children) == node.value.arity

    def test_random_genome_is_crossover_eligible(self, env):
        for _ in range(10):
            g = random_genome(env, max_depth=3)
            assert isinstance(g, LivingTreeGenome)
            assert len(g.root_gene.children) == 2

    def test_seeded_trees_reproduce(self):
        first = random_tree(Environment(seed=11))
        second = random_tree(Environment(seed=11))

        assert [n.value for n in first.all_nodes] == [n.value for n in second.all_nodes]

    def test_evolved_trees_still_evaluate(self, env, grid):
        """Arity survives crossover and mutation, so offspring remain evaluable."""
        x, y = grid
        a, b = random_genome(env), random_genome(env)

        for _ in range(10):
            a, b = a.crossover(b, 1.0, env)
            a.mutate(0.5, env)
            b.mutate(0.5, env)

        for g in (a, b):
            assert evaluate_tree(g.root_gene, x, y).shape == x.shape


class TestDeepExpressions:

    def test_evaluate_deep_unary_chain(self, grid):
        x, y = grid
        tree = variable('x')
        for _ in range(4000):
            tree = unary('neg', tree)

        np.testing.assert_allclose(evaluate_tree(tree, x, y), x)
