"""
living_trees/expressions.py - Arithmetic expression genes and safe numpy primitives

A ready-made payload for tree genomes: each node carries one primitive
(variable, constant, unary or binary operator) and the tree shape supplies
the operands.
"""
from typing import Any, Dict, Optional

import numpy as np

from .environment import Environment
from .gene import TreeGeneType
from .genome import LivingTreeGenome
from .tree import LivingTreeGene

# Primitive sets for random generation and mutation
VARIABLES = ('x', 'y', 't')
UNARY_OPS = ('sin', 'cos', 'tanh', 'abs', 'sqrt', 'neg')
BINARY_OPS = ('add', 'sub', 'mul', 'div', 'mod', 'pow')

SYMBOLS = {
    'variable': VARIABLES,
    'unary': UNARY_OPS,
    'binary': BINARY_OPS,
}
ARITY = {'variable': 0, 'constant': 0, 'unary': 1, 'binary': 2}

DEFAULT_CONSTANT_SIGMA = 0.5
DEFAULT_CONSTANT_BOUNDS = (-10.0, 10.0)
DEFAULT_TERMINAL_PROBABILITY = 0.3


class ExpressionGene(TreeGeneType):
    """One expression primitive; operands come from the node's children"""

    def __init__(self, kind: str, symbol: Optional[str] = None, constant: Optional[float] = None):
        if kind not in ARITY:
            raise ValueError(f"Unknown expression kind: {kind}")
        if kind == 'constant':
            if constant is None:
                raise ValueError("Constant genes need a value")
            symbol = None
            constant = float(constant)
        elif symbol not in SYMBOLS[kind]:
            raise ValueError(f"Unknown {kind} symbol: {symbol}")
        self.kind = kind
        self.symbol = symbol
        self.constant = constant

    @property
    def arity(self) -> int:
        return ARITY[self.kind]

    def mutate(self, rate: float, environment: Environment) -> None:
        """Point mutation that keeps arity, applied with probability rate"""
        if environment.uniform() >= rate:
            return

        if self.kind == 'constant':
            sigma = environment.get('constant_sigma', DEFAULT_CONSTANT_SIGMA)
            low, high = environment.get('constant_bounds', DEFAULT_CONSTANT_BOUNDS)
            new_value = self.constant + environment.rng.normal(0.0, sigma)
            self.constant = float(np.clip(new_value, low, high))
        else:
            options = [s for s in SYMBOLS[self.kind] if s != self.symbol]
            self.symbol = options[environment.choice_index(len(options))]

    def copy(self) -> 'ExpressionGene':
        return ExpressionGene(self.kind, self.symbol, self.constant)

    def apply(self, operands, x: np.ndarray, y: np.ndarray, t: float) -> np.ndarray:
        """Evaluate this primitive given already-evaluated operands"""
        if self.kind == 'variable':
            if self.symbol == 'x':
                return x
            elif self.symbol == 'y':
                return y
            return np.full_like(x, t)

        if self.kind == 'constant':
            return np.full_like(x, self.constant)

        if self.kind == 'unary':
            value = operands[0]
            if self.symbol == 'sin':
                return np.sin(np.clip(value, -100, 100))
            elif self.symbol == 'cos':
                return np.cos(np.clip(value, -100, 100))
            elif self.symbol == 'tanh':
                return np.tanh(np.clip(value, -100, 100))
            elif self.symbol == 'abs':
                return np.abs(value)
            elif self.symbol == 'sqrt':
                return np.sqrt(np.maximum(np.abs(value), 1e-10))
            return -value

        left, right = operands
        if self.symbol == 'add':
            result = left + right
        elif self.symbol == 'sub':
            result = left - right
        elif self.symbol == 'mul':
            result = left * right
        elif self.symbol == 'div':
            # Protected division
            divisor = np.where(np.abs(right) < 1e-10, 1.0, right)
            result = left / divisor
        elif self.symbol == 'mod':
            divisor = np.where(np.abs(right) < 1e-10, 1.0, right)
            result = np.mod(left, divisor)
        else:
            base = np.clip(left, -100, 100)
            exponent = np.clip(right, -10, 10)
            result = np.power(np.abs(base), exponent) * np.sign(base)

        # Clip to prevent overflow
        return np.clip(result, -1000, 1000)

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind, 'symbol': self.symbol, 'constant': self.constant}

    def __eq__(self, other):
        if not isinstance(other, ExpressionGene):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self):
        if self.kind == 'constant':
            return f"ExpressionGene('constant', constant={self.constant:.3f})"
        return f"ExpressionGene({self.kind!r}, {self.symbol!r})"


def variable(name: str) -> LivingTreeGene:
    return LivingTreeGene(ExpressionGene('variable', name))


def constant(value: float) -> LivingTreeGene:
    return LivingTreeGene(ExpressionGene('constant', constant=value))


def unary(op: str, child: LivingTreeGene) -> LivingTreeGene:
    return LivingTreeGene(ExpressionGene('unary', op), [child])


def binary(op: str, left: LivingTreeGene, right: LivingTreeGene) -> LivingTreeGene:
    return LivingTreeGene(ExpressionGene('binary', op), [left, right])


def _pick(environment: Environment, options):
    return options[environment.choice_index(len(options))]


def random_tree(environment: Environment, max_depth: int = 5, depth: int = 0) -> LivingTreeGene:
    """Grow a random expression tree"""
    terminal_probability = environment.get('terminal_probability', DEFAULT_TERMINAL_PROBABILITY)

    if depth >= max_depth or environment.uniform() < terminal_probability:
        if environment.uniform() < 0.7:
            return variable(_pick(environment, VARIABLES))
        low, high = environment.get('constant_bounds', DEFAULT_CONSTANT_BOUNDS)
        return constant(environment.rng.uniform(max(low, -2.0), min(high, 2.0)))

    if environment.uniform() < 0.5:
        return unary(_pick(environment, UNARY_OPS), random_tree(environment, max_depth, depth + 1))
    return binary(_pick(environment, BINARY_OPS),
                  random_tree(environment, max_depth, depth + 1),
                  random_tree(environment, max_depth, depth + 1))


def random_genome(environment: Environment, max_depth: int = 5) -> LivingTreeGenome:
    """Random genome with a binary root, so it is always eligible for crossover"""
    max_depth = max(2, max_depth)
    root = binary(_pick(environment, BINARY_OPS),
                  random_tree(environment, max_depth, 1),
                  random_tree(environment, max_depth, 1))
    return LivingTreeGenome(root)


def evaluate_tree(node: LivingTreeGene, x: np.ndarray, y: np.ndarray, t: float = 0.0) -> np.ndarray:
    """Evaluate an expression tree, children before parents"""
    results = {}
    for current in node.walk_bottom_up():
        operands = [results.pop(id(child)) for child in current.children]
        results[id(current)] = current.value.apply(operands, x, y, t)
    return results[id(node)]
