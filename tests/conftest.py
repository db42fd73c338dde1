import pytest

from living_trees.environment import Environment


@pytest.fixture
def env():
    return Environment(seed=1234)
