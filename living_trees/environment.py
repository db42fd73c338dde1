"""
living_trees/environment.py - Random source and settings threaded through genetic operators
"""
from types import MappingProxyType
from typing import Any, Mapping, Optional

import numpy as np


class Environment:
    """Carries the random generator and payload settings for one worker.

    The core only draws from ``rng``; ``settings`` are passed through
    untouched to payload mutation rules.
    """

    def __init__(self, seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None, **settings: Any):
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._settings = dict(settings)

    @property
    def settings(self) -> Mapping[str, Any]:
        return MappingProxyType(self._settings)

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def uniform(self) -> float:
        """Draw one float in [0, 1)"""
        return float(self.rng.random())

    def choice_index(self, n: int) -> int:
        """Draw an index uniformly from range(n)"""
        if n <= 0:
            raise ValueError(f"Cannot choose from {n} candidates")
        return int(self.rng.integers(n))

    def spawn(self) -> 'Environment':
        """Create an environment with an independent random stream and the same settings"""
        return Environment(seed=None, rng=self.rng.spawn(1)[0], **self._settings)

    def __repr__(self) -> str:
        return f"Environment(seed={self.seed!r}, settings={self._settings!r})"
