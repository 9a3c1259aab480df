"""
Jitter sources for the particle update.

The physics step never touches a global random state: every random draw
goes through a NoiseSource handed in by the caller. Seed it for
reproducible trajectories, or use QuietNoise to switch jitter off.
"""

import numpy as np


class NoiseSource:
    """Uniform jitter backed by a numpy Generator."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def symmetric(self, half_range: float) -> float:
        """Uniform sample in [-half_range, half_range]."""
        return float(self.rng.uniform(-half_range, half_range))

    def fraction(self) -> float:
        """Uniform sample in [0, 1)."""
        return float(self.rng.random())


class QuietNoise(NoiseSource):
    """
    Zero jitter. Positions drawn through `fraction` land at the
    midpoint of their range.
    """

    def __init__(self):
        self.seed = None
        self.rng = None

    def symmetric(self, half_range: float) -> float:
        return 0.0

    def fraction(self) -> float:
        return 0.5
