"""
Simulation context: seeded random stream plus elapsed simulated time.

Every stochastic operation draws from the Generator held here, so a run
is fully reproducible from its seed. Independent motors get independent
streams via spawn().

Units:
- elapsed_time: s (simulated)
"""

import numpy as np
from typing import List, Optional


class SimulationContext:
    """
    Random stream and time accumulator shared by one motor's operations.

    Uses numpy PCG64 with an explicit seed for reproducibility.
    """

    def __init__(self, seed: int = 42):
        self._seed = seed
        self._seed_sequence = np.random.SeedSequence(seed)
        self._rng = np.random.Generator(np.random.PCG64(self._seed_sequence))
        self.elapsed_time = 0.0

    @property
    def seed(self) -> int:
        """Return the seed used for this context."""
        return self._seed

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    def advance(self, dt: float) -> float:
        """Add dt to elapsed time and return the new total."""
        self.elapsed_time += dt
        return self.elapsed_time

    def reset_time(self) -> None:
        self.elapsed_time = 0.0

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset RNG state and elapsed time.

        Args:
            seed: New seed (keeps the current seed if None)
        """
        if seed is not None:
            self._seed = seed
        self._seed_sequence = np.random.SeedSequence(self._seed)
        self._rng = np.random.Generator(np.random.PCG64(self._seed_sequence))
        self.elapsed_time = 0.0

    def spawn(self, n: int) -> List["SimulationContext"]:
        """
        Create n child contexts with statistically independent streams.

        Children are deterministic given this context's seed and the
        number of spawn calls made so far.
        """
        children = []
        for child_seq in self._seed_sequence.spawn(n):
            child = SimulationContext.__new__(SimulationContext)
            child._seed = self._seed
            child._seed_sequence = child_seq
            child._rng = np.random.Generator(np.random.PCG64(child_seq))
            child.elapsed_time = 0.0
            children.append(child)
        return children


__all__ = ["SimulationContext"]
