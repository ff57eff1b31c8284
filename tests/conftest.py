"""Shared fixtures: deterministic stand-ins for RandomProcess."""

import numpy as np
import pytest

from lockdown_sim.errors import InvalidArgument
from lockdown_sim.types import SimulationState


class ConstantRandom:
    """RandomProcess double: every uniform draw returns ``value`` and
    sampling takes the first k elements in order."""

    def __init__(self, value: float = 0.0):
        self.value = value
        self.n_draws = 0

    def uniform(self, size=None):
        if size is None:
            self.n_draws += 1
            return self.value
        self.n_draws += size
        return np.full(size, self.value, dtype=np.float64)

    def choice_without_replacement(self, population, k):
        if k < 0 or k > len(population):
            raise InvalidArgument(f"k={k} out of range")
        return [population[i] for i in range(k)]


@pytest.fixture
def zero_rng():
    return ConstantRandom(0.0)


@pytest.fixture
def small_state():
    return SimulationState(tick=0, houses=2, agents_per_house=3,
                           initial_sick_agents=1)


@pytest.fixture
def constant_rng():
    """Factory for ConstantRandom doubles with a chosen draw value."""
    return ConstantRandom
