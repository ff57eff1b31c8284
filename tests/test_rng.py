"""Tests for lockdown_sim.rng — seeded random process and checkpointing."""

import numpy as np
import pytest

from lockdown_sim.errors import InvalidArgument
from lockdown_sim.rng import RandomProcess, create_random_process


class TestCreateRandomProcess:
    def test_returns_random_process(self):
        rng = create_random_process(42)
        assert isinstance(rng, RandomProcess)
        assert isinstance(rng.generator, np.random.Generator)

    def test_reproducibility(self):
        """Same seed produces identical sequences."""
        v1 = create_random_process(42).uniform(100)
        v2 = create_random_process(42).uniform(100)
        np.testing.assert_array_equal(v1, v2)

    def test_different_seeds_differ(self):
        v1 = create_random_process(42).uniform(10)
        v2 = create_random_process(43).uniform(10)
        assert not np.array_equal(v1, v2)

    def test_negative_seed_rejected(self):
        with pytest.raises(InvalidArgument):
            create_random_process(-1)


class TestUniform:
    def test_scalar_in_unit_interval(self):
        rng = create_random_process(1)
        for _ in range(200):
            u = rng.uniform()
            assert isinstance(u, float)
            assert 0.0 <= u < 1.0

    def test_array_draws_match_scalar_draws(self):
        """uniform(n) consumes the stream like n scalar draws."""
        batch = create_random_process(7).uniform(5)
        rng = create_random_process(7)
        scalars = [rng.uniform() for _ in range(5)]
        np.testing.assert_allclose(batch, scalars)


class TestChoiceWithoutReplacement:
    def test_distinct_elements(self):
        rng = create_random_process(3)
        population = [f"venue-{i}" for i in range(20)]
        picks = rng.choice_without_replacement(population, 8)
        assert len(picks) == 8
        assert len(set(picks)) == 8
        assert set(picks) <= set(population)

    def test_full_population(self):
        rng = create_random_process(3)
        picks = rng.choice_without_replacement(range(6), 6)
        assert sorted(picks) == list(range(6))

    def test_zero(self):
        rng = create_random_process(3)
        assert rng.choice_without_replacement(['a', 'b'], 0) == []

    def test_k_exceeds_population(self):
        rng = create_random_process(3)
        with pytest.raises(InvalidArgument):
            rng.choice_without_replacement(['a', 'b'], 3)

    def test_negative_k(self):
        rng = create_random_process(3)
        with pytest.raises(InvalidArgument):
            rng.choice_without_replacement(['a', 'b'], -1)

    def test_invalid_argument_is_value_error(self):
        rng = create_random_process(3)
        with pytest.raises(ValueError):
            rng.choice_without_replacement([], 1)


class TestCheckpointing:
    def test_snapshot_and_restore(self):
        """Round-trip: advance → snapshot → draw → restore → same draws."""
        rng = create_random_process(42)
        rng.uniform(10)
        snapshot = rng.state_snapshot()
        expected = rng.uniform(20)

        rng.uniform(50)
        rng.restore_state(snapshot)
        np.testing.assert_array_equal(rng.uniform(20), expected)

    def test_restore_into_fresh_process(self):
        rng = create_random_process(42)
        rng.uniform(10)
        snapshot = rng.state_snapshot()
        expected = rng.choice_without_replacement(list(range(100)), 10)

        other = create_random_process(0)
        other.restore_state(snapshot)
        assert other.choice_without_replacement(list(range(100)), 10) == expected
