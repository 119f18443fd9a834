"""Tests for reproducible random streams."""

from __future__ import annotations

import numpy as np
import pytest

from nbsim.utils.seed import RandomSource, entropy_seed, get_rng


class TestRandomSource:
    """Tests for RandomSource."""

    def test_uniform_range(self, rng):
        """Uniform draws lie in [0, 1)."""
        draws = rng.uniform(size=10000)
        assert draws.min() >= 0.0
        assert draws.max() < 1.0
        assert isinstance(rng.uniform(), float)

    def test_normal_moments(self, rng):
        """Normal draws are standard normal."""
        draws = rng.normal(size=20000)
        assert abs(draws.mean()) < 0.05
        assert draws.std() == pytest.approx(1.0, abs=0.05)

    def test_same_seed_same_stream(self):
        """Equal seeds give equal streams."""
        a, b = RandomSource(11), RandomSource(11)
        assert [a.uniform() for _ in range(5)] == [b.uniform() for _ in range(5)]

    def test_reseed_restarts_stream(self):
        """Explicit reseeding replays the stream."""
        source = RandomSource(5)
        first = source.normal(size=3)
        source.seed(5)
        np.testing.assert_array_equal(source.normal(size=3), first)

    def test_spawn_independent_of_parent_draws(self):
        """Children depend on the seed, not on parent consumption."""
        a, b = RandomSource(8), RandomSource(8)
        b.uniform(size=100)

        child_a = a.spawn(2)[1]
        child_b = b.spawn(2)[1]
        assert child_a.uniform() == child_b.uniform()

    def test_siblings_differ(self):
        """Spawned siblings are distinct streams."""
        first, second = RandomSource(8).spawn(2)
        assert first.uniform() != second.uniform()

    def test_entropy_seed(self):
        """Fresh seeds are integers and replayable."""
        seed = entropy_seed()
        assert isinstance(seed, int)
        assert RandomSource(seed).entropy == seed
        assert get_rng(1).random() == get_rng(1).random()

    def test_leaves_global_state_untouched(self):
        """Seeding and drawing never reseed NumPy's global generator."""
        before = np.random.get_state()[1].copy()

        source = RandomSource(42)
        source.uniform(size=10)
        source.seed(7)
        source.spawn(3)

        np.testing.assert_array_equal(np.random.get_state()[1], before)

    def test_no_global_reseed_helper(self):
        """Streams are only created explicitly."""
        import nbsim.utils as utils

        assert not hasattr(utils, "set_seed")
