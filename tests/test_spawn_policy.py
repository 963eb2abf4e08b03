"""
Tests for the random spawn policy.
"""

import pytest
from collections import Counter

from drop_catch.catch_core.config_loader import load_config
from drop_catch.catch_core.object_catalog import ObjectClass
from drop_catch.catch_core.rng import RandomPolicy


class FixedDraws:
    """Draw source replaying a fixed sequence of uniform values."""

    def __init__(self, values):
        self._values = list(values)
        self._index = 0

    def random(self):
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


@pytest.fixture
def config():
    return load_config()


class TestClassify:
    """Test the draw -> class thresholds."""

    def test_low_draw_is_good(self, config):
        policy = RandomPolicy(config, seed=1)
        assert policy.classify(0.0) is ObjectClass.GOOD
        assert policy.classify(0.5999) is ObjectClass.GOOD

    def test_boundary_06_is_bad(self, config):
        """A draw exactly on 0.6 falls into the next class."""
        policy = RandomPolicy(config, seed=1)
        assert policy.classify(0.6) is ObjectClass.BAD
        assert policy.classify(0.8999) is ObjectClass.BAD

    def test_boundary_09_is_bonus(self, config):
        policy = RandomPolicy(config, seed=1)
        assert policy.classify(0.9) is ObjectClass.BONUS
        assert policy.classify(0.9999) is ObjectClass.BONUS

    def test_draw_095_yields_bonus(self, config):
        """Sampling with a 0.95 class draw spawns a bonus object."""
        policy = RandomPolicy(config, rng=FixedDraws([0.95, 0.5, 0.5]))
        decision = policy.sample()
        assert decision.object_class is ObjectClass.BONUS


class TestSample:
    """Test full spawn decisions."""

    def test_draw_order_is_class_position_duration(self, config):
        policy = RandomPolicy(config, rng=FixedDraws([0.0, 0.0, 0.0]))
        decision = policy.sample()
        assert decision.object_class is ObjectClass.GOOD
        assert decision.x == pytest.approx(7.5)
        assert decision.fall_duration_ms == pytest.approx(1000.0)

    def test_position_and_duration_scale(self, config):
        policy = RandomPolicy(config, rng=FixedDraws([0.7, 0.5, 0.5]))
        decision = policy.sample()
        assert decision.object_class is ObjectClass.BAD
        assert decision.x == pytest.approx(50.0)
        assert decision.fall_duration_ms == pytest.approx(2000.0)

    def test_ranges(self, config):
        """Positions stay in [7.5, 92.5] and durations in [1000, 3000)."""
        policy = RandomPolicy(config, seed=7)
        for _ in range(2000):
            decision = policy.sample()
            assert 7.5 <= decision.x <= 92.5
            assert 1000.0 <= decision.fall_duration_ms < 3000.0

    def test_deterministic_with_seed(self, config):
        p1 = RandomPolicy(config, seed=42)
        p2 = RandomPolicy(config, seed=42)
        assert [p1.sample() for _ in range(50)] == [p2.sample() for _ in range(50)]

    def test_reset_restores_sequence(self, config):
        policy = RandomPolicy(config, seed=42)
        initial = [policy.sample() for _ in range(10)]
        policy.reset(seed=42)
        assert [policy.sample() for _ in range(10)] == initial

    def test_class_distribution(self, config):
        """Classes appear roughly 60/30/10."""
        policy = RandomPolicy(config, seed=123)
        counts = Counter(policy.sample().object_class for _ in range(10000))

        assert counts[ObjectClass.GOOD] / 10000 == pytest.approx(0.6, abs=0.03)
        assert counts[ObjectClass.BAD] / 10000 == pytest.approx(0.3, abs=0.03)
        assert counts[ObjectClass.BONUS] / 10000 == pytest.approx(0.1, abs=0.02)
