"""
Tests for the game loop: timers, ticks, catches, expiries and restarts.
"""

import pytest

from drop_catch.catch_core.config_loader import load_config
from drop_catch.catch_core.game_loop import GameLoop
from drop_catch.catch_core.game_state import GamePhase
from drop_catch.catch_core.object_catalog import ObjectClass
from drop_catch.catch_core.rng import SpawnDecision


class FixedDraws:
    """Draw source replaying a fixed sequence of uniform values."""

    def __init__(self, values):
        self._values = list(values)
        self._index = 0

    def random(self):
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


# Catcher starts at 50 with width 15, so x=57.5 is dead center
def aligned(object_class, fall_duration_ms=1000.0, x=57.5):
    return SpawnDecision(object_class=object_class, x=x, fall_duration_ms=fall_duration_ms)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def game(config):
    g = GameLoop(config=config, seed=42)
    g.start(now_ms=0.0)
    return g


@pytest.fixture
def all_good_game(config):
    """Every spawn is a good object at x=50 falling for 1000ms."""
    g = GameLoop(config=config, rng=FixedDraws([0.0, 0.5, 0.0]))
    g.start(now_ms=0.0)
    return g


class TestLifecycle:
    """Test start, game over and restart."""

    def test_not_started_ignores_everything(self, config):
        g = GameLoop(config=config, seed=1)
        assert g.phase is GamePhase.NOT_STARTED
        assert g.spawn_object(now_ms=0.0) is None
        assert g.move_catcher(10) == 50.0
        result = g.advance(10000.0)
        assert result.ticks == 0
        assert g.active_objects == ()

    def test_start_creates_timers(self, game):
        assert game.running
        assert set(game.scheduler.task_names) == {"spawn", "tick"}
        assert game.spawner.interval_ms == 2000

    def test_three_bad_catches_game_over(self, game):
        game.spawn_object(0.0, aligned(ObjectClass.GOOD))
        for _ in range(3):
            game.spawn_object(0.0, aligned(ObjectClass.BAD))

        result = game.tick(900.0)

        assert game.lives == 0
        assert game.phase is GamePhase.GAME_OVER
        assert result.game_over
        assert game.state.final_score == 10
        assert game.state.final_level == 1
        assert game.active_objects == ()
        assert game.scheduler.task_names == []

    def test_game_over_stops_all_timers(self, game):
        for _ in range(3):
            game.spawn_object(0.0, aligned(ObjectClass.BAD))
        game.advance(1000.0)
        assert game.is_over

        result = game.advance(60000.0)
        assert result.spawned == []
        assert result.ticks == 0
        assert game.score == 0

    def test_game_over_mid_tick_skips_remaining_catches(self, game):
        for _ in range(3):
            game.spawn_object(0.0, aligned(ObjectClass.BAD))
        game.spawn_object(0.0, aligned(ObjectClass.BONUS))

        result = game.tick(900.0)
        assert game.is_over
        assert game.state.final_score == 0
        assert len(result.caught) == 3

    def test_restart_resets_state_and_objects(self, game):
        for _ in range(10):
            game.spawn_object(0.0, aligned(ObjectClass.GOOD))
        game.spawn_object(0.0, aligned(ObjectClass.GOOD, x=10.0))
        game.tick(900.0)
        assert game.level == 2
        assert len(game.active_objects) == 1

        game.restart(now_ms=950.0)
        assert game.running
        assert (game.score, game.lives, game.level) == (0, 3, 1)
        assert game.state.spawn_interval_ms == 2000
        assert game.spawner.interval_ms == 2000
        assert game.active_objects == ()

    def test_restart_after_game_over(self, game):
        for _ in range(3):
            game.spawn_object(0.0, aligned(ObjectClass.BAD))
        game.tick(900.0)
        assert game.is_over

        game.restart(now_ms=5000.0)
        assert game.phase is GamePhase.RUNNING
        assert game.lives == 3
        result = game.advance(7000.0)
        assert len(result.spawned) == 1

    def test_restart_cancels_stale_timers(self, game):
        """A timer from before a restart never fires again."""
        game.advance(100.0)
        old_spawn = game.scheduler.get("spawn")
        old_tick = game.scheduler.get("tick")

        game.restart(now_ms=100.0)
        game.set_catcher_position(100)
        game.advance(5000.0)

        assert old_spawn.cancelled and old_tick.cancelled
        assert old_spawn.fire_count == 0
        assert old_tick.fire_count == 6
        assert game.scheduler.get("spawn").fire_count == 2


class TestTicks:
    """Test per-tick evaluation."""

    def test_ten_good_catches_level_two(self, game):
        for _ in range(10):
            game.spawn_object(0.0, aligned(ObjectClass.GOOD))

        result = game.tick(900.0)

        assert game.score == 100
        assert game.level == 2
        assert game.state.spawn_interval_ms == 1800
        assert result.delta_score == 100
        assert result.leveled_up
        assert len(result.caught) == 10
        assert game.active_objects == ()

    def test_bad_catch_costs_one_life(self, game):
        game.spawn_object(0.0, aligned(ObjectClass.BAD))
        result = game.tick(900.0)
        assert game.lives == 2
        assert result.delta_lives == -1
        assert result.caught[0].life_lost

    def test_bonus_catch(self, game):
        game.spawn_object(0.0, aligned(ObjectClass.BONUS))
        game.tick(900.0)
        assert game.score == 50

    def test_uncaught_object_expires(self, game):
        obj = game.spawn_object(0.0, aligned(ObjectClass.GOOD, x=10.0))

        result = game.tick(999.0)
        assert result.expired == []
        assert len(game.active_objects) == 1

        result = game.tick(1000.0)
        assert result.expired == [obj.id]
        assert game.active_objects == ()
        assert (game.score, game.lives) == (0, 3)
        assert game.get_info()["expired_total"] == 1

    def test_catch_needs_overlap_in_band(self, game):
        game.spawn_object(0.0, aligned(ObjectClass.GOOD))
        assert game.tick(500.0).caught == []
        assert len(game.tick(880.0).caught) == 1

    def test_moving_catcher_away_avoids_bad(self, game):
        game.spawn_object(0.0, aligned(ObjectClass.BAD))
        game.move_catcher(-40)
        game.advance(1100.0)
        assert game.lives == 3
        assert game.get_info()["expired_total"] == 1

    def test_catcher_moves_clamped(self, game):
        assert game.move_catcher(-500) == 0.0
        assert game.set_catcher_position(250) == 100.0
        assert game.catcher.x == 100.0


class TestTimers:
    """Test spawn and tick cadences driven by advance()."""

    def test_tick_cadence(self, game, config):
        result = game.advance(10 * config.loop.tick_ms)
        assert result.ticks == 10

    def test_first_spawn_after_one_interval(self, game):
        assert game.advance(1999.0).spawned == []
        result = game.advance(2000.0)
        assert len(result.spawned) == 1
        obj = game.active_objects[0]
        assert obj.spawn_time_ms == 2000.0

    def test_spawns_keep_cadence(self, game):
        game.set_catcher_position(100)
        result = game.advance(6500.0)
        assert len(result.spawned) == 3
        assert game.get_info()["spawned_total"] == 3

    def test_run_for_continues_from_last_time(self, game):
        game.set_catcher_position(100)
        game.advance(1000.0)
        result = game.run_for(1000.0)
        assert len(result.spawned) == 1
        assert game.now_ms == 2000.0

    def test_level_up_reconfigures_spawn_cadence(self, all_good_game):
        """After the tenth catch the next spawn is 1800ms after the level-up."""
        game = all_good_game
        game.advance(21000.0)

        assert game.score == 100
        assert game.level == 2
        # Spawn at 20000 is caught on the tick at 20864
        assert game.spawner.interval_ms == 1800
        assert game.spawner.next_spawn_ms == 20864 + 1800

        assert game.advance(22663.0).spawned == []
        assert len(game.advance(22664.0).spawned) == 1

    def test_render_callback_receives_snapshots(self, config):
        snapshots = []
        g = GameLoop(config=config, seed=3, render_callback=snapshots.append)
        g.start(now_ms=0.0)
        g.advance(2100.0)
        g.move_catcher(10)

        assert snapshots[0].phase == "running"
        assert snapshots[-1].catcher_x == 60.0
        assert any(snap.objects_count == 1 for snap in snapshots)


class TestRenderSink:
    """Test what the render callback is told, and when."""

    @pytest.fixture
    def recorded(self, config):
        snapshots = []
        g = GameLoop(config=config, seed=5, render_callback=snapshots.append)
        g.start(now_ms=0.0)
        return g, snapshots

    def test_each_catch_in_one_advance_is_pushed(self, recorded):
        game, snapshots = recorded
        game.spawn_object(0.0, aligned(ObjectClass.GOOD, fall_duration_ms=1000.0))
        game.spawn_object(0.0, aligned(ObjectClass.GOOD, fall_duration_ms=1500.0))

        game.advance(1400.0)

        scores = [snap.score for snap in snapshots]
        assert 10 in scores
        assert 20 in scores
        assert scores.index(10) < scores.index(20)

    def test_spawns_pushed_as_they_happen(self, recorded):
        game, snapshots = recorded
        game.set_catcher_position(100)
        game.advance(4500.0)

        at_first_spawn = [snap.objects_count for snap in snapshots if snap.time_ms == 2000.0]
        at_second_spawn = [snap.objects_count for snap in snapshots if snap.time_ms == 4000.0]
        assert at_first_spawn and at_first_spawn[0] == 1
        assert at_second_spawn and at_second_spawn[0] >= 1
        assert game.get_info()["spawned_total"] == 2

    def test_game_over_pushed(self, recorded):
        game, snapshots = recorded
        for _ in range(3):
            game.spawn_object(0.0, aligned(ObjectClass.BAD))
        game.advance(3000.0)

        assert snapshots[-1].game_over
        assert snapshots[-1].final_score == 0

    def test_pushed_times_never_go_back(self, recorded):
        game, snapshots = recorded
        game.spawn_object(0.0, aligned(ObjectClass.GOOD, x=10.0))
        game.advance(2500.0)
        game.tick(3000.0)

        times = [snap.time_ms for snap in snapshots]
        assert times == sorted(times)


class TestManualTick:
    """Test tick() interleaved with timer-driven advance()."""

    def test_advance_after_tick_does_not_evaluate_earlier(self, config):
        snapshots = []
        game = GameLoop(config=config, seed=5, render_callback=snapshots.append)
        game.start(now_ms=0.0)
        game.spawn_object(0.0, aligned(ObjectClass.GOOD, x=10.0))

        assert game.tick(900.0).caught == []
        snapshots.clear()
        game.set_catcher_position(2.5)
        game.advance(950.0)

        times = [snap.time_ms for snap in snapshots]
        assert min(times) >= 900.0
        assert times == sorted(times)
        # Caught on the first tick after 900, with the moved catcher
        assert game.score == 10
        assert game.get_info()["caught_total"] == 1
        assert game.now_ms == 950.0

    def test_tick_runs_due_timers_first(self, game):
        result = game.tick(2000.0)
        assert len(result.spawned) == 1
        assert game.scheduler.get("tick").next_due_ms > 2000.0

    def test_tick_in_the_past_does_not_rewind(self, game):
        game.advance(1000.0)
        game.tick(500.0)
        assert game.now_ms == 1000.0


class TestInfo:
    """Test info and render data."""

    def test_info_keys(self, game):
        info = game.get_info()
        for key in ("phase", "score", "lives", "level", "spawn_interval_ms",
                    "objects_count", "spawned_total", "caught_total", "expired_total"):
            assert key in info

    def test_render_data(self, game):
        game.spawn_object(0.0, aligned(ObjectClass.BONUS))
        game.tick(500.0)
        data = game.get_render_data()
        assert data["objects"][0]["class"] == "bonus"
        assert data["objects"][0]["y"] == pytest.approx(50.0)
        assert data["catcher_x"] == 50.0
        assert not data["game_over"]
