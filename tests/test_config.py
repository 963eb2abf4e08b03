"""
Tests for configuration loading and validation.
"""

import pytest
import yaml

from drop_catch.catch_core.config_loader import load_config, reload_config, get_config
from drop_catch.catch_core.object_catalog import ObjectCatalog, ObjectClass


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    from pathlib import Path
    import drop_catch
    path = Path(drop_catch.__file__).parent / "game_config.yaml"
    with open(path) as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(raw, f)
    return str(path)


class TestDefaults:
    """Test the shipped configuration."""

    def test_leveling_defaults(self, config):
        lv = config.leveling
        assert lv.start_lives == 3
        assert lv.points_per_level == 100
        assert lv.initial_spawn_interval_ms == 2000
        assert lv.spawn_interval_step_ms == 200
        assert lv.min_spawn_interval_ms == 500
        assert lv.mode == "exact"

    def test_spawn_ranges(self, config):
        assert config.rng.position_min == 7.5
        assert config.rng.position_max == 92.5
        assert config.rng.fall_duration_min_ms == 1000
        assert config.rng.fall_duration_max_ms == 3000

    def test_object_classes(self, config):
        catalog = ObjectCatalog(config)
        assert catalog[ObjectClass.GOOD].points == 10
        assert catalog[ObjectClass.BONUS].points == 50
        assert catalog[ObjectClass.BAD].points == 0
        assert catalog[ObjectClass.BAD].costs_life
        assert not catalog["good"].costs_life
        assert [t.threshold for t in catalog] == [0.6, 0.9, 1.0]

    def test_unknown_class_raises(self, config):
        with pytest.raises(KeyError):
            ObjectCatalog(config)["rock"]

    def test_cached_config(self):
        reloaded = reload_config()
        assert get_config() is reloaded


class TestValidation:
    """Test rejection of inconsistent configs."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_custom_file_loads(self, tmp_path, raw_config):
        raw_config["leveling"]["start_lives"] = 5
        config = load_config(write_config(tmp_path, raw_config))
        assert config.leveling.start_lives == 5

    def test_thresholds_must_increase(self, tmp_path, raw_config):
        raw_config["objects"][1]["threshold"] = 0.5
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_last_threshold_must_be_one(self, tmp_path, raw_config):
        raw_config["objects"][2]["threshold"] = 0.95
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_interval_floor_above_start(self, tmp_path, raw_config):
        raw_config["leveling"]["min_spawn_interval_ms"] = 3000
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_unknown_level_mode(self, tmp_path, raw_config):
        raw_config["leveling"]["mode"] = "sometimes"
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_inverted_position_range(self, tmp_path, raw_config):
        raw_config["rng"]["position_min"] = 95.0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))
