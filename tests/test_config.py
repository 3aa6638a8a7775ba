"""Tests for simulation configuration, presets and JSON overrides."""

import json

import pytest

from hyperscope.config import PRESETS, SimulationConfig, load_config, preset
from hyperscope.errors import ConfigurationError
from hyperscope.experiment import cli


class TestDefaults:
    def test_default_config_is_valid(self):
        cfg = SimulationConfig().validate()
        assert cfg.dimensions == 5
        assert len(cfg.planes) == 5
        assert len(cfg.focal_distances) == 3

    def test_derived_offset(self):
        cfg = SimulationConfig(bound=100.0, dimensions=4, focal_distances=(400.0, 400.0),
                               rotation_planes=((0, 1, 0.001), (2, 3, 0.002)))
        assert cfg.resolved_offset == pytest.approx(200.0)

    def test_explicit_offset_wins(self):
        assert SimulationConfig(projection_offset=400.0).resolved_offset == 400.0

    def test_viewport_center(self):
        assert SimulationConfig(width=200, height=100).viewport_center == (100.0, 50.0)
        assert SimulationConfig(centered=False).viewport_center == (0.0, 0.0)


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"dimensions": 1},
            {"bound": 0.0},
            {"population": 0},
            {"fps": 0},
            {"friction": 1.5},
            {"friction": 1.0},
            {"focal_distances": ("far", 400.0, 400.0)},
            {"restitution": 0.5},
            {"gravity_axis": 5},
            {"rotation_planes": ((0, 5, 0.001),)},
            {"rotation_planes": ((1, 1, 0.001),)},
            {"rotation_planes": ((0, 1),)},
            {"focal_distances": (400.0, 400.0)},
            {"focal_distances": (400.0, -1.0, 400.0)},
            {"interaction": "gravity-well"},
            {"interaction": "flocking"},
            {"color_mode": "plaid"},
            {"turbulence_probability": 1.5},
            {"max_speed": 0.0},
            {"trail_persistence": 1.0},
        ],
    )
    def test_rejects(self, overrides):
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_dict(overrides).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SimulationConfig(dimensions=1).validate()


class TestPresets:
    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_every_preset_validates(self, name):
        cfg = preset(name)
        assert isinstance(cfg, SimulationConfig)

    def test_flock_is_two_dimensional(self):
        cfg = preset("flock")
        assert cfg.dimensions == 2
        assert cfg.interaction == "flocking"
        assert cfg.population == 1000

    def test_overrides(self):
        cfg = preset("swarm", population=7)
        assert cfg.population == 7
        assert cfg.interaction == "pairwise"

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            preset("nebula")


class TestSerialisation:
    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="frobnicate"):
            SimulationConfig.from_dict({"frobnicate": 1})

    def test_round_trip_through_json(self):
        cfg = preset("swarm")
        restored = SimulationConfig.from_dict(json.loads(json.dumps(cfg.to_dict())))
        assert restored == cfg

    def test_load_config_with_preset(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({"preset": "jitter", "population": 50, "particle_color": [0, 255, 0]}))
        cfg = load_config(path)
        assert cfg.population == 50
        assert cfg.audio_jitter_gain == 1.0
        assert cfg.particle_color == (0, 255, 0)

    def test_load_config_on_base(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({"gravity": 0.0}))
        cfg = load_config(path, base=preset("swarm"))
        assert cfg.gravity == 0.0
        assert cfg.interaction == "pairwise"

    def test_load_config_rejects_non_object(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ConfigurationError):
            load_config(path)


class TestMalformedValues:
    @pytest.mark.parametrize(
        "data",
        [
            {"rotation_planes": [1, 2, 3]},
            {"rotation_planes": [[0, 1, "fast"]]},
            {"focal_distances": 400},
            {"particle_color": 255},
        ],
    )
    def test_load_config_raises_configuration_error(self, tmp_path, data):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(data))
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_cli_reports_instead_of_traceback(self, tmp_path, capsys):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({"focal_distances": 400}))
        with pytest.raises(SystemExit) as exc:
            cli.main(["--config", str(path)])
        assert exc.value.code == 2
        assert "Error:" in capsys.readouterr().err


def test_jitter_box_spans_viewport_height():
    cfg = preset("jitter")
    assert 2 * cfg.bound * cfg.viewport_scale == cfg.height
