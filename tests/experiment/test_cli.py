"""Tests for the render command line."""

import argparse
import json

import pytest

from hyperscope.errors import ConfigurationError
from hyperscope.experiment import cli
from hyperscope.experiment.encoder import ffmpeg_available


def _parse(argv):
    parser = argparse.ArgumentParser()
    cli.add_simulation_arguments(parser)
    return parser.parse_args(argv)


class TestBuildConfig:
    def test_preset_and_flags(self):
        args = _parse(["--preset", "swarm", "--population", "9", "--depth-sort", "--no-wireframe"])
        cfg = cli.build_config(args, width=320, height=None)
        assert cfg.interaction == "pairwise"
        assert cfg.population == 9
        assert cfg.depth_sort is True
        assert cfg.draw_wireframe is False
        assert cfg.width == 320
        assert cfg.height == 1080

    def test_json_overrides(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({"gravity": 0.0, "bound": 120.0}))
        cfg = cli.build_config(_parse(["--config", str(path)]))
        assert cfg.gravity == 0.0
        assert cfg.bound == 120.0

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError):
            cli.build_config(_parse(["--population", "0"]))


def test_missing_audio_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli.main([str(tmp_path / "nope.wav")])
    assert exc.value.code == 1


def test_progress_bar(capsys):
    cli._progress_bar(5, 10)
    cli._progress_bar(10, 10)
    assert "frame 10/10" in capsys.readouterr().out


@pytest.mark.skipif(not ffmpeg_available(), reason="ffmpeg not on PATH")
def test_silent_render(tmp_path):
    output = tmp_path / "clip.mp4"
    cli.main([
        "-o", str(output), "--width", "64", "--height", "48", "--fps", "10",
        "--duration", "0.5", "--population", "5", "--seed", "1", "-q", "fast",
    ])
    assert output.exists()
    assert output.stat().st_size > 0
