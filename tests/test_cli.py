import json
from pathlib import Path

import numpy as np
import yaml
from typer.testing import CliRunner

from noiselab.cli.app import app
from noiselab.core.engine import NoiseEngine


def test_selftest_passes():
    runner = CliRunner()
    result = runner.invoke(app, ["selftest"])
    assert result.exit_code == 0, result.output
    assert "Selftest passed" in result.output


def test_sample_matches_engine():
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["sample", "--x", "1.25", "--y", "-0.5", "--kind", "value", "--octaves", "3", "--seed", "9", "--hash", "lcg"],
    )
    assert result.exit_code == 0, result.output

    engine = NoiseEngine(8, seed=9)
    engine.set_hash("lcg")
    assert float(result.output.strip()) == engine.generate(1.25, -0.5, "value", 3)


def test_sample_rejects_bad_octaves():
    runner = CliRunner()
    result = runner.invoke(app, ["sample", "--x", "0", "--y", "0", "--octaves", "0"])
    assert result.exit_code == 1


def test_info_json_reports_bounds():
    runner = CliRunner()
    result = runner.invoke(app, ["info", "--json", "--log2-size", "10", "--distribution", "cosine"])
    assert result.exit_code == 0, result.output
    info = json.loads(result.output)
    assert info["table_size"] == 1024
    assert info["min_size"] == 16
    assert info["max_size"] == 4096
    assert info["default_size"] == 256
    assert info["distribution"] == "cosine"


def test_info_rejects_size_outside_bounds():
    runner = CliRunner()
    result = runner.invoke(app, ["info", "--log2-size", "2"])
    assert result.exit_code == 1


def test_render_writes_field_and_metadata(tmp_path):
    runner = CliRunner()
    out = Path(tmp_path) / "field"
    result = runner.invoke(
        app,
        ["render", "--width", "8", "--height", "6", "--scale", "4", "--octaves", "2", "--preview", "--out", str(out)],
    )
    assert result.exit_code == 0, result.output
    assert "[stats]" in result.output

    field = np.load(Path(tmp_path) / "field.npy")
    meta = json.loads((Path(tmp_path) / "field.json").read_text())
    assert field.shape == (8, 6)
    assert np.all(np.abs(field) <= 1.0)
    assert meta["stem"] == "perlin-o2-s4-t256-permutation-cubic-uniform"
    assert meta["table_size"] == 256
    assert meta["stats"]["min"] == float(field.min())


def test_render_from_yaml_config(tmp_path):
    cfg = {
        "engine": {"log2_size": 5, "seed": 7, "hash": "std", "distribution": "exponential"},
        "render": {"width": 4, "height": 3, "kind": "value", "octaves": 3, "scale": 2.5},
    }
    cfg_path = Path(tmp_path) / "render.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    out = Path(tmp_path) / "cfg"

    result = runner_invoke(["render", "--config", str(cfg_path), "--out", str(out)])
    assert result.exit_code == 0, result.output

    meta = json.loads((Path(tmp_path) / "cfg.json").read_text())
    assert meta["table_size"] == 32
    assert meta["engine"]["hash"] == "std"
    assert meta["render"]["octaves"] == 3
    assert np.load(Path(tmp_path) / "cfg.npy").shape == (4, 3)


def test_render_rejects_invalid_yaml_config(tmp_path):
    cfg_path = Path(tmp_path) / "bad.yaml"
    cfg_path.write_text(yaml.safe_dump({"render": {"octaves": 0}}), encoding="utf-8")
    result = runner_invoke(["render", "--config", str(cfg_path), "--out", str(Path(tmp_path) / "x")])
    assert result.exit_code == 1
    assert not (Path(tmp_path) / "x.npy").exists()


def test_render_pixel_noise(tmp_path):
    result = runner_invoke(
        ["render", "--pixel-noise", "--width", "5", "--height", "5", "--out", str(Path(tmp_path) / "px")]
    )
    assert result.exit_code == 0, result.output
    meta = json.loads((Path(tmp_path) / "px.json").read_text())
    assert meta["pixel_noise"] is True
    assert meta["stem"] == "pixel-5x5"


def runner_invoke(args):
    return CliRunner().invoke(app, args)


def test_render_flags_override_yaml_config(tmp_path):
    cfg = {
        "engine": {"log2_size": 5, "seed": 7, "hash": "std"},
        "render": {"width": 4, "height": 3, "kind": "value", "octaves": 3},
    }
    cfg_path = Path(tmp_path) / "render.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    out = Path(tmp_path) / "layered"

    result = runner_invoke(
        ["render", "--config", str(cfg_path), "--seed", "11", "--octaves", "2", "--spline", "quintic", "--out", str(out)]
    )
    assert result.exit_code == 0, result.output

    meta = json.loads((Path(tmp_path) / "layered.json").read_text())
    assert meta["engine"]["seed"] == 11
    assert meta["engine"]["spline"] == "quintic"
    assert meta["engine"]["hash"] == "std"
    assert meta["table_size"] == 32
    assert meta["render"]["octaves"] == 2
    assert meta["render"]["kind"] == "value"
    assert meta["render"]["width"] == 4
