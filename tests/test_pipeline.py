import numpy as np
import pytest

from noiselab.core.config import ConfigurationError
from noiselab.io.formats import load_field, save_field
from noiselab.orchestrator.pipeline import (
    EngineSettings,
    RenderParams,
    build_engine,
    build_field,
    describe_settings,
    field_fingerprint,
    field_stats,
    jump_origin,
    render_field,
    render_pixel_noise,
)


def test_render_field_calls_generate_per_pixel():
    engine = build_engine(EngineSettings(log2_size=6, seed=3))
    params = RenderParams(width=5, height=4, scale=8.0, origin_x=2.0, origin_y=-3.0, kind="value", octaves=2)
    field = render_field(engine, params)
    assert field.shape == (5, 4)
    for i in range(5):
        for j in range(4):
            expected = engine.generate((i + 2.0) / 8.0, (j - 3.0) / 8.0, "value", 2)
            assert field[i, j] == expected


def test_build_field_is_deterministic():
    settings = EngineSettings(log2_size=5, seed=17, hash="std", spline="quintic", distribution="normal")
    params = RenderParams(width=8, height=8, scale=4.0, octaves=3)
    f1, fp1, _ = build_field(settings, params)
    f2, fp2, _ = build_field(settings, params)
    assert fp1 == fp2
    assert np.array_equal(f1, f2)
    assert fp1 == field_fingerprint(f1)


def test_field_stats_and_range():
    _, _, engine = build_field(EngineSettings(), RenderParams(width=2, height=2))
    field = render_field(engine, RenderParams(width=16, height=16, scale=5.0))
    stats = field_stats(field)
    assert -1.0 <= stats["min"] <= stats["mean"] <= stats["max"] <= 1.0


def test_describe_settings_encodes_everything():
    engine = build_engine(EngineSettings(log2_size=9, hash="lcg", spline="none", distribution="midpoint"))
    params = RenderParams(kind="value", octaves=6, scale=32.0)
    assert describe_settings(engine, params) == "value-o6-s32-t512-lcg-none-midpoint"


def test_pixel_noise_is_uncorrelated_and_seeded():
    a = render_pixel_noise(32, 32, seed=1)
    b = render_pixel_noise(32, 32, seed=1)
    assert np.array_equal(a, b)
    assert a.min() >= -1.0 and a.max() <= 1.0
    assert not np.array_equal(a, render_pixel_noise(32, 32, seed=2))


def test_jump_origin_seeded():
    assert jump_origin(5) == jump_origin(5)
    ox, oy = jump_origin(5)
    assert ox >= 0 and oy >= 0


@pytest.mark.parametrize(
    "params",
    [
        RenderParams(width=0),
        RenderParams(scale=0.0),
        RenderParams(kind="cellular"),
        RenderParams(octaves=0),
        RenderParams(lacunarity=1.5),
    ],
)
def test_invalid_render_params_raise(params):
    engine = build_engine(EngineSettings())
    with pytest.raises(ConfigurationError):
        render_field(engine, params)


def test_save_and_load_field(tmp_path):
    field = render_pixel_noise(4, 3, seed=0)
    npy_path, meta_path = save_field(tmp_path / "out" / "img", field, {"stem": "img"})
    assert npy_path.name == "img.npy"
    assert meta_path.name == "img.json"
    loaded, meta = load_field(tmp_path / "out" / "img.npy")
    assert np.array_equal(loaded, field)
    assert meta == {"stem": "img"}
