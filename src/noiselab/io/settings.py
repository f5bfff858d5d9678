from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from noiselab.orchestrator.pipeline import EngineSettings, RenderParams


class ConfigError(Exception):
    """Raised when a YAML config file is invalid."""


def require_key(mapping: Dict[str, Any], key: str, expected_type: Tuple[type, ...]):
    if key not in mapping:
        raise ConfigError(f"Missing required key '{key}'")
    val = mapping[key]
    if not isinstance(val, expected_type):
        raise ConfigError(f"Key '{key}' must be of type {expected_type}, got {type(val)}")
    return val


def _optional_mapping(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    if key not in data or data[key] is None:
        return {}
    return require_key(data, key, (dict,))


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to read YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML must be a mapping.")
    return data


def engine_settings_from_mapping(engine: Dict[str, Any], base: EngineSettings | None = None) -> EngineSettings:
    base = base or EngineSettings()
    try:
        return EngineSettings(
            log2_size=int(engine.get("log2_size", base.log2_size)),
            seed=int(engine.get("seed", base.seed)),
            hash=str(engine.get("hash", base.hash)),
            spline=str(engine.get("spline", base.spline)),
            distribution=str(engine.get("distribution", base.distribution)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid engine settings: {exc}") from exc


def render_params_from_mapping(render: Dict[str, Any], base: RenderParams | None = None) -> RenderParams:
    base = base or RenderParams()
    try:
        params = RenderParams(
            width=int(render.get("width", base.width)),
            height=int(render.get("height", base.height)),
            scale=float(render.get("scale", base.scale)),
            origin_x=float(render.get("origin_x", base.origin_x)),
            origin_y=float(render.get("origin_y", base.origin_y)),
            kind=str(render.get("kind", base.kind)),
            octaves=int(render.get("octaves", base.octaves)),
            lacunarity=float(render.get("lacunarity", base.lacunarity)),
            persistence=float(render.get("persistence", base.persistence)),
        )
        return params.validate()
    except (TypeError, ValueError) as exc:
        # ConfigurationError is a ValueError
        raise ConfigError(f"Invalid render settings: {exc}") from exc


def parse_render_config(path: Path) -> Tuple[EngineSettings, RenderParams]:
    """Read `engine:` and `render:` sections; both optional."""
    data = load_yaml(path)
    engine = engine_settings_from_mapping(_optional_mapping(data, "engine"))
    render = render_params_from_mapping(_optional_mapping(data, "render"))
    return engine, render

