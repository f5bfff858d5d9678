from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from noiselab.core import constants
from noiselab.core.config import (
    ConfigurationError,
    DistributionKind,
    EngineConfig,
    HashKind,
    NoiseKind,
    SplineKind,
    check_octave_params,
    parse_kind,
)
from noiselab.core.engine import NoiseEngine
from noiselab.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """Everything needed to rebuild an engine deterministically."""

    log2_size: int = constants.DEFAULT_LOG2_SIZE
    seed: int = constants.DEFAULT_SEED
    hash: str = constants.HASH_KIND
    spline: str = constants.SPLINE_KIND
    distribution: str = constants.DISTRIBUTION_KIND


@dataclass(frozen=True)
class RenderParams:
    """Pixel grid and turbulence parameters for one rendered field."""

    width: int = constants.DEFAULT_RENDER_SIZE
    height: int = constants.DEFAULT_RENDER_SIZE
    scale: float = constants.DEFAULT_RENDER_SCALE
    origin_x: float = 0.0
    origin_y: float = 0.0
    kind: str = constants.NOISE_KIND
    octaves: int = constants.DEFAULT_OCTAVES
    lacunarity: float = constants.DEFAULT_LACUNARITY
    persistence: float = constants.DEFAULT_PERSISTENCE

    def validate(self) -> "RenderParams":
        if self.width < 1 or self.height < 1:
            raise ConfigurationError("width and height must be >= 1")
        if not self.scale > 0:
            raise ConfigurationError(f"scale must be > 0, got {self.scale}")
        parse_kind(NoiseKind, self.kind)
        check_octave_params(self.octaves, self.lacunarity, self.persistence)
        return self


def build_engine(settings: EngineSettings) -> NoiseEngine:
    config = EngineConfig(
        hash=parse_kind(HashKind, settings.hash),
        spline=parse_kind(SplineKind, settings.spline),
        distribution=parse_kind(DistributionKind, settings.distribution),
    )
    return NoiseEngine(settings.log2_size, config=config, seed=settings.seed)


def render_field(engine: NoiseEngine, params: RenderParams) -> np.ndarray:
    """Call `engine.generate` once per pixel; field[i, j] is column i, row j."""
    params.validate()
    kind = parse_kind(NoiseKind, params.kind)
    logger.debug(
        "Rendering %dx%d kind=%s octaves=%d scale=%s origin=(%s,%s)",
        params.width,
        params.height,
        kind.value,
        params.octaves,
        params.scale,
        params.origin_x,
        params.origin_y,
    )
    field = np.empty((params.width, params.height), dtype=np.float64, order="C")
    for i in range(params.width):
        x = (i + params.origin_x) / params.scale
        for j in range(params.height):
            y = (j + params.origin_y) / params.scale
            field[i, j] = engine.generate(
                x, y, kind, params.octaves, params.lacunarity, params.persistence
            )
    return field


def render_pixel_noise(width: int, height: int, seed: int) -> np.ndarray:
    """Uncorrelated per-pixel noise in [-1, 1], for side-by-side comparison."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(width, height)).astype(np.float64) / 127.5 - 1.0


def field_stats(field: np.ndarray) -> Dict[str, float]:
    return {
        "min": float(field.min()),
        "max": float(field.max()),
        "mean": float(field.mean()),
    }


def field_fingerprint(field: np.ndarray) -> str:
    """SHA-256 fingerprint over the field bytes (row-major)."""
    return hashlib.sha256(field.tobytes(order="C")).hexdigest()


def jump_origin(seed: int | None = None) -> Tuple[int, int]:
    rng = np.random.default_rng(seed)
    ox, oy = rng.integers(0, constants.MAX_JUMP, size=2)
    return int(ox), int(oy)


def describe_settings(engine: NoiseEngine, params: RenderParams) -> str:
    """File-name stem encoding the settings that produced a field."""
    kind = parse_kind(NoiseKind, params.kind)
    return "-".join(
        [
            kind.value,
            f"o{params.octaves}",
            f"s{params.scale:g}",
            f"t{engine.table_size}",
            engine.config.hash.value,
            engine.config.spline.value,
            engine.config.distribution.value,
        ]
    )


def build_field(
    settings: EngineSettings, params: RenderParams
) -> Tuple[np.ndarray, str, NoiseEngine]:
    engine = build_engine(settings)
    field = render_field(engine, params)
    fingerprint = field_fingerprint(field)
    logger.debug("Field fingerprint=%s", fingerprint)
    return field, fingerprint, engine
