from __future__ import annotations

import secrets
from dataclasses import replace

import numpy as np

from noiselab.core import constants
from noiselab.core.config import (
    ConfigurationError,
    DistributionKind,
    EngineConfig,
    HashKind,
    NoiseKind,
    ResizeFactor,
    SplineKind,
    check_coordinates,
    check_seed,
    parse_kind,
)
from noiselab.core.hashing.base import Corners, HashStrategy, get_hash_strategy
from noiselab.core.hashing import schemes  # noqa: F401 (registers hashes)
from noiselab.core.noise.evaluator import noise as _noise
from noiselab.core.noise.turbulence import turbulence
from noiselab.core.spline import get_spline
from noiselab.core.table.store import TableStore
from noiselab.utils.logging import get_logger

logger = get_logger(__name__)


def fresh_seed() -> int:
    return secrets.randbits(32)


class NoiseEngine:
    """
    2D Perlin / Value noise generator with resizable tables.

    Each engine owns its table, permutation and configuration, so several
    engines can coexist. Reads (`noise`, `generate`) do not mutate state;
    mutators must not run concurrently with reads.
    """

    def __init__(
        self,
        initial_log2_size: int = constants.DEFAULT_LOG2_SIZE,
        config: EngineConfig | None = None,
        seed: int | None = None,
    ):
        if initial_log2_size < 0:
            raise ConfigurationError(f"initial_log2_size must be >= 0, got {initial_log2_size}")
        self._config = replace(config or EngineConfig()).validate()
        seed = constants.DEFAULT_SEED if seed is None else check_seed(seed)
        self._store = TableStore(1 << initial_log2_size, seed, self._config)
        self._hasher: HashStrategy = get_hash_strategy(self._config.hash, self._store)
        self._smooth = get_spline(self._config.spline)
        logger.debug(
            "Engine ready size=%d seed=%d hash=%s spline=%s distribution=%s",
            self.table_size,
            seed,
            self._config.hash.value,
            self._config.spline.value,
            self._config.distribution.value,
        )

    # Introspection

    @property
    def config(self) -> EngineConfig:
        """A copy of the active configuration; change it through the setters."""
        return replace(self._config)

    @property
    def table_size(self) -> int:
        return self._store.size

    @property
    def mask(self) -> int:
        return self._store.mask

    @property
    def min_size(self) -> int:
        return self._config.min_size

    @property
    def max_size(self) -> int:
        return self._config.max_size

    @property
    def default_size(self) -> int:
        return self._config.default_size

    @property
    def seed(self) -> int:
        return self._store.seed

    @property
    def table(self) -> np.ndarray:
        return self._store.table.copy()

    @property
    def permutation(self) -> np.ndarray:
        return self._store.perm.copy()

    def corner_hashes(self, ix: int, iy: int) -> Corners:
        return self._hasher.corner_hashes(ix, iy)

    # Evaluation

    def noise(self, x: float, y: float, kind: "NoiseKind | str | None" = None) -> float:
        """Single octave, no scale constant applied."""
        check_coordinates(float(x), float(y))
        kind = parse_kind(NoiseKind, kind or self._config.noise)
        return _noise(float(x), float(y), kind, self._store, self._hasher, self._smooth)

    def generate(
        self,
        x: float,
        y: float,
        kind: "NoiseKind | str | None" = None,
        octaves: int = 1,
        lacunarity: float = constants.DEFAULT_LACUNARITY,
        persistence: float = constants.DEFAULT_PERSISTENCE,
    ) -> float:
        """Multi-octave turbulence in [-1, 1]; `kind` defaults to the configured noise."""
        kind = parse_kind(NoiseKind, kind or self._config.noise)

        def sample(sx: float, sy: float) -> float:
            return _noise(sx, sy, kind, self._store, self._hasher, self._smooth)

        return turbulence(sample, float(x), float(y), kind, int(octaves), float(lacunarity), float(persistence))

    # Configuration

    def set_distribution(self, kind: "DistributionKind | str") -> None:
        self._config.distribution = parse_kind(DistributionKind, kind)
        self._store.refill()
        logger.debug("Distribution set to %s", self._config.distribution.value)

    def set_hash(self, kind: "HashKind | str") -> None:
        self._config.hash = parse_kind(HashKind, kind)
        self._hasher = get_hash_strategy(self._config.hash, self._store)
        logger.debug("Hash set to %s", self._config.hash.value)

    def set_spline(self, kind: "SplineKind | str") -> None:
        self._config.spline = parse_kind(SplineKind, kind)
        self._smooth = get_spline(self._config.spline)
        logger.debug("Spline set to %s", self._config.spline.value)

    def reseed(self, seed: int | None = None) -> int:
        """Regenerate table and permutation from `seed` (a fresh one if omitted)."""
        seed = fresh_seed() if seed is None else seed
        self._store.reseed(seed)
        logger.debug("Reseeded with seed=%d", self.seed)
        return self.seed

    def randomize(self) -> int:
        return self.reseed(None)

    # Resizing

    def resize(self, factor: "ResizeFactor | str") -> bool:
        return self._store.resize(factor)

    def double_size(self) -> bool:
        return self.resize(ResizeFactor.DOUBLE)

    def halve_size(self) -> bool:
        return self.resize(ResizeFactor.HALVE)

    def reset_size(self) -> bool:
        return self.resize(ResizeFactor.DEFAULT)
