from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Type, TypeVar

from noiselab.core import constants


class ConfigurationError(ValueError):
    """Raised when an engine parameter violates a precondition."""


class NoiseKind(str, Enum):
    PERLIN = "perlin"
    VALUE = "value"


class HashKind(str, Enum):
    PERMUTATION = "permutation"
    LINEAR_CONGRUENTIAL = "lcg"
    HASH_BASED = "std"


class SplineKind(str, Enum):
    NONE = "none"
    CUBIC = "cubic"
    QUINTIC = "quintic"


class DistributionKind(str, Enum):
    UNIFORM = "uniform"
    MAXIMAL = "maximal"
    COSINE = "cosine"
    NORMAL = "normal"
    EXPONENTIAL = "exponential"
    MIDPOINT = "midpoint"


class ResizeFactor(str, Enum):
    DOUBLE = "double"
    HALVE = "halve"
    DEFAULT = "default"


K = TypeVar("K", bound=Enum)


def parse_kind(kind_cls: Type[K], value: "K | str") -> K:
    """Accept either an enum member or its string value (case-insensitive)."""
    if isinstance(value, kind_cls):
        return value
    try:
        return kind_cls(str(value).lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"Unknown {kind_cls.__name__} '{value}'. Available: {list_kinds(kind_cls)}"
        ) from exc


def list_kinds(kind_cls: Type[Enum]) -> List[str]:
    return [member.value for member in kind_cls]


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def check_size(size: int, min_size: int, max_size: int) -> int:
    if not is_power_of_two(size):
        raise ConfigurationError(f"Table size {size} is not a power of two")
    if not min_size <= size <= max_size:
        raise ConfigurationError(f"Table size {size} outside [{min_size}, {max_size}]")
    return size


def check_seed(seed: int) -> int:
    if not 0 <= int(seed) <= constants.SEED_MASK:
        raise ConfigurationError(f"Seed {seed} is not a 32-bit unsigned value")
    return int(seed)


def check_octave_params(octaves: int, lacunarity: float, persistence: float) -> None:
    """Validate turbulence parameters; no clamping is applied."""
    if octaves < 1:
        raise ConfigurationError(f"octaves must be >= 1, got {octaves}")
    if not 0.0 <= lacunarity < 1.0:
        raise ConfigurationError(f"lacunarity must lie in [0, 1), got {lacunarity}")
    if not (persistence > 1.0 and math.isfinite(persistence)):
        raise ConfigurationError(f"persistence must be finite and > 1, got {persistence}")


def check_coordinates(x: float, y: float) -> None:
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ConfigurationError(f"coordinates must be finite, got ({x}, {y})")


@dataclass
class EngineConfig:
    """Active strategy selection and sizing bounds of one engine."""

    noise: NoiseKind = NoiseKind.PERLIN
    hash: HashKind = HashKind.PERMUTATION
    spline: SplineKind = SplineKind.CUBIC
    distribution: DistributionKind = DistributionKind.UNIFORM
    min_size: int = constants.MIN_TABLE_SIZE
    max_size: int = constants.MAX_TABLE_SIZE
    default_size: int = constants.DEFAULT_TABLE_SIZE
    midpoint_endpoints: Tuple[float, float] = field(default=constants.MIDPOINT_ENDPOINTS)
    midpoint_roughness: float = constants.MIDPOINT_ROUGHNESS
    exponential_rate: float = constants.EXPONENTIAL_RATE

    def validate(self) -> "EngineConfig":
        self.noise = parse_kind(NoiseKind, self.noise)
        self.hash = parse_kind(HashKind, self.hash)
        self.spline = parse_kind(SplineKind, self.spline)
        self.distribution = parse_kind(DistributionKind, self.distribution)
        for name in ("min_size", "max_size", "default_size"):
            if not is_power_of_two(getattr(self, name)):
                raise ConfigurationError(f"{name}={getattr(self, name)} is not a power of two")
        if self.min_size > self.max_size:
            raise ConfigurationError("min_size must not exceed max_size")
        check_size(self.default_size, self.min_size, self.max_size)
        if len(self.midpoint_endpoints) != 2 or any(
            not -1.0 <= float(v) <= 1.0 for v in self.midpoint_endpoints
        ):
            raise ConfigurationError("midpoint_endpoints must be two values in [-1, 1]")
        self.midpoint_endpoints = (float(self.midpoint_endpoints[0]), float(self.midpoint_endpoints[1]))
        if self.midpoint_roughness < 0:
            raise ConfigurationError("midpoint_roughness must be >= 0")
        if self.exponential_rate <= 0:
            raise ConfigurationError("exponential_rate must be > 0")
        return self
