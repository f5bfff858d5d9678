from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

import numpy as np

from noiselab.core import constants
from noiselab.core.config import ConfigurationError, DistributionKind


@dataclass(frozen=True)
class DistributionParams:
    """Tuning knobs shared by the table samplers."""

    midpoint_endpoints: Tuple[float, float] = constants.MIDPOINT_ENDPOINTS
    midpoint_roughness: float = constants.MIDPOINT_ROUGHNESS
    exponential_rate: float = constants.EXPONENTIAL_RATE


SamplerFunc = Callable[[np.random.Generator, int, DistributionParams], np.ndarray]


class DistributionSampler:
    """Callable table sampler wrapper."""

    def __init__(self, kind: DistributionKind, func: SamplerFunc):
        self.kind = kind
        self.func = func

    def fill(self, size: int, seed: int, params: DistributionParams | None = None) -> np.ndarray:
        rng = table_rng(seed)
        table = np.asarray(self.func(rng, size, params or DistributionParams()), dtype=np.float64)
        assert table.shape == (size,)
        assert bool(np.all(np.abs(table) <= 1.0)), f"{self.kind.value} sampler left [-1, 1]"
        return table


SAMPLER_REGISTRY: Dict[DistributionKind, DistributionSampler] = {}

_TABLE_STREAM = 0
_PERMUTATION_STREAM = 1


def table_rng(seed: int) -> np.random.Generator:
    return np.random.default_rng([seed, _TABLE_STREAM])


def permutation_rng(seed: int) -> np.random.Generator:
    return np.random.default_rng([seed, _PERMUTATION_STREAM])


def register_sampler(kind: DistributionKind, func: SamplerFunc):
    SAMPLER_REGISTRY[kind] = DistributionSampler(kind=kind, func=func)


def get_sampler(kind: DistributionKind) -> DistributionSampler:
    if kind not in SAMPLER_REGISTRY:
        raise ConfigurationError(f"Unknown distribution '{kind}'. Available: {list_samplers()}")
    return SAMPLER_REGISTRY[kind]


def list_samplers() -> List[str]:
    return sorted(kind.value for kind in SAMPLER_REGISTRY)


def fill(
    size: int,
    kind: DistributionKind,
    seed: int,
    params: DistributionParams | None = None,
) -> np.ndarray:
    """Return a fresh table of `size` values drawn from `kind`, deterministic in `seed`."""
    return get_sampler(kind).fill(size, seed, params)
