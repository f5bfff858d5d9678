from __future__ import annotations

import numpy as np

from noiselab.core import constants
from noiselab.core.config import DistributionKind

from .base import DistributionParams, register_sampler


def _clamp(values):
    return np.clip(values, -1.0, 1.0)


def uniform(rng: np.random.Generator, size: int, params: DistributionParams) -> np.ndarray:
    return _clamp(rng.uniform(-1.0, 1.0, size))


def maximal(rng: np.random.Generator, size: int, params: DistributionParams) -> np.ndarray:
    # Only the extremes, which makes lattice artifacts easy to see
    return np.where(rng.uniform(-1.0, 1.0, size) >= 0.0, 1.0, -1.0)


def cosine(rng: np.random.Generator, size: int, params: DistributionParams) -> np.ndarray:
    return _clamp(np.cos(rng.uniform(0.0, np.pi, size)))


def normal(rng: np.random.Generator, size: int, params: DistributionParams) -> np.ndarray:
    x = rng.normal(constants.NORMAL_MEAN, constants.NORMAL_STDDEV, size) / constants.NORMAL_DIVISOR
    return _clamp(2.0 * np.clip(x, 0.0, 1.0) - 1.0)


def exponential(rng: np.random.Generator, size: int, params: DistributionParams) -> np.ndarray:
    """First half positive, second half negative, so both signs always occur."""
    draws = np.clip(rng.exponential(1.0 / params.exponential_rate, size), 0.0, 1.0)
    half = size // 2
    draws[half:] = -draws[half:]
    return draws


def _displace(table: np.ndarray, i: int, j: int, roughness: float, rng: np.random.Generator) -> None:
    if j <= i + 1:
        return
    mid = (i + j) // 2
    value = (table[i] + table[j]) / 2.0 + roughness * rng.uniform(-1.0, 1.0)
    table[mid] = min(1.0, max(-1.0, value))
    _displace(table, i, mid, roughness / 2.0, rng)
    _displace(table, mid, j, roughness / 2.0, rng)


def midpoint(rng: np.random.Generator, size: int, params: DistributionParams) -> np.ndarray:
    """
    1D midpoint displacement between seeded endpoints.

    Neighbouring slots end up correlated, unlike the per-slot distributions.
    Recursion depth is log2(size).
    """
    table = np.zeros(size, dtype=np.float64)
    table[0], table[size - 1] = params.midpoint_endpoints
    _displace(table, 0, size - 1, params.midpoint_roughness, rng)
    return table


# Registry
register_sampler(DistributionKind.UNIFORM, uniform)
register_sampler(DistributionKind.MAXIMAL, maximal)
register_sampler(DistributionKind.COSINE, cosine)
register_sampler(DistributionKind.NORMAL, normal)
register_sampler(DistributionKind.EXPONENTIAL, exponential)
register_sampler(DistributionKind.MIDPOINT, midpoint)
