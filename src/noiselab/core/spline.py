from __future__ import annotations

from typing import Callable, Dict

from noiselab.core.config import SplineKind


def identity(t: float) -> float:
    return t


def spline3(t: float) -> float:
    """3t^2 - 2t^3"""
    return t * t * (3.0 - 2.0 * t)


def spline5(t: float) -> float:
    """10t^3 - 15t^4 + 6t^5; first and second derivatives vanish at 0 and 1."""
    return t * t * t * (10.0 + 3.0 * t * (2.0 * t - 5.0))


SPLINES: Dict[SplineKind, Callable[[float], float]] = {
    SplineKind.NONE: identity,
    SplineKind.CUBIC: spline3,
    SplineKind.QUINTIC: spline5,
}


def get_spline(kind: SplineKind) -> Callable[[float], float]:
    return SPLINES[kind]


def lerp(t: float, a: float, b: float) -> float:
    return a + t * (b - a)
