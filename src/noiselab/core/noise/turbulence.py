from __future__ import annotations

import math
from typing import Callable

from noiselab.core import constants
from noiselab.core.config import NoiseKind, check_coordinates, check_octave_params


def turbulence(
    sample: Callable[[float, float], float],
    x: float,
    y: float,
    kind: NoiseKind,
    octaves: int,
    lacunarity: float = constants.DEFAULT_LACUNARITY,
    persistence: float = constants.DEFAULT_PERSISTENCE,
) -> float:
    """
    Sum `octaves` samples, each at `persistence` times the previous frequency
    and `lacunarity` times the previous amplitude.

    The sum is divided by the total amplitude, which is the finite geometric
    series (1 - lacunarity**octaves) / (1 - lacunarity). Perlin results are
    then multiplied by PERLIN_SCALE.

    Octaves whose scaled coordinates overflow to infinity are not sampled;
    the sum is normalized over the octaves that were.
    """
    check_octave_params(octaves, lacunarity, persistence)
    check_coordinates(x, y)
    total = 0.0
    weight = 0.0
    amplitude = 1.0
    for _ in range(octaves):
        if not (math.isfinite(x) and math.isfinite(y)):
            break
        total += amplitude * sample(x, y)
        weight += amplitude
        amplitude *= lacunarity
        x *= persistence
        y *= persistence

    result = total / weight
    if kind is NoiseKind.PERLIN:
        result = constants.PERLIN_SCALE * result
    assert -1.0 <= result <= 1.0, f"turbulence left [-1, 1]: {result}"
    return result
