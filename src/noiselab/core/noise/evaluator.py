from __future__ import annotations

import math
from typing import Callable

from noiselab.core.config import NoiseKind
from noiselab.core.hashing.base import HashStrategy
from noiselab.core.hashing.schemes import permutation_hash
from noiselab.core.spline import lerp
from noiselab.core.table.store import TableStore


def gradient_at(store: TableStore, h: int, dx: float, dy: float) -> float:
    """
    Dot product of the corner gradient with the offset (dx, dy).

    The gradient is (table[h], table[perm[h]]) scaled to unit length, so a
    single octave never exceeds 1/sqrt(2) in magnitude. A zero vector
    contributes nothing.
    """
    gx = float(store.table[h])
    gy = float(store.table[permutation_hash(store, h)])
    length = math.hypot(gx, gy)
    if length == 0.0:
        return 0.0
    return (dx * gx + dy * gy) / length


def noise(
    x: float,
    y: float,
    kind: NoiseKind,
    store: TableStore,
    hasher: HashStrategy,
    smooth: Callable[[float], float],
) -> float:
    """One octave of Perlin or Value noise at (x, y)."""
    ix = math.floor(x)
    iy = math.floor(y)
    fx = x - ix
    fy = y - iy
    sx = smooth(fx)
    sy = smooth(fy)

    h00, h10, h01, h11 = hasher.corner_hashes(ix, iy)

    if kind is NoiseKind.VALUE:
        table = store.table
        a = lerp(sx, float(table[h00]), float(table[h10]))
        b = lerp(sx, float(table[h01]), float(table[h11]))
    else:
        a = lerp(sx, gradient_at(store, h00, fx, fy), gradient_at(store, h10, fx - 1.0, fy))
        b = lerp(sx, gradient_at(store, h01, fx, fy - 1.0), gradient_at(store, h11, fx - 1.0, fy - 1.0))
    return lerp(sy, a, b)
