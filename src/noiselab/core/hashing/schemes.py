from __future__ import annotations

from noiselab.core import constants
from noiselab.core.config import HashKind

from .base import HashStrategy, register_hash

_MASK64 = 0xFFFFFFFFFFFFFFFF


def permutation_hash(store, v: int) -> int:
    return int(store.perm[v & store.mask])


def _mix64(v: int) -> int:
    # splitmix64 finalizer
    x = v & _MASK64
    x ^= x >> 30
    x = (x * 0xBF58476D1CE4E5B9) & _MASK64
    x ^= x >> 27
    x = (x * 0x94D049BB133111EB) & _MASK64
    x ^= x >> 31
    return x


@register_hash
class PermutationHash(HashStrategy):
    """Classic permutation lookup; the pattern repeats every `size` lattice units."""

    kind = HashKind.PERMUTATION

    def corner(self, x: int, y: int) -> int:
        return permutation_hash(self.store, permutation_hash(self.store, x) + y)


@register_hash
class LinearCongruentialHash(HashStrategy):
    """Prime-weighted sum reduced modulo a third prime; no short period."""

    kind = HashKind.LINEAR_CONGRUENTIAL

    def corner(self, x: int, y: int) -> int:
        h = (constants.LCG_P0 * x + constants.LCG_P1 * y) % constants.LCG_P2
        return (h >> constants.LCG_SHIFT) & self.store.mask


@register_hash
class HashBasedHash(HashStrategy):
    """General-purpose 64-bit mixer applied to a shifted-xor pairing."""

    kind = HashKind.HASH_BASED

    def corner(self, x: int, y: int) -> int:
        pair = ((_mix64(x) << 1) ^ _mix64(y)) & _MASK64
        return _mix64(pair) & self.store.mask
