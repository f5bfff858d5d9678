from __future__ import annotations

import numpy as np

from noiselab.core.distribution.base import permutation_rng


def generate_permutation(size: int, seed: int) -> np.ndarray:
    nums = list(range(size))
    # Fisher-Yates with bounded integer draws, so every ordering is equally likely
    rng = permutation_rng(seed)
    for i in range(size - 1, 0, -1):
        j = int(rng.integers(0, i + 1))
        nums[i], nums[j] = nums[j], nums[i]
    return np.array(nums, dtype=np.int64)


def is_bijection(perm: np.ndarray, size: int) -> bool:
    """True when `perm` holds every index in [0, size) exactly once."""
    if perm.shape != (size,):
        return False
    return bool(np.array_equal(np.sort(perm), np.arange(size)))
