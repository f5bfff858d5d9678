from __future__ import annotations

import numpy as np

from noiselab.core.config import (
    EngineConfig,
    ResizeFactor,
    check_seed,
    check_size,
    parse_kind,
)
from noiselab.core.distribution.base import DistributionParams, fill
from noiselab.core.distribution import samplers  # noqa: F401 (registers samplers)
from noiselab.core.table.permutation import generate_permutation, is_bijection
from noiselab.utils.logging import get_logger

logger = get_logger(__name__)


class TableStore:
    """
    Owns the gradient/value table and the permutation of one engine.

    Both buffers always have length `size`, a power of two inside the
    configured bounds. They are rebuilt together whenever the size or seed
    changes; a distribution change rebuilds only the table.
    """

    def __init__(self, size: int, seed: int, config: EngineConfig):
        self.config = config
        self._size = check_size(size, config.min_size, config.max_size)
        self._seed = check_seed(seed)
        self._table, self._perm = self._build(self._size, self._seed)
        self.check_invariants()

    @property
    def size(self) -> int:
        return self._size

    @property
    def mask(self) -> int:
        return self._size - 1

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def table(self) -> np.ndarray:
        return self._table

    @property
    def perm(self) -> np.ndarray:
        return self._perm

    def _params(self) -> DistributionParams:
        return DistributionParams(
            midpoint_endpoints=self.config.midpoint_endpoints,
            midpoint_roughness=self.config.midpoint_roughness,
            exponential_rate=self.config.exponential_rate,
        )

    def _build_table(self, size: int, seed: int) -> np.ndarray:
        return fill(size, self.config.distribution, seed, self._params())

    def _build(self, size: int, seed: int) -> tuple[np.ndarray, np.ndarray]:
        logger.debug(
            "Building tables size=%d seed=%d distribution=%s",
            size,
            seed,
            self.config.distribution.value,
        )
        return self._build_table(size, seed), generate_permutation(size, seed)

    def refill(self) -> None:
        """Redraw the table from the current distribution; size and permutation stay."""
        self._table = self._build_table(self._size, self._seed)
        self.check_invariants()

    def reseed(self, seed: int) -> None:
        seed = check_seed(seed)
        table, perm = self._build(self._size, seed)
        self._seed, self._table, self._perm = seed, table, perm
        self.check_invariants()

    def resize(self, factor: "ResizeFactor | str") -> bool:
        """
        Double, halve, or reset the table size.

        Returns False without touching anything when the size is already at
        the relevant bound. New buffers are fully populated before they
        replace the old ones.
        """
        factor = parse_kind(ResizeFactor, factor)
        if factor is ResizeFactor.DOUBLE:
            new_size = self._size * 2
            allowed = self._size < self.config.max_size
        elif factor is ResizeFactor.HALVE:
            new_size = self._size // 2
            allowed = self._size > self.config.min_size
        else:
            new_size = self.config.default_size
            allowed = self._size != self.config.default_size
        if not allowed:
            logger.debug("Resize %s refused at size=%d", factor.value, self._size)
            return False

        table, perm = self._build(new_size, self._seed)
        self._size, self._table, self._perm = new_size, table, perm
        self.check_invariants()
        logger.debug("Resized tables to size=%d", new_size)
        return True

    def check_invariants(self) -> None:
        assert self.config.min_size <= self._size <= self.config.max_size
        assert self._size & self.mask == 0
        assert self._table.shape == (self._size,)
        assert bool(np.all(np.abs(self._table) <= 1.0))
        assert is_bijection(self._perm, self._size)
