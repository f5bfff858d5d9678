from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, Type

from noiselab.core.config import ConfigurationError, HashKind
from noiselab.core.table.store import TableStore

Corners = Tuple[int, int, int, int]


class HashStrategy(ABC):
    """Maps the four corners of a lattice cell to table indices in [0, size)."""

    kind: HashKind

    def __init__(self, store: TableStore):
        self.store = store

    @abstractmethod
    def corner(self, x: int, y: int) -> int:
        """Table index for lattice point (x, y)."""
        ...

    def corner_hashes(self, ix: int, iy: int) -> Corners:
        """Return (h00, h10, h01, h11) for the cell whose lower corner is (ix, iy)."""
        return (
            self.corner(ix, iy),
            self.corner(ix + 1, iy),
            self.corner(ix, iy + 1),
            self.corner(ix + 1, iy + 1),
        )


HASH_REGISTRY: Dict[HashKind, Type[HashStrategy]] = {}


def register_hash(cls: Type[HashStrategy]) -> Type[HashStrategy]:
    HASH_REGISTRY[cls.kind] = cls
    return cls


def get_hash_strategy(kind: HashKind, store: TableStore) -> HashStrategy:
    if kind not in HASH_REGISTRY:
        raise ConfigurationError(f"Unknown hash '{kind}'. Available: {list_hashes()}")
    return HASH_REGISTRY[kind](store)


def list_hashes() -> List[str]:
    return sorted(kind.value for kind in HASH_REGISTRY)
