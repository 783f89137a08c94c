from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List

from .tiles import Tile


@dataclass
class TileBag:
    """Multiset of tile identities.

    Counts are keyed by tile id, so two red 7s are two distinct entries. A
    count above one means the same physical tile was submitted twice.
    """

    counts: Counter = field(default_factory=Counter)

    @classmethod
    def from_tiles(cls, tiles: Iterable[Tile]) -> "TileBag":
        return cls(Counter(tile.id for tile in tiles))

    def add(self, other: "TileBag") -> "TileBag":
        return TileBag(self.counts + other.counts)

    def duplicates(self) -> List[str]:
        return sorted(tile_id for tile_id, count in self.counts.items() if count > 1)

    def missing_from(self, other: "TileBag") -> List[str]:
        """Ids present in ``self`` but absent from ``other``."""
        return sorted(tile_id for tile_id in self.counts if other.counts[tile_id] == 0)

    def __contains__(self, tile_id: object) -> bool:
        return self.counts.get(tile_id, 0) > 0

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TileBag) and +self.counts == +other.counts
