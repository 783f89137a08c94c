from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .tiles import Tile, tile_code


class MeldKind(str, Enum):
    RUN = "RUN"
    GROUP = "GROUP"


@dataclass(frozen=True)
class Meld:
    id: str
    tiles: Tuple[Tile, ...]

    def __len__(self) -> int:
        return len(self.tiles)

    def codes(self) -> List[str]:
        return [tile_code(t) for t in self.tiles]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "tiles": [t.to_dict() for t in self.tiles]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Meld":
        return cls(str(data["id"]), tuple(Tile.from_dict(t) for t in data["tiles"]))


def new_meld(tiles: Iterable[Tile], meld_id: Optional[str] = None) -> Meld:
    return Meld(meld_id or uuid.uuid4().hex[:12], tuple(tiles))


def board_tiles(melds: Sequence[Meld]) -> List[Tile]:
    return [tile for meld in melds for tile in meld.tiles]


def board_from_dicts(data: Iterable[Dict[str, Any]]) -> Tuple[Meld, ...]:
    return tuple(Meld.from_dict(m) for m in data)
