from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional

MIN_NUMBER = 1
MAX_NUMBER = 13
JOKER_NUMBER = 0


class TileColor(str, Enum):
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    BLACK = "black"

    @property
    def initial(self) -> str:
        return self.value[0]


def _new_tile_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Tile:
    """A single physical tile.

    Identity is carried by ``id``; two tiles with the same color and number are
    still different tiles. Jokers keep a placeholder color and number 0.
    """

    id: str
    color: TileColor
    number: int
    is_joker: bool = False

    def __post_init__(self) -> None:
        if self.is_joker:
            if self.number != JOKER_NUMBER:
                raise ValueError("Joker must carry placeholder number 0")
        elif not MIN_NUMBER <= self.number <= MAX_NUMBER:
            raise ValueError(f"tile number must be in {MIN_NUMBER}..{MAX_NUMBER}, got {self.number}")

    def code(self) -> str:
        return tile_code(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "color": self.color.value,
            "number": self.number,
            "is_joker": self.is_joker,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tile":
        try:
            color = TileColor(data["color"])
        except ValueError:
            raise ValueError(f"unknown tile color {data['color']!r}") from None
        return cls(
            id=str(data["id"]),
            color=color,
            number=int(data["number"]),
            is_joker=bool(data.get("is_joker", False)),
        )


def create_tile(color: TileColor | str, number: int, tile_id: Optional[str] = None) -> Tile:
    return Tile(tile_id or _new_tile_id(), TileColor(color), number)


def create_joker(tile_id: Optional[str] = None) -> Tile:
    # color is irrelevant for jokers
    return Tile(tile_id or _new_tile_id(), TileColor.BLACK, JOKER_NUMBER, is_joker=True)


def iter_full_set(
    colors: Iterable[str],
    min_number: int = MIN_NUMBER,
    max_number: int = MAX_NUMBER,
    copies: int = 2,
    num_jokers: int = 2,
) -> Iterable[Tile]:
    colors = list(colors)
    for _ in range(copies):
        for color in colors:
            for number in range(min_number, max_number + 1):
                yield create_tile(color, number)
    for _ in range(num_jokers):
        yield create_joker()


def tile_code(tile: Tile) -> str:
    """Compact display code: ``J`` for a joker, else color initial + number (``r7``)."""
    if tile.is_joker:
        return "J"
    return f"{tile.color.initial}{tile.number}"
