from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .meld import Meld, board_tiles
from .multiset import TileBag
from .tiles import Tile


@dataclass
class PlayerState:
    id: str
    name: str
    tiles: List[Tile] = field(default_factory=list)
    is_connected: bool = True
    has_initial_meld: bool = False

    def view(self) -> "PlayerView":
        return PlayerView(
            id=self.id,
            name=self.name,
            tile_count=len(self.tiles),
            is_connected=self.is_connected,
            has_initial_meld=self.has_initial_meld,
        )


@dataclass(frozen=True)
class TurnSnapshot:
    """Board and current hand as they stood when the turn began.

    Melds and tiles are frozen, so holding tuples of them is a full value copy:
    later edits to the live board or hand cannot reach the snapshot.
    """

    player_id: Optional[str]
    board: Tuple[Meld, ...] = ()
    hand: Tuple[Tile, ...] = ()

    def tiles(self) -> TileBag:
        return TileBag.from_tiles(board_tiles(self.board)).add(TileBag.from_tiles(self.hand))

    def board_bag(self) -> TileBag:
        return TileBag.from_tiles(board_tiles(self.board))

    def hand_bag(self) -> TileBag:
        return TileBag.from_tiles(self.hand)


@dataclass(frozen=True)
class PlayerView:
    """What every participant may know about a player."""

    id: str
    name: str
    tile_count: int
    is_connected: bool
    has_initial_meld: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "tile_count": self.tile_count,
            "is_connected": self.is_connected,
            "has_initial_meld": self.has_initial_meld,
        }


@dataclass(frozen=True)
class GameSnapshot:
    room_code: str
    players: Tuple[PlayerView, ...]
    current_player_id: Optional[str]
    board: Tuple[Meld, ...]
    pool: int
    turn_start_board: Tuple[Meld, ...]
    winner: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_code": self.room_code,
            "players": [p.to_dict() for p in self.players],
            "current_player_id": self.current_player_id,
            "board": [m.to_dict() for m in self.board],
            "pool": self.pool,
            "turn_start_board": [m.to_dict() for m in self.turn_start_board],
            "winner": self.winner,
        }
