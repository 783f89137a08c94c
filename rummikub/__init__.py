"""Rummikub rules engine and turn controller."""

from .rules import Ruleset
from .tiles import Tile, TileColor, create_joker, create_tile, tile_code
from .meld import Meld, MeldKind, new_meld
from .errors import ActionResult, ErrorKind, ValidationResult
from .pool import Pool
from .validator import (
    calculate_meld_points,
    calculate_total_points,
    is_valid_group,
    is_valid_meld,
    is_valid_run,
    validate_board,
)
from .state import GameSnapshot, PlayerView
from .engine import Game
from .rooms import RoomRegistry, RoomStatus, RoomView

__all__ = [
    "Ruleset",
    "Tile",
    "TileColor",
    "create_tile",
    "create_joker",
    "tile_code",
    "Meld",
    "MeldKind",
    "new_meld",
    "ActionResult",
    "ErrorKind",
    "ValidationResult",
    "Pool",
    "is_valid_run",
    "is_valid_group",
    "is_valid_meld",
    "validate_board",
    "calculate_meld_points",
    "calculate_total_points",
    "GameSnapshot",
    "PlayerView",
    "Game",
    "RoomRegistry",
    "RoomStatus",
    "RoomView",
]
