from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .tiles import Tile


class ErrorKind(str, Enum):
    TURN = "TURN"
    RULE = "RULE"
    PROVENANCE = "PROVENANCE"
    POOL_EMPTY = "POOL_EMPTY"
    LOOKUP = "LOOKUP"
    GAME_OVER = "GAME_OVER"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None
    meld_id: Optional[str] = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a mutating engine or registry call.

    A failed result always carries a human readable ``error`` and an
    ``ErrorKind``; state is untouched when ``success`` is false.
    """

    success: bool
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    tile: Optional[Tile] = None

    def __bool__(self) -> bool:
        return self.success

    @staticmethod
    def ok(tile: Optional[Tile] = None) -> "ActionResult":
        return ActionResult(True, tile=tile)

    @staticmethod
    def fail(kind: ErrorKind, error: str) -> "ActionResult":
        return ActionResult(False, error=error, kind=kind)

    def to_dict(self) -> dict:
        data: dict = {"success": self.success}
        if self.error is not None:
            data["error"] = self.error
        if self.tile is not None:
            data["tile"] = self.tile.to_dict()
        return data
