from dataclasses import dataclass
from typing import Tuple

from .tiles import MAX_NUMBER, MIN_NUMBER, TileColor


@dataclass(frozen=True)
class Ruleset:
    colors: Tuple[str, ...] = ("red", "blue", "yellow", "black")
    min_number: int = 1
    max_number: int = 13
    copies_per_tile: int = 2
    num_jokers: int = 2
    initial_hand_size: int = 14
    initial_meld_min_points: int = 30
    min_players: int = 2
    max_players: int = 4
    board_tiles_return_to_hand: bool = True

    def __post_init__(self) -> None:
        known = {color.value for color in TileColor}
        unknown = [c for c in self.colors if c not in known]
        if unknown:
            raise ValueError(f"unknown tile colors {unknown}; expected a subset of {sorted(known)}")
        if not MIN_NUMBER <= self.min_number <= self.max_number <= MAX_NUMBER:
            raise ValueError(f"number range must lie within {MIN_NUMBER}..{MAX_NUMBER}")

    def deck_size(self) -> int:
        numbers = self.max_number - self.min_number + 1
        return len(self.colors) * numbers * self.copies_per_tile + self.num_jokers
