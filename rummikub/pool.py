from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional

from .rules import Ruleset
from .tiles import Tile, iter_full_set

logger = logging.getLogger(__name__)


class Pool:
    """The bag of undrawn tiles. Only its size is ever exposed."""

    def __init__(self, ruleset: Ruleset | None = None, rng: random.Random | None = None) -> None:
        self.ruleset = ruleset or Ruleset()
        self._rng = rng or random.Random()
        self._tiles: List[Tile] = []
        self._initialize()

    def _initialize(self) -> None:
        rules = self.ruleset
        self._tiles = list(
            iter_full_set(rules.colors, rules.min_number, rules.max_number, rules.copies_per_tile, rules.num_jokers)
        )
        self._shuffle()

    def _shuffle(self) -> None:
        self._rng.shuffle(self._tiles)

    def draw(self) -> Optional[Tile]:
        if not self._tiles:
            return None
        return self._tiles.pop()

    def draw_multiple(self, count: int) -> List[Tile]:
        if count < 0:
            raise ValueError("count must be non-negative")
        drawn: List[Tile] = []
        for _ in range(count):
            tile = self.draw()
            if tile is None:
                logger.debug("pool ran out after %d of %d tiles", len(drawn), count)
                break
            drawn.append(tile)
        return drawn

    def return_tile(self, tile: Tile) -> None:
        self.return_tiles([tile])

    def return_tiles(self, tiles: Iterable[Tile]) -> None:
        self._tiles.extend(tiles)
        self._shuffle()

    @property
    def size(self) -> int:
        return len(self._tiles)

    def is_empty(self) -> bool:
        return not self._tiles

    def __len__(self) -> int:
        return len(self._tiles)
