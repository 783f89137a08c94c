from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import ActionResult, ErrorKind
from .meld import Meld, board_tiles
from .multiset import TileBag
from .pool import Pool
from .rules import Ruleset
from .state import GameSnapshot, PlayerState, TurnSnapshot
from .tiles import Tile
from .validator import calculate_total_points, validate_board

logger = logging.getLogger(__name__)

NOT_YOUR_TURN = "Not your turn"
PLAYER_NOT_FOUND = "Player not found"
GAME_FINISHED = "game already finished"


def _check_provenance(snapshot: TurnSnapshot, new_board: Tuple[Meld, ...], new_hand: List[Tile]) -> Tuple[bool, str]:
    baseline = snapshot.tiles()
    submitted_tiles = board_tiles(new_board) + list(new_hand)
    submitted = TileBag.from_tiles(submitted_tiles)
    if submitted.duplicates():
        return False, "Tile submitted more than once"
    if submitted.missing_from(baseline):
        return False, "Invalid tile detected"
    lost = baseline.missing_from(submitted)
    if lost:
        return False, f"{len(lost)} tile(s) from the start of the turn are missing"
    # a known id must still carry the color, number and joker flag it was dealt with
    originals = {tile.id: tile for tile in board_tiles(snapshot.board) + list(snapshot.hand)}
    if any(tile != originals[tile.id] for tile in submitted_tiles):
        return False, "Tile does not match the original"
    return True, ""


def _check_board_kept(snapshot: TurnSnapshot, new_board: Tuple[Meld, ...]) -> Tuple[bool, str]:
    taken = snapshot.board_bag().missing_from(TileBag.from_tiles(board_tiles(new_board)))
    if taken:
        return False, "Tiles already on the board cannot be taken into your hand"
    return True, ""


def _initial_meld_points(snapshot: TurnSnapshot, new_board: Tuple[Meld, ...], ruleset: Ruleset) -> int:
    # only melds built entirely from this turn's hand count toward the opening
    hand_ids = snapshot.hand_bag()
    from_hand = [meld for meld in new_board if all(tile.id in hand_ids for tile in meld.tiles)]
    return calculate_total_points(from_hand, ruleset.min_number, ruleset.max_number)


class Game:
    """Turn controller for one room.

    The game owns the pool, every hand, the board and the turn-start snapshot,
    and is the only thing that mutates them. It is not thread safe: callers
    must serialize all calls on one instance.
    """

    def __init__(self, ruleset: Ruleset | None = None, rng_seed: Optional[int] = None) -> None:
        self.ruleset = ruleset or Ruleset()
        self.rng_seed = rng_seed
        self.pool = Pool(self.ruleset, random.Random(rng_seed))
        self.players: Dict[str, PlayerState] = {}
        self.player_order: List[str] = []
        self.current_index = 0
        self.board: Tuple[Meld, ...] = ()
        self.turn_start = TurnSnapshot(player_id=None)
        self.winner: Optional[str] = None
        self.turn_number = 0

    # -- players --------------------------------------------------------------

    def add_player(self, player_id: str, name: str) -> ActionResult:
        """Deal an opening hand and append the player to the turn order.

        Callers must only add players before play starts.
        """
        if player_id in self.players:
            return ActionResult.fail(ErrorKind.RULE, "Player already in game")
        tiles = self.pool.draw_multiple(self.ruleset.initial_hand_size)
        self.players[player_id] = PlayerState(id=player_id, name=name, tiles=tiles)
        self.player_order.append(player_id)
        logger.info("player %s joined with %d tiles, pool at %d", player_id, len(tiles), self.pool.size)
        return ActionResult.ok()

    def remove_player(self, player_id: str) -> ActionResult:
        player = self.players.get(player_id)
        if player is None:
            return ActionResult.fail(ErrorKind.LOOKUP, PLAYER_NOT_FOUND)

        before = self.current_player_id
        removed_index = self.player_order.index(player_id)
        if player_id == before or removed_index < self.current_index:
            self._ensure_turn_started()
            self._restore_turn_start()

        self.pool.return_tiles(player.tiles)
        del self.players[player_id]
        self.player_order.remove(player_id)
        if self.current_index >= len(self.player_order):
            self.current_index = 0
        logger.info("player %s left, returned %d tiles to pool", player_id, len(player.tiles))

        if self.current_player_id != before:
            self.start_turn()
        return ActionResult.ok()

    def set_player_connected(self, player_id: str, connected: bool) -> ActionResult:
        player = self.players.get(player_id)
        if player is None:
            return ActionResult.fail(ErrorKind.LOOKUP, PLAYER_NOT_FOUND)
        player.is_connected = connected
        return ActionResult.ok()

    @property
    def current_player_id(self) -> Optional[str]:
        if not self.player_order:
            return None
        return self.player_order[self.current_index]

    # -- turns ----------------------------------------------------------------

    def start_turn(self) -> None:
        current = self.current_player_id
        hand = self.players[current].tiles if current is not None else []
        self.turn_start = TurnSnapshot(player_id=current, board=tuple(self.board), hand=tuple(hand))
        logger.debug("turn started for %s", current)

    def _ensure_turn_started(self) -> None:
        if self.turn_start.player_id != self.current_player_id:
            logger.debug("no snapshot for %s, starting turn", self.current_player_id)
            self.start_turn()

    def _restore_turn_start(self) -> None:
        self.board = self.turn_start.board
        owner = self.players.get(self.turn_start.player_id) if self.turn_start.player_id else None
        if owner is not None:
            owner.tiles = list(self.turn_start.hand)

    def _next_turn(self) -> None:
        self.current_index = (self.current_index + 1) % len(self.player_order)
        self.turn_number += 1
        self.start_turn()

    def _check_actor(self, player_id: str) -> Tuple[Optional[PlayerState], Optional[ActionResult]]:
        if self.winner is not None:
            return None, ActionResult.fail(ErrorKind.GAME_OVER, GAME_FINISHED)
        if player_id != self.current_player_id:
            return None, ActionResult.fail(ErrorKind.TURN, NOT_YOUR_TURN)
        player = self.players.get(player_id)
        if player is None:
            return None, ActionResult.fail(ErrorKind.LOOKUP, PLAYER_NOT_FOUND)
        self._ensure_turn_started()
        return player, None

    def stage_tiles(self, player_id: str, new_board: Iterable[Meld], new_hand: Iterable[Tile]) -> ActionResult:
        """Publish an in-progress arrangement without ending the turn.

        The arrangement must account for exactly the turn-start tiles but need
        not form valid melds yet. ``undo_turn`` and ``draw_tile`` discard it.
        """
        player, rejection = self._check_actor(player_id)
        if rejection is not None:
            return rejection
        new_board = tuple(new_board)
        new_hand = list(new_hand)
        ok, reason = _check_provenance(self.turn_start, new_board, new_hand)
        if not ok:
            logger.warning("suspicious staged arrangement from %s: %s", player_id, reason)
            return ActionResult.fail(ErrorKind.PROVENANCE, reason)
        self.board = new_board
        player.tiles = new_hand
        return ActionResult.ok()

    def play_tiles(self, player_id: str, new_board: Iterable[Meld], new_hand: Iterable[Tile]) -> ActionResult:
        player, rejection = self._check_actor(player_id)
        if rejection is not None:
            return rejection
        new_board = tuple(new_board)
        new_hand = list(new_hand)
        snapshot = self.turn_start

        validation = validate_board(new_board, self.ruleset.min_number, self.ruleset.max_number)
        if not validation.valid:
            return ActionResult.fail(ErrorKind.RULE, validation.error)

        ok, reason = _check_provenance(snapshot, new_board, new_hand)
        if not ok:
            logger.warning("suspicious play from %s: %s", player_id, reason)
            return ActionResult.fail(ErrorKind.PROVENANCE, reason)

        if not self.ruleset.board_tiles_return_to_hand:
            ok, reason = _check_board_kept(snapshot, new_board)
            if not ok:
                return ActionResult.fail(ErrorKind.RULE, reason)

        opening = not player.has_initial_meld
        if opening:
            points = _initial_meld_points(snapshot, new_board, self.ruleset)
            threshold = self.ruleset.initial_meld_min_points
            if points < threshold:
                return ActionResult.fail(
                    ErrorKind.RULE, f"Initial meld must be at least {threshold} points (you have {points})"
                )

        if len(snapshot.hand) - len(new_hand) <= 0:
            return ActionResult.fail(ErrorKind.RULE, "You must play at least one tile")

        self.board = new_board
        player.tiles = new_hand
        if opening:
            player.has_initial_meld = True
        logger.debug("%s played %d tiles", player_id, len(snapshot.hand) - len(new_hand))

        if not player.tiles:
            self.winner = player_id
            logger.info("game over, %s wins", player_id)
        else:
            self._next_turn()
        return ActionResult.ok()

    def draw_tile(self, player_id: str) -> ActionResult:
        """Draw one tile and end the turn, discarding any staged edits first."""
        player, rejection = self._check_actor(player_id)
        if rejection is not None:
            return rejection
        if self.pool.is_empty():
            return ActionResult.fail(ErrorKind.POOL_EMPTY, "No tiles left in pool")

        self._restore_turn_start()
        tile = self.pool.draw()
        player.tiles.append(tile)
        logger.debug("%s drew a tile, pool at %d", player_id, self.pool.size)
        self._next_turn()
        return ActionResult.ok(tile)

    def undo_turn(self) -> ActionResult:
        if self.winner is not None:
            return ActionResult.fail(ErrorKind.GAME_OVER, GAME_FINISHED)
        current = self.current_player_id
        if current is None or current not in self.players:
            return ActionResult.fail(ErrorKind.LOOKUP, PLAYER_NOT_FOUND)
        self._ensure_turn_started()
        self._restore_turn_start()
        logger.debug("%s undid their turn", current)
        return ActionResult.ok()

    # -- read side ------------------------------------------------------------

    def get_state(self, room_code: str) -> GameSnapshot:
        return GameSnapshot(
            room_code=room_code,
            players=tuple(self.players[pid].view() for pid in self.player_order),
            current_player_id=self.current_player_id,
            board=self.board,
            pool=self.pool.size,
            turn_start_board=self.turn_start.board,
            winner=self.winner,
        )

    def get_player_tiles(self, player_id: str) -> Tuple[Tile, ...]:
        """The private hand of ``player_id``; only ever send it to that player."""
        player = self.players.get(player_id)
        return tuple(player.tiles) if player else ()

    def is_game_over(self) -> bool:
        return self.winner is not None

    def get_winner(self) -> Optional[str]:
        return self.winner

    def get_winner_name(self) -> Optional[str]:
        if self.winner is None:
            return None
        player = self.players.get(self.winner)
        return player.name if player else None
