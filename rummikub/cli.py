from __future__ import annotations

import argparse
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .engine import Game
from .meld import Meld, new_meld
from .rules import Ruleset
from .tiles import Tile

logger = logging.getLogger(__name__)

MIN_MELD = 3


def _find_runs(hand: Sequence[Tile]) -> List[List[Tile]]:
    by_color: Dict[str, Dict[int, Tile]] = defaultdict(dict)
    for tile in hand:
        if not tile.is_joker:
            by_color[tile.color.value].setdefault(tile.number, tile)

    runs: List[List[Tile]] = []
    for numbers in by_color.values():
        streak: List[Tile] = []
        for number in sorted(numbers):
            if streak and number != streak[-1].number + 1:
                if len(streak) >= MIN_MELD:
                    runs.append(streak)
                streak = []
            streak.append(numbers[number])
        if len(streak) >= MIN_MELD:
            runs.append(streak)
    return runs


def _find_groups(hand: Sequence[Tile]) -> List[List[Tile]]:
    by_number: Dict[int, Dict[str, Tile]] = defaultdict(dict)
    for tile in hand:
        if not tile.is_joker:
            by_number[tile.number].setdefault(tile.color.value, tile)
    return [list(colors.values()) for _, colors in sorted(by_number.items()) if len(colors) >= MIN_MELD]


def _plan_melds(hand: Sequence[Tile]) -> List[Meld]:
    """Greedy plan: every run in hand, then groups from what is left."""
    melds = [new_meld(run) for run in _find_runs(hand)]
    used = {tile.id for meld in melds for tile in meld.tiles}
    remaining = [tile for tile in hand if tile.id not in used]
    melds.extend(new_meld(group) for group in _find_groups(remaining))
    return melds


def _take_turn(game: Game, player_id: str) -> str:
    hand = game.get_player_tiles(player_id)
    melds = _plan_melds(hand)
    if melds:
        used = {tile.id for meld in melds for tile in meld.tiles}
        new_hand = [tile for tile in hand if tile.id not in used]
        result = game.play_tiles(player_id, game.board + tuple(melds), new_hand)
        if result:
            return "play"
        logger.debug("%s could not play: %s", player_id, result.error)

    result = game.draw_tile(player_id)
    if result:
        return "draw"
    logger.debug("%s could not draw: %s", player_id, result.error)
    return "stuck"


def run_game(seed: Optional[int] = None, players: int = 4, max_turns: int = 500, ruleset: Ruleset | None = None) -> Game:
    game = Game(ruleset=ruleset, rng_seed=seed)
    for idx in range(players):
        game.add_player(f"bot{idx}", f"Bot {idx}")
    game.start_turn()

    for _ in range(max_turns):
        if game.is_game_over():
            break
        if _take_turn(game, game.current_player_id) == "stuck":
            logger.info("pool exhausted with no legal play, stopping")
            break
    return game


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run a bot-only Rummikub simulation through the turn engine.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible deals.")
    parser.add_argument("--players", type=int, default=4, help="Number of bot players (2-4).")
    parser.add_argument("--max-turns", type=int, default=500, help="Stop after this many turns.")
    parser.add_argument("--hand-size", type=int, default=14, help="Tiles dealt to each player.")
    parser.add_argument("--opening-points", type=int, default=30, help="Points needed for the initial meld.")
    parser.add_argument(
        "--keep-board-tiles",
        action="store_true",
        help="Forbid taking tiles already on the board back into a hand.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    rules = Ruleset(
        initial_hand_size=args.hand_size,
        initial_meld_min_points=args.opening_points,
        board_tiles_return_to_hand=not args.keep_board_tiles,
    )
    if not rules.min_players <= args.players <= rules.max_players:
        parser.error(f"--players must be between {rules.min_players} and {rules.max_players}")

    game = run_game(seed=args.seed, players=args.players, max_turns=args.max_turns, ruleset=rules)
    print(f"Game finished after {game.turn_number} turns")
    if game.is_game_over():
        print(f"Winner: {game.get_winner_name()}")
    else:
        print("No winner (turn limit reached or pool exhausted)")
    print("Hand sizes:", [len(game.get_player_tiles(pid)) for pid in game.player_order])
    print("Board melds:", len(game.board), "| pool:", game.pool.size)


if __name__ == "__main__":
    main()
