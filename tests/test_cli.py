import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummikub.cli import _find_groups, _find_runs, _plan_melds, main, run_game
from rummikub.meld import board_tiles
from rummikub.tiles import create_joker, create_tile
from rummikub.validator import is_valid_meld


def test_plan_finds_runs_then_groups():
    hand = [
        create_tile("red", 3),
        create_tile("red", 4),
        create_tile("red", 5),
        create_tile("blue", 5),
        create_tile("black", 5),
        create_tile("yellow", 5),
        create_joker(),
    ]
    assert [len(r) for r in _find_runs(hand)] == [3]
    melds = _plan_melds(hand)
    assert len(melds) == 2
    assert all(is_valid_meld(m) for m in melds)
    assert len(_find_groups(hand)) == 1


def test_run_game_keeps_tile_count():
    game = run_game(seed=3, players=3, max_turns=60)
    total = game.pool.size + len(board_tiles(game.board)) + sum(len(game.get_player_tiles(p)) for p in game.player_order)
    assert total == 106
    assert all(m for m in game.board)
    assert all(is_valid_meld(m) for m in game.board)


def test_main_prints_summary(capsys):
    main(["--seed", "1", "--players", "2", "--max-turns", "10"])
    out = capsys.readouterr().out
    assert "Game finished after" in out
    assert "Hand sizes:" in out


def test_main_maps_flags_onto_ruleset(capsys):
    main(["--seed", "2", "--players", "3", "--max-turns", "0", "--hand-size", "5"])
    out = capsys.readouterr().out
    assert "Hand sizes: [5, 5, 5]" in out
    assert "pool: 91" in out
