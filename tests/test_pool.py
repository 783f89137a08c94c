import pathlib
import random
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummikub.pool import Pool
from rummikub.rules import Ruleset
from rummikub.tiles import Tile, TileColor, create_joker, create_tile, tile_code


def test_full_pool_has_106_unique_tiles():
    pool = Pool(rng=random.Random(3))
    assert pool.size == 106 == Ruleset().deck_size()
    tiles = pool.draw_multiple(106)
    assert len({t.id for t in tiles}) == 106
    assert sum(t.is_joker for t in tiles) == 2
    assert pool.is_empty()


def test_draw_from_empty_pool_returns_none():
    pool = Pool(Ruleset(copies_per_tile=0, num_jokers=1))
    assert pool.draw().is_joker
    assert pool.draw() is None


def test_draw_multiple_stops_early():
    pool = Pool(Ruleset(copies_per_tile=0, num_jokers=2))
    assert len(pool.draw_multiple(5)) == 2
    assert len(pool) == 0


def test_draw_multiple_rejects_negative_count():
    with pytest.raises(ValueError):
        Pool().draw_multiple(-1)


def test_return_tile_restores_size():
    pool = Pool(rng=random.Random(1))
    drawn = pool.draw_multiple(14)
    pool.return_tile(drawn[0])
    pool.return_tiles(drawn[1:])
    assert pool.size == 106


def test_same_seed_gives_same_order():
    a = Pool(rng=random.Random(9)).draw_multiple(10)
    b = Pool(rng=random.Random(9)).draw_multiple(10)
    assert [tile_code(t) for t in a] == [tile_code(t) for t in b]


def test_tile_codes():
    assert tile_code(create_joker()) == "J"
    assert tile_code(create_tile("red", 7)) == "r7"
    assert create_tile(TileColor.YELLOW, 13).code() == "y13"


def test_tile_number_is_range_checked():
    with pytest.raises(ValueError):
        create_tile("red", 0)
    with pytest.raises(ValueError):
        create_tile("red", 14)


def test_tile_dict_codec():
    tile = create_tile("blue", 11, tile_id="abc")
    assert Tile.from_dict(tile.to_dict()) == tile
    with pytest.raises(ValueError):
        Tile.from_dict({"id": "x", "color": "green", "number": 3})


def test_pool_follows_ruleset_colors_and_numbers():
    rules = Ruleset(colors=("red", "blue"), max_number=9)
    pool = Pool(rules, random.Random(1))
    assert pool.size == rules.deck_size() == 2 * 9 * 2 + 2
    tiles = pool.draw_multiple(pool.size)
    assert {t.color for t in tiles if not t.is_joker} == {TileColor.RED, TileColor.BLUE}
    assert max(t.number for t in tiles) == 9


def test_ruleset_rejects_tiles_that_cannot_exist():
    with pytest.raises(ValueError, match="unknown tile colors"):
        Ruleset(colors=("red", "green"))
    with pytest.raises(ValueError, match="number range"):
        Ruleset(max_number=14)
    with pytest.raises(ValueError, match="number range"):
        Ruleset(min_number=5, max_number=4)
