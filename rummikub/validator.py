"""Pure rule checks for runs, groups and whole boards.

Nothing here touches game state. A tile list is judged purely on its contents,
never on the order the tiles were submitted in.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import ValidationResult
from .meld import Meld, MeldKind
from .tiles import MAX_NUMBER, MIN_NUMBER, Tile

MIN_MELD_SIZE = 3
MAX_GROUP_SIZE = 4


def _split_jokers(tiles: Sequence[Tile]) -> Tuple[List[Tile], int]:
    numbered = [t for t in tiles if not t.is_joker]
    return numbered, len(tiles) - len(numbered)


def resolve_run_start(
    tiles: Sequence[Tile], min_number: int = MIN_NUMBER, max_number: int = MAX_NUMBER
) -> Optional[int]:
    """Return the first number of the sequence ``tiles`` occupies as a run.

    Candidate windows ``[start, start + len - 1]`` inside the bounds are searched
    from the highest admissible start downwards. The highest start keeps the
    lowest numbered tile at the front, so surplus jokers extend upward and only
    shift below the lowest tile when the upper bound forces it. Returns ``None``
    when the tiles cannot form a run. An all-joker run starts at ``min_number``.
    """
    length = len(tiles)
    if length < MIN_MELD_SIZE or length > max_number - min_number + 1:
        return None
    numbered, _ = _split_jokers(tiles)
    if not numbered:
        return min_number
    if len({t.color for t in numbered}) != 1:
        return None
    numbers = [t.number for t in numbered]
    if len(set(numbers)) != len(numbers):
        return None
    low, high = min(numbers), max(numbers)
    # jokers fill whatever positions in the window the numbered tiles leave open
    for start in range(min(low, max_number - length + 1), min_number - 1, -1):
        if high <= start + length - 1:
            return start
    return None


def is_valid_run(tiles: Sequence[Tile], min_number: int = MIN_NUMBER, max_number: int = MAX_NUMBER) -> bool:
    return resolve_run_start(tiles, min_number, max_number) is not None


def is_valid_group(tiles: Sequence[Tile]) -> bool:
    if not MIN_MELD_SIZE <= len(tiles) <= MAX_GROUP_SIZE:
        return False
    numbered, _ = _split_jokers(tiles)
    if not numbered:
        return True
    if len({t.number for t in numbered}) != 1:
        return False
    return len({t.color for t in numbered}) == len(numbered)


def classify_meld(
    tiles: Sequence[Tile], min_number: int = MIN_NUMBER, max_number: int = MAX_NUMBER
) -> Optional[MeldKind]:
    # run first: all-joker and joker-heavy melds that fit both are runs
    if is_valid_run(tiles, min_number, max_number):
        return MeldKind.RUN
    if is_valid_group(tiles):
        return MeldKind.GROUP
    return None


def is_valid_meld(meld: Meld, min_number: int = MIN_NUMBER, max_number: int = MAX_NUMBER) -> bool:
    return classify_meld(meld.tiles, min_number, max_number) is not None


def describe_meld(meld: Meld) -> str:
    return ", ".join(meld.codes())


def validate_board(
    melds: Iterable[Meld], min_number: int = MIN_NUMBER, max_number: int = MAX_NUMBER
) -> ValidationResult:
    for meld in melds:
        if not is_valid_meld(meld, min_number, max_number):
            return ValidationResult(False, f"Invalid meld: {describe_meld(meld)}", meld.id)
    return ValidationResult(True)


def calculate_meld_points(tiles: Sequence[Tile], min_number: int = MIN_NUMBER, max_number: int = MAX_NUMBER) -> int:
    """Points a meld is worth toward the initial meld.

    Jokers count as the number they stand in for. All-joker melds and invalid
    melds are worth nothing.
    """
    numbered, _ = _split_jokers(tiles)
    if not numbered:
        return 0
    kind = classify_meld(tiles, min_number, max_number)
    if kind == MeldKind.RUN:
        start = resolve_run_start(tiles, min_number, max_number)
        return sum(range(start, start + len(tiles)))
    if kind == MeldKind.GROUP:
        return numbered[0].number * len(tiles)
    return 0


def calculate_total_points(
    melds: Iterable[Meld], min_number: int = MIN_NUMBER, max_number: int = MAX_NUMBER
) -> int:
    return sum(calculate_meld_points(meld.tiles, min_number, max_number) for meld in melds)
