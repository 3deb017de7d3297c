from __future__ import annotations

from collections.abc import Sequence

from .config import DEFAULT_SECRET_CODE, MAX_DIGITS, TILE_COUNT


def is_password_complete(code: str, max_digits: int = MAX_DIGITS) -> bool:
    return len(code) == max_digits


def is_password_correct(code: str, secret: str = DEFAULT_SECRET_CODE) -> bool:
    # Ordered, exact-length match.
    return str(code) == str(secret)


def is_arrangement_solved(tiles: Sequence[int], tile_count: int = TILE_COUNT) -> bool:
    """True iff slot ``i`` holds tile ``i`` for every slot (identity permutation)."""

    if len(tiles) != tile_count:
        return False
    return all(int(tile) == slot for slot, tile in enumerate(tiles))
