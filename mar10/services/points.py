"""Finishing position -> points."""

from typing import Dict

POINTS_TABLE: Dict[int, int] = {
    1: 15,
    2: 12,
    3: 10,
    4: 8,
    5: 7,
    6: 6,
    7: 5,
    8: 4,
    9: 3,
    10: 2,
    11: 1,
    12: 0,
}

MAX_POSITION = 12


def get_points(position: int) -> int:
    """Points for a finishing position; anything outside 1..12 scores 0."""
    return POINTS_TABLE.get(position, 0)
