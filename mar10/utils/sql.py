"""
SQL utilities for consistent handling of query results.

SQLModel/SQLAlchemy may return COUNT/MAX results as int or as a 1-tuple/Row,
and MAX over an empty table comes back as None.
"""
from typing import Any, Optional


def scalar_int(x: Any) -> int:
    """Convert COUNT/aggregate result to int. Handles int or 1-tuple/Row."""
    try:
        return int(x[0])
    except (TypeError, IndexError):
        return int(x)


def scalar_int_or_none(x: Any) -> Optional[int]:
    """Like scalar_int, but MAX/MIN over no rows yields None instead of raising."""
    if x is None:
        return None
    try:
        value = x[0]
    except (TypeError, IndexError):
        value = x
    return None if value is None else int(value)
