"""ID allocation for Work - stable, zero-padded sequential IDs."""

import sqlite3

from work_core.constants import ID_WIDTH
from work_core.store import max_numeric_id
from work_core.utils import normalize_id

__all__ = [
    "next_id",
    "format_id",
    "normalize_id",
]


def format_id(number: int) -> str:
    """Format an integer as a work item ID.

    Examples:
        >>> format_id(7)
        '007'
        >>> format_id(1000)
        '1000'
    """
    return str(number).zfill(ID_WIDTH)


def next_id(db: sqlite3.Connection) -> str:
    """Allocate the next work item ID.

    IDs are never reused: the next ID is always one past the highest numeric
    ID currently stored, whatever order the items were inserted or imported
    in. An empty store starts at "001".

    Args:
        db: Database connection

    Returns:
        Zero-padded ID string, e.g. "042"
    """
    return format_id(max_numeric_id(db) + 1)
