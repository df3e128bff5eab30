"""Log module for Work - append-only progress notes on work items."""

import sqlite3
from typing import List, Optional

from work_core.exceptions import ValidationError
from work_core.items import require_item
from work_core.models import LogEntry
from work_core.store import update_item
from work_core.utils import get_iso_timestamp

__all__ = [
    "add_log_entry",
    "get_log",
]


def add_log_entry(
    db: sqlite3.Connection,
    item_id: str,
    text: str,
    agent: Optional[str] = None,
) -> LogEntry:
    """Append a log entry to a work item.

    Args:
        db: Database connection
        item_id: Work item ID to log against
        text: Entry text
        agent: Who/what wrote the entry (e.g., "executor", "reviewer")

    Returns:
        The appended LogEntry

    Raises:
        NotFoundError: If the item does not exist
        ValidationError: If text is empty

    Note:
        Log entries are append-only - no edit or delete operations.
    """
    if not text or not text.strip():
        raise ValidationError("Log message must not be empty")

    entry = LogEntry(time=get_iso_timestamp(), text=text, agent=agent or None)

    update_item(db, item_id, lambda item: item.log.append(entry))

    return entry


def get_log(db: sqlite3.Connection, item_id: str) -> List[LogEntry]:
    """Get all log entries for a work item, oldest first.

    Raises:
        NotFoundError: If the item does not exist
    """
    return list(require_item(db, item_id).log)
