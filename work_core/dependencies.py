"""Dependency management for Work - blocking relationships and readiness."""

import sqlite3
from typing import Iterable, List, Set, Tuple

from work_core.exceptions import NotFoundError, ValidationError
from work_core.models import WorkItem
from work_core.store import get_item, list_items, update_item
from work_core.utils import normalize_id

__all__ = [
    "get_closed_ids",
    "open_blockers",
    "is_ready",
    "get_ready",
    "get_blocked",
    "add_block",
    "remove_block",
]


def get_closed_ids(db: sqlite3.Connection) -> Set[str]:
    """Get the IDs of every closed work item."""
    cursor = db.execute("SELECT id FROM items WHERE status = 'closed'")
    return {row[0] for row in cursor.fetchall()}


def open_blockers(item: WorkItem, closed_ids: Iterable[str]) -> List[str]:
    """Get the blockers of an item that are not closed, in blocked_by order.

    A blocker ID that does not exist in the store is never in closed_ids, so
    it counts as open and keeps the item blocked until it is removed.
    """
    closed = set(closed_ids)
    return [blocker for blocker in item.blocked_by if blocker not in closed]


def is_ready(item: WorkItem, closed_ids: Iterable[str]) -> bool:
    """Check whether an item has no open blockers."""
    return not open_blockers(item, closed_ids)


def get_ready(db: sqlite3.Connection) -> List[WorkItem]:
    """Get non-closed work items with no open blockers.

    Items that block each other in a cycle are never ready; no cycle
    detection is done.

    Returns:
        List of WorkItem, sorted by priority then numeric ID
    """
    closed_ids = get_closed_ids(db)
    return [item for item in list_items(db) if is_ready(item, closed_ids)]


def get_blocked(db: sqlite3.Connection) -> List[Tuple[WorkItem, List[str]]]:
    """Get non-closed work items held back by at least one open blocker.

    Returns:
        List of (item, open blocker IDs) tuples, sorted by priority then
        numeric ID
    """
    closed_ids = get_closed_ids(db)
    blocked = []

    for item in list_items(db):
        pending = open_blockers(item, closed_ids)
        if pending:
            blocked.append((item, pending))

    return blocked


def add_block(db: sqlite3.Connection, item_id: str, blocker_id: str) -> bool:
    """Record that item_id cannot be ready until blocker_id is closed.

    Args:
        db: Database connection
        item_id: Item being blocked
        blocker_id: Item that must close first

    Returns:
        True if the edge was added, False if it was already present

    Raises:
        NotFoundError: If either item does not exist
        ValidationError: If an item would block itself
    """
    item_id = normalize_id(item_id)
    blocker_id = normalize_id(blocker_id)

    item = get_item(db, item_id)
    if item is None:
        raise NotFoundError(item_id)

    if get_item(db, blocker_id) is None:
        raise NotFoundError(blocker_id)

    if item_id == blocker_id:
        raise ValidationError(f"Work item {item_id} cannot block itself")

    if blocker_id in item.blocked_by:
        return False

    update_item(db, item_id, lambda i: i.blocked_by.append(blocker_id))
    return True


def remove_block(db: sqlite3.Connection, item_id: str, blocker_id: str) -> bool:
    """Remove a blocking relationship.

    The blocker does not need to exist, so dangling references can be
    cleaned up. When the last blocker goes, blocked_by becomes absent.

    Returns:
        True if the edge was removed, False if it was not present

    Raises:
        NotFoundError: If item_id does not exist
    """
    item_id = normalize_id(item_id)
    blocker_id = normalize_id(blocker_id)

    item = get_item(db, item_id)
    if item is None:
        raise NotFoundError(item_id)

    if blocker_id not in item.blocked_by:
        return False

    update_item(db, item_id, lambda i: i.blocked_by.remove(blocker_id))
    return True
