"""Relational store for Work - authoritative keyed storage of work items."""

import json
import logging
import sqlite3
from typing import Any, Callable, Iterable, List, Optional, Tuple

from work_core.exceptions import DuplicateIdError, NotFoundError, ValidationError
from work_core.models import LogEntry, WorkItem
from work_core.utils import get_iso_timestamp, normalize_id

__all__ = [
    "get_item",
    "insert_item",
    "insert_items",
    "update_item",
    "list_items",
    "all_items",
    "replace_all",
    "max_numeric_id",
    "distinct_labels",
]

logger = logging.getLogger(__name__)

COLUMNS = (
    "id",
    "title",
    "status",
    "priority",
    "type",
    "created",
    "updated",
    "description",
    "blocked_by",
    "labels",
    "closed_reason",
    "log",
    "author",
    "assignee",
    "extra",
)

INSERT_SQL = f"""INSERT INTO items ({', '.join(COLUMNS)})
    VALUES ({', '.join('?' * len(COLUMNS))})"""

UPDATE_SQL = f"""UPDATE items
    SET {', '.join(f'{col} = ?' for col in COLUMNS[1:])}
    WHERE id = ?"""

# Numeric ID order; "1000" must sort after "999"
ID_ORDER = "CAST(id AS INTEGER) ASC, id ASC"


def _json_or_null(value: Any) -> Optional[str]:
    return json.dumps(value) if value else None


def _to_row(item: WorkItem) -> Tuple[Any, ...]:
    return (
        item.id,
        item.title,
        item.status,
        item.priority,
        item.type,
        item.created,
        item.updated,
        item.description,
        _json_or_null(item.blocked_by),
        _json_or_null(item.labels),
        item.closed_reason,
        _json_or_null([entry.to_dict() for entry in item.log]),
        item.author,
        item.assignee,
        _json_or_null(item.extra),
    )


def _from_row(row: sqlite3.Row) -> WorkItem:
    return WorkItem(
        id=row["id"],
        title=row["title"],
        status=row["status"],
        priority=row["priority"],
        type=row["type"],
        created=row["created"],
        updated=row["updated"],
        description=row["description"],
        blocked_by=json.loads(row["blocked_by"]) if row["blocked_by"] else [],
        labels=json.loads(row["labels"]) if row["labels"] else [],
        closed_reason=row["closed_reason"],
        log=[LogEntry.from_dict(e) for e in json.loads(row["log"])] if row["log"] else [],
        author=row["author"],
        assignee=row["assignee"],
        extra=json.loads(row["extra"]) if row["extra"] else {},
    )


def get_item(db: sqlite3.Connection, item_id: str) -> Optional[WorkItem]:
    """Get work item by ID.

    Args:
        db: Database connection
        item_id: Work item ID ("1" and "001" are equivalent)

    Returns:
        WorkItem, or None if not found
    """
    cursor = db.execute("SELECT * FROM items WHERE id = ?", (normalize_id(item_id),))
    row = cursor.fetchone()

    if row is None:
        return None

    return _from_row(row)


def insert_item(db: sqlite3.Connection, item: WorkItem) -> WorkItem:
    """Insert a new work item.

    Raises:
        DuplicateIdError: If the ID is already present
        ValidationError: If the item breaks a field rule
    """
    item.validate()

    try:
        db.execute(INSERT_SQL, _to_row(item))
    except sqlite3.IntegrityError:
        db.rollback()
        raise DuplicateIdError(item.id)
    db.commit()

    return item


def insert_items(db: sqlite3.Connection, items: Iterable[WorkItem]) -> int:
    """Insert several new work items in one transaction.

    Every item is validated before anything is written; if any insert fails
    none of them are kept.

    Returns:
        Number of items inserted

    Raises:
        DuplicateIdError: If an ID is already present or repeated
        ValidationError: If any item breaks a field rule
    """
    items = list(items)
    for item in items:
        item.validate()

    try:
        for item in items:
            try:
                db.execute(INSERT_SQL, _to_row(item))
            except sqlite3.IntegrityError:
                raise DuplicateIdError(item.id)
    except Exception:
        db.rollback()
        raise

    db.commit()

    return len(items)


def update_item(
    db: sqlite3.Connection,
    item_id: str,
    mutator: Callable[[WorkItem], None],
) -> WorkItem:
    """Apply a mutation to a stored work item.

    The mutator receives the current WorkItem and changes it in place. The
    `updated` timestamp is always refreshed, and the result is validated
    before anything is written, so a failing mutation leaves the row as it was.

    Args:
        db: Database connection
        item_id: Work item ID
        mutator: Callable that edits the item in place

    Returns:
        The updated WorkItem

    Raises:
        NotFoundError: If the ID is not in the store
        ValidationError: If the mutated item breaks a field rule
    """
    item_id = normalize_id(item_id)
    item = get_item(db, item_id)
    if item is None:
        raise NotFoundError(item_id)

    mutator(item)

    if item.id != item_id:
        raise ValidationError(f"Work item ID is immutable ({item_id} -> {item.id})")

    item.updated = get_iso_timestamp()
    item.validate()

    row = _to_row(item)
    db.execute(UPDATE_SQL, row[1:] + (item_id,))
    db.commit()

    return item


def list_items(
    db: sqlite3.Connection,
    status: Optional[str] = None,
    item_type: Optional[str] = None,
    author: Optional[str] = None,
    assignee: Optional[str] = None,
    label: Optional[str] = None,
) -> List[WorkItem]:
    """List work items with optional filtering.

    All supplied filters must match. Without a status filter closed items are
    left out; pass status="any" to include every status.

    Args:
        db: Database connection
        status: Filter by status, "any" for all (optional)
        item_type: Filter by type (optional)
        author: Filter by author (optional)
        assignee: Filter by assignee (optional)
        label: Only items carrying this label (optional)

    Returns:
        List of WorkItem, sorted by priority then numeric ID
    """
    query = "SELECT * FROM items WHERE 1=1"
    params: List[Any] = []

    if status is None:
        query += " AND status != 'closed'"
    elif status != "any":
        query += " AND status = ?"
        params.append(status)

    if item_type is not None:
        query += " AND type = ?"
        params.append(item_type)

    if author is not None:
        query += " AND author = ?"
        params.append(author)

    if assignee is not None:
        query += " AND assignee = ?"
        params.append(assignee)

    if label is not None:
        query += " AND EXISTS (SELECT 1 FROM json_each(items.labels) WHERE json_each.value = ?)"
        params.append(label)

    query += f" ORDER BY priority ASC, {ID_ORDER}"

    cursor = db.execute(query, params)
    return [_from_row(row) for row in cursor.fetchall()]


def all_items(db: sqlite3.Connection) -> List[WorkItem]:
    """Get every work item, closed included, ordered by numeric ID."""
    cursor = db.execute(f"SELECT * FROM items ORDER BY {ID_ORDER}")
    return [_from_row(row) for row in cursor.fetchall()]


def replace_all(db: sqlite3.Connection, items: Iterable[WorkItem]) -> int:
    """Atomically replace the whole table with the given items.

    Either every item is written or the previous contents are kept.

    Returns:
        Number of items written

    Raises:
        DuplicateIdError: If the collection repeats an ID
        ValidationError: If any item breaks a field rule
    """
    items = list(items)
    for item in items:
        item.validate()

    try:
        db.execute("DELETE FROM items")
        for item in items:
            try:
                db.execute(INSERT_SQL, _to_row(item))
            except sqlite3.IntegrityError:
                raise DuplicateIdError(item.id)
    except Exception:
        db.rollback()
        raise

    db.commit()
    logger.debug("Replaced store contents with %d items", len(items))

    return len(items)


def max_numeric_id(db: sqlite3.Connection) -> int:
    """Get the highest numeric ID in the store, or 0 if empty."""
    cursor = db.execute("SELECT MAX(CAST(id AS INTEGER)) FROM items")
    value = cursor.fetchone()[0]
    return int(value) if value is not None else 0


def distinct_labels(db: sqlite3.Connection) -> List[str]:
    """Get every label used by any work item, sorted."""
    cursor = db.execute(
        """SELECT DISTINCT json_each.value FROM items, json_each(items.labels)
           ORDER BY json_each.value"""
    )
    return [row[0] for row in cursor.fetchall()]
