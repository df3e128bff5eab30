"""Work item management for Work - creation, status transitions, edits."""

import sqlite3
from typing import Optional

from work_core.constants import DEFAULT_PRIORITY, DEFAULT_TYPE, EDITABLE_FIELDS
from work_core.exceptions import NotFoundError, UnknownFieldError, ValidationError
from work_core.ids import next_id
from work_core.models import WorkItem, new_item, parse_priority, validate_type
from work_core.store import get_item, insert_item, update_item
from work_core.utils import normalize_id

__all__ = [
    "create_item",
    "require_item",
    "start_item",
    "close_item",
    "reopen_item",
    "edit_item",
    "claim_item",
    "unclaim_item",
]


def create_item(
    db: sqlite3.Connection,
    title: str,
    item_type: str = DEFAULT_TYPE,
    priority: int = DEFAULT_PRIORITY,
    author: Optional[str] = None,
    assignee: Optional[str] = None,
    description: Optional[str] = None,
) -> WorkItem:
    """Create a new work item with the next free ID.

    Args:
        db: Database connection
        title: Item title (required)
        item_type: task, bug, feature or message
        priority: Priority 0-4 (0=critical, 4=backlog)
        author: Who filed the item (optional)
        assignee: Who the item is for (optional)
        description: Optional detailed description

    Returns:
        The stored WorkItem

    Raises:
        ValidationError: If title is empty or type/priority is invalid
    """
    item = new_item(
        next_id(db),
        title,
        item_type=item_type,
        priority=priority,
        author=author,
        assignee=assignee,
        description=description,
    )
    return insert_item(db, item)


def require_item(db: sqlite3.Connection, item_id: str) -> WorkItem:
    """Get a work item, raising NotFoundError if it does not exist."""
    item = get_item(db, item_id)
    if item is None:
        raise NotFoundError(normalize_id(item_id))
    return item


def start_item(db: sqlite3.Connection, item_id: str) -> WorkItem:
    """Mark a work item as in progress."""

    def mutate(item: WorkItem) -> None:
        item.status = "in_progress"

    return update_item(db, item_id, mutate)


def close_item(db: sqlite3.Connection, item_id: str, reason: Optional[str] = None) -> WorkItem:
    """Close a work item, optionally recording why."""

    def mutate(item: WorkItem) -> None:
        item.status = "closed"
        if reason:
            item.closed_reason = reason

    return update_item(db, item_id, mutate)


def reopen_item(db: sqlite3.Connection, item_id: str) -> WorkItem:
    """Reopen a work item and drop its closed reason."""

    def mutate(item: WorkItem) -> None:
        item.status = "open"
        item.closed_reason = None

    return update_item(db, item_id, mutate)


def edit_item(db: sqlite3.Connection, item_id: str, field: str, value: str) -> WorkItem:
    """Set one editable field from its command-line text.

    Priority must parse as an integer in range; a value like "bad" raises
    ValidationError and the item is left unchanged.

    Raises:
        NotFoundError: If the item does not exist
        UnknownFieldError: If field is not one of EDITABLE_FIELDS
        ValidationError: If the value is not acceptable for the field
    """
    require_item(db, item_id)

    if field not in EDITABLE_FIELDS:
        raise UnknownFieldError(field)

    if field == "priority":
        new_value = parse_priority(value)
    elif field == "type":
        new_value = validate_type(value)
    else:
        new_value = value

    def mutate(item: WorkItem) -> None:
        setattr(item, field, new_value)

    return update_item(db, item_id, mutate)


def claim_item(db: sqlite3.Connection, item_id: str, assignee: str) -> WorkItem:
    """Assign a work item to someone."""
    if not assignee or not assignee.strip():
        raise ValidationError("Assignee must not be empty")

    def mutate(item: WorkItem) -> None:
        item.assignee = assignee

    return update_item(db, item_id, mutate)


def unclaim_item(db: sqlite3.Connection, item_id: str) -> WorkItem:
    """Clear the assignee of a work item."""

    def mutate(item: WorkItem) -> None:
        item.assignee = None

    return update_item(db, item_id, mutate)
