"""Labels for Work - free-form tags on work items."""

import sqlite3
from typing import List

from work_core.exceptions import ValidationError
from work_core.items import require_item
from work_core.store import distinct_labels, update_item

__all__ = [
    "add_label",
    "remove_label",
    "get_all_labels",
]


def add_label(db: sqlite3.Connection, item_id: str, label: str) -> bool:
    """Tag a work item.

    Returns:
        True if the label was added, False if the item already had it

    Raises:
        NotFoundError: If the item does not exist
        ValidationError: If label is empty
    """
    label = label.strip() if label else ""
    if not label:
        raise ValidationError("Label must not be empty")

    item = require_item(db, item_id)
    if label in item.labels:
        return False

    update_item(db, item.id, lambda i: i.labels.append(label))
    return True


def remove_label(db: sqlite3.Connection, item_id: str, label: str) -> bool:
    """Remove a tag from a work item.

    Returns:
        True if the label was removed, False if the item did not have it

    Raises:
        NotFoundError: If the item does not exist
    """
    item = require_item(db, item_id)
    if label not in item.labels:
        return False

    update_item(db, item.id, lambda i: i.labels.remove(label))
    return True


def get_all_labels(db: sqlite3.Connection) -> List[str]:
    """Get every distinct label in use, sorted."""
    return distinct_labels(db)
