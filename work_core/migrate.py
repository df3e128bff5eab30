"""Migration for Work - import issues exported from beads.

beads exports either a JSON array or JSON Lines of issue objects using its own
field names (issue_type, created_at, close_reason, ...). Converted items get
fresh sequential IDs after the current maximum; the original beads ID is kept
under the "beads_id" key so it round-trips through the JSONL file.
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from work_core.constants import PRIORITY_RANGE, VALID_STATUSES
from work_core.exceptions import ValidationError
from work_core.ids import format_id
from work_core.models import WorkItem
from work_core.store import insert_items, max_numeric_id
from work_core.utils import get_iso_timestamp

__all__ = [
    "load_beads_export",
    "convert_beads_issue",
    "migrate_beads",
]

logger = logging.getLogger(__name__)

BEADS_TYPE_MAP = {"bug": "bug", "feature": "feature"}


def load_beads_export(export_path: str) -> List[Dict[str, Any]]:
    """Read a beads export file (JSON array or JSON Lines).

    Raises:
        ValidationError: If the file is not valid JSON in either shape
    """
    text = Path(export_path).read_text(encoding="utf-8").strip()
    if not text:
        return []

    try:
        if text.startswith("["):
            data = json.loads(text)
        else:
            data = [json.loads(line) for line in text.splitlines() if line.strip()]
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid beads export {export_path}: {e.msg} (line {e.lineno})")

    if not all(isinstance(entry, dict) for entry in data):
        raise ValidationError(f"Invalid beads export {export_path}: expected issue objects")

    return data


def _clamp_priority(value: Any) -> int:
    min_priority, max_priority = PRIORITY_RANGE
    try:
        priority = int(value)
    except (TypeError, ValueError, OverflowError):
        return 2
    return max(min_priority, min(max_priority, priority))


def _text(value: Any) -> Optional[str]:
    """Coerce a scalar beads field to text; empty and missing become None.

    Raises:
        ValidationError: If the value is a list or an object
    """
    if value is None or value == "":
        return None
    if isinstance(value, (dict, list)):
        raise ValidationError(f"Expected a text value, got {json.dumps(value)}")
    return str(value)


def convert_beads_issue(bead: Dict[str, Any], item_id: str) -> WorkItem:
    """Convert one beads issue into a WorkItem with the given ID.

    Raises:
        ValidationError: If a field cannot be converted
    """
    status = _text(bead.get("status"))
    if status not in VALID_STATUSES:
        status = "open"

    created = _text(bead.get("created_at")) or get_iso_timestamp()
    title = (_text(bead.get("title")) or "").strip()

    item = WorkItem(
        id=item_id,
        title=title or "(untitled)",
        status=status,
        priority=_clamp_priority(bead.get("priority", 2)),
        type=BEADS_TYPE_MAP.get(_text(bead.get("issue_type")), "task"),
        created=created,
        updated=_text(bead.get("updated_at")) or created,
        description=_text(bead.get("description")),
        closed_reason=_text(bead.get("close_reason")),
        assignee=_text(bead.get("assignee")),
    )

    beads_id = _text(bead.get("id"))
    if beads_id:
        item.extra["beads_id"] = beads_id

    return item


def migrate_beads(db: sqlite3.Connection, export_path: str) -> List[WorkItem]:
    """Import a beads export into the store.

    Issues are ordered by created_at and numbered after the current highest ID.
    Every issue is converted before any is written, and all of them are
    inserted in one transaction: a bad issue leaves the store unchanged.

    Args:
        db: Database connection
        export_path: Path to the beads export

    Returns:
        List of the inserted WorkItems

    Raises:
        ValidationError: If the export or one of its issues is invalid
    """
    beads = load_beads_export(export_path)
    beads.sort(key=lambda bead: str(bead.get("created_at") or ""))

    start = max_numeric_id(db) + 1
    items = []

    for offset, bead in enumerate(beads):
        try:
            items.append(convert_beads_issue(bead, format_id(start + offset)))
        except ValidationError as e:
            raise ValidationError(f"Cannot convert beads issue {bead.get('id', '?')}: {e}") from e

    insert_items(db, items)

    logger.info("Migrated %d beads issues from %s", len(items), export_path)
    return items
