"""Sync module for Work - JSONL import/export.

The SQLite store is the source of truth. The JSONL file is a derived view that
is rewritten in full after every mutation and only flows back into the store
through an explicit import.
"""

import logging
import os
import sqlite3
import tempfile
from pathlib import Path
from typing import List

from work_core.codec import decode, encode
from work_core.models import WorkItem
from work_core.store import all_items, replace_all

__all__ = [
    "export_to_jsonl",
    "import_from_jsonl",
    "read_jsonl",
]

logger = logging.getLogger(__name__)


def export_to_jsonl(db: sqlite3.Connection, jsonl_path: str) -> int:
    """Export every work item to the JSONL file.

    Args:
        db: Database connection
        jsonl_path: Path to JSONL file to (re)create

    Returns:
        Number of items written

    Format:
        One JSON object per line, sorted by numeric ID, closed items included.
        The file is replaced as a whole via a temporary sibling file, so
        readers never observe a partially written export.
    """
    items = all_items(db)
    content = encode(items)

    path = Path(jsonl_path)
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.debug("Exported %d items to %s", len(items), path)
    return len(items)


def read_jsonl(jsonl_path: str) -> List[WorkItem]:
    """Decode the JSONL file, returning [] if it is absent or empty."""
    path = Path(jsonl_path)

    if not path.exists():
        return []

    return decode(path.read_text(encoding="utf-8"))


def import_from_jsonl(db: sqlite3.Connection, jsonl_path: str) -> int:
    """Replace the store contents with the items in the JSONL file.

    Args:
        db: Database connection
        jsonl_path: Path to JSONL file to import

    Returns:
        Number of items imported. 0 means there was nothing to import: the
        file was absent or empty, and the store is now empty to match it.

    Raises:
        CorruptRecordError: If a line cannot be decoded (store untouched)
        DuplicateIdError: If the file repeats an ID (store untouched)
    """
    items = read_jsonl(jsonl_path)
    count = replace_all(db, items)

    if count == 0:
        logger.info("Nothing to import from %s", jsonl_path)
    else:
        logger.info("Imported %d items from %s", count, jsonl_path)

    return count
