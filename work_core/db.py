"""Database module for Work - workspace discovery, schema, initialization."""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Optional

from work_core.constants import (
    DB_FILENAME,
    JSONL_FILENAME,
    LOCK_FILENAME,
    WORK_DIR_ENV,
    WORK_DIR_NAME,
)
from work_core.exceptions import WorkspaceNotFoundError

__all__ = [
    "find_work_dir",
    "get_work_dir",
    "get_db_path",
    "get_jsonl_path",
    "get_lock_path",
    "init_workspace",
    "init_database",
    "get_db",
]

logger = logging.getLogger(__name__)

# SQL schema for items table
# blocked_by, labels, log and extra hold JSON text; NULL means absent
ITEMS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'open',
    priority INTEGER NOT NULL DEFAULT 2,
    type TEXT NOT NULL DEFAULT 'task',
    created TEXT NOT NULL,
    updated TEXT NOT NULL,
    description TEXT,
    blocked_by TEXT,
    labels TEXT,
    closed_reason TEXT,
    log TEXT,
    author TEXT,
    assignee TEXT,
    extra TEXT,

    CHECK (status IN ('open', 'in_progress', 'closed'))
);
"""

# SQL schema for metadata table
METADATA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

# SQL for creating indexes
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_items_status ON items(status);
CREATE INDEX IF NOT EXISTS idx_items_priority ON items(priority);
CREATE INDEX IF NOT EXISTS idx_items_assignee ON items(assignee);
"""

# Current schema version
SCHEMA_VERSION = 1


def find_work_dir(cwd: Optional[str] = None) -> Optional[Path]:
    """Find the .work directory by walking up from cwd.

    The WORK_DIR environment variable, when set, short-circuits the search.
    This is primarily used for test isolation and scripting.

    Args:
        cwd: Optional starting directory (defaults to os.getcwd())

    Returns:
        Path to the .work directory, or None if none exists
    """
    override = os.environ.get(WORK_DIR_ENV)
    if override:
        path = Path(override)
        return path if path.is_dir() else None

    if cwd is None:
        cwd = os.getcwd()

    current_path = Path(cwd).resolve()

    for parent in [current_path] + list(current_path.parents):
        work_dir = parent / WORK_DIR_NAME
        if work_dir.is_dir():
            return work_dir

    return None


def get_work_dir(cwd: Optional[str] = None) -> Path:
    """Like find_work_dir, but raise if no workspace exists.

    Raises:
        WorkspaceNotFoundError: If no .work directory is found
    """
    work_dir = find_work_dir(cwd)
    if work_dir is None:
        raise WorkspaceNotFoundError(
            f"No {WORK_DIR_NAME} directory found. Run 'work init' first."
        )
    return work_dir


def get_db_path(work_dir: Path) -> Path:
    """Get the relational store path (.work/work.db)."""
    return Path(work_dir) / DB_FILENAME


def get_jsonl_path(work_dir: Path) -> Path:
    """Get the interchange file path (.work/work.jsonl)."""
    return Path(work_dir) / JSONL_FILENAME


def get_lock_path(work_dir: Path) -> Path:
    """Get the file lock path (.work/.lock)."""
    return Path(work_dir) / LOCK_FILENAME


def init_workspace(base_dir: Optional[str] = None) -> Optional[Path]:
    """Create .work/ with an empty store and an empty interchange file.

    Args:
        base_dir: Directory to create .work in (defaults to WORK_DIR or cwd)

    Returns:
        Path to the new .work directory, or None if it already existed
    """
    override = os.environ.get(WORK_DIR_ENV)
    if base_dir is None and override:
        work_dir = Path(override)
    else:
        work_dir = Path(base_dir or os.getcwd()) / WORK_DIR_NAME

    if work_dir.exists():
        return None

    work_dir.mkdir(parents=True)

    conn = init_database(str(get_db_path(work_dir)))
    conn.close()

    get_jsonl_path(work_dir).write_text("", encoding="utf-8")

    logger.info("Initialized workspace at %s", work_dir)
    return work_dir


def get_db(work_dir: Path) -> sqlite3.Connection:
    """Get database connection for a workspace, initializing if needed."""
    return init_database(str(get_db_path(work_dir)))


def init_database(db_path: str) -> sqlite3.Connection:
    """Initialize work database with schema.

    Creates all tables, indexes, and metadata if they don't exist.
    Safe to call multiple times (idempotent).

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite database connection

    Schema:
        - items: Work items, one row per ID
        - metadata: System state (schema version)
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row

    conn.executescript(
        f"""
        -- Items: Work items keyed by zero-padded ID
        {ITEMS_TABLE_SQL}

        -- Metadata: System state
        {METADATA_TABLE_SQL}

        -- Indexes for performance
        {INDEXES_SQL}
        """
    )

    cursor = conn.execute("SELECT COUNT(*) FROM metadata WHERE key = 'schema_version'")
    if cursor.fetchone()[0] == 0:
        conn.execute(
            "INSERT INTO metadata (key, value) VALUES ('schema_version', ?)",
            (str(SCHEMA_VERSION),)
        )
        conn.commit()

    return conn
