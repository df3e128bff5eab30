"""Work - Minimal project-local work tracker for AI agent workflows.

This package provides the core functionality for the work tracker.
Import from here for the public API.
"""

from work_core.exceptions import (
    WorkError,
    NotFoundError,
    DuplicateIdError,
    ValidationError,
    UnknownFieldError,
    CorruptRecordError,
    UsageError,
    WorkspaceNotFoundError,
    LockError,
)
from work_core.constants import (
    VALID_STATUSES,
    VALID_TYPES,
    EDITABLE_FIELDS,
    PRIORITY_RANGE,
    ID_WIDTH,
    LOCK_TIMEOUT,
)
from work_core.utils import (
    get_iso_timestamp,
    normalize_id,
    file_lock,
)
from work_core.models import (
    LogEntry,
    WorkItem,
    new_item,
    parse_priority,
)
from work_core.codec import encode, decode
from work_core.db import (
    find_work_dir,
    get_work_dir,
    get_db_path,
    get_jsonl_path,
    get_lock_path,
    init_workspace,
    init_database,
    get_db,
)
from work_core.store import (
    get_item,
    insert_item,
    insert_items,
    update_item,
    list_items,
    all_items,
    replace_all,
    max_numeric_id,
)
from work_core.ids import next_id, format_id
from work_core.sync import export_to_jsonl, import_from_jsonl, read_jsonl
from work_core.dependencies import (
    is_ready,
    get_ready,
    get_blocked,
    add_block,
    remove_block,
)
from work_core.items import (
    create_item,
    require_item,
    start_item,
    close_item,
    reopen_item,
    edit_item,
    claim_item,
    unclaim_item,
)
from work_core.labels import add_label, remove_label, get_all_labels
from work_core.log import add_log_entry, get_log
from work_core.migrate import convert_beads_issue, migrate_beads
from work_core.cli import app, main

__all__ = [
    # Exceptions
    "WorkError",
    "NotFoundError",
    "DuplicateIdError",
    "ValidationError",
    "UnknownFieldError",
    "CorruptRecordError",
    "UsageError",
    "WorkspaceNotFoundError",
    "LockError",
    # Constants
    "VALID_STATUSES",
    "VALID_TYPES",
    "EDITABLE_FIELDS",
    "PRIORITY_RANGE",
    "ID_WIDTH",
    "LOCK_TIMEOUT",
    # Utils
    "get_iso_timestamp",
    "normalize_id",
    "file_lock",
    # Model
    "LogEntry",
    "WorkItem",
    "new_item",
    "parse_priority",
    # Codec
    "encode",
    "decode",
    # Database
    "find_work_dir",
    "get_work_dir",
    "get_db_path",
    "get_jsonl_path",
    "get_lock_path",
    "init_workspace",
    "init_database",
    "get_db",
    # Store
    "get_item",
    "insert_item",
    "update_item",
    "list_items",
    "all_items",
    "replace_all",
    "max_numeric_id",
    # IDs
    "next_id",
    "format_id",
    # Sync
    "export_to_jsonl",
    "import_from_jsonl",
    "read_jsonl",
    # Dependencies
    "is_ready",
    "get_ready",
    "get_blocked",
    "add_block",
    "remove_block",
    # Items
    "create_item",
    "require_item",
    "start_item",
    "close_item",
    "reopen_item",
    "edit_item",
    "claim_item",
    "unclaim_item",
    # Labels
    "add_label",
    "remove_label",
    "get_all_labels",
    # Log
    "add_log_entry",
    "get_log",
    # Migration
    "convert_beads_issue",
    "migrate_beads",
    # CLI
    "app",
    "main",
]
