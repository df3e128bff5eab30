"""Constants for Work - magic strings, numbers, and configuration."""

__all__ = [
    "VALID_STATUSES",
    "VALID_TYPES",
    "EDITABLE_FIELDS",
    "PRIORITY_RANGE",
    "DEFAULT_PRIORITY",
    "DEFAULT_TYPE",
    "ID_WIDTH",
    "WORK_DIR_NAME",
    "DB_FILENAME",
    "JSONL_FILENAME",
    "LOCK_FILENAME",
    "WORK_DIR_ENV",
    "LOCK_TIMEOUT",
]

# Work item statuses
VALID_STATUSES = ("open", "in_progress", "closed")

# Work item types ("message" is used by agents to hand notes to each other)
VALID_TYPES = ("task", "bug", "feature", "message")

# Fields accepted by `work edit`
EDITABLE_FIELDS = ("title", "priority", "type", "description", "author", "assignee")

# Priority range (inclusive)
PRIORITY_RANGE = (0, 4)
DEFAULT_PRIORITY = 2
DEFAULT_TYPE = "task"

# IDs are zero-padded decimal strings, e.g. "001"
ID_WIDTH = 3

# On-disk layout
WORK_DIR_NAME = ".work"
DB_FILENAME = "work.db"
JSONL_FILENAME = "work.jsonl"
LOCK_FILENAME = ".lock"

# Overrides .work discovery when set
WORK_DIR_ENV = "WORK_DIR"

# File locking
LOCK_TIMEOUT = 5.0
