"""Record model for Work - the WorkItem entity and its field rules."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from work_core.constants import (
    DEFAULT_PRIORITY,
    DEFAULT_TYPE,
    PRIORITY_RANGE,
    VALID_STATUSES,
    VALID_TYPES,
)
from work_core.exceptions import ValidationError
from work_core.utils import get_iso_timestamp, normalize_id

__all__ = [
    "LogEntry",
    "WorkItem",
    "new_item",
    "parse_priority",
    "validate_priority",
    "validate_type",
]

# Keys every interchange record must carry
REQUIRED_KEYS = ("id", "title", "status", "priority", "type", "created", "updated")

# Serialization order of optional keys
OPTIONAL_KEYS = (
    "description",
    "blocked_by",
    "labels",
    "closed_reason",
    "log",
    "author",
    "assignee",
)


def _parse_id(value: str, field_name: str) -> str:
    """Normalize a decimal ID from a record, so "7" is stored as "007"."""
    stripped = value.strip()
    if not (stripped.isascii() and stripped.isdigit()):
        raise ValidationError(f"Field '{field_name}' must be a decimal ID, got {value!r}")
    return normalize_id(stripped)


@dataclass
class LogEntry:
    """A single append-only note on a work item."""

    time: str
    text: str
    agent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"time": self.time}
        if self.agent:
            data["agent"] = self.agent
        data["text"] = self.text
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "LogEntry":
        if not isinstance(data, dict):
            raise ValidationError("Log entry must be an object")
        if not isinstance(data.get("time"), str) or not isinstance(data.get("text"), str):
            raise ValidationError("Log entry requires string 'time' and 'text'")
        agent = data.get("agent")
        if agent is not None and not isinstance(agent, str):
            raise ValidationError("Log entry 'agent' must be a string")
        return cls(time=data["time"], text=data["text"], agent=agent or None)


@dataclass
class WorkItem:
    """A tracked unit of work.

    List-valued fields (blocked_by, labels, log) are kept as lists; an empty
    list is equivalent to the field being absent and is never serialized.
    Keys found in an interchange record that this model does not know about
    are kept in ``extra`` so they survive an import/export cycle.
    """

    id: str
    title: str
    status: str = "open"
    priority: int = DEFAULT_PRIORITY
    type: str = DEFAULT_TYPE
    created: str = ""
    updated: str = ""
    description: Optional[str] = None
    blocked_by: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    closed_reason: Optional[str] = None
    log: List[LogEntry] = field(default_factory=list)
    author: Optional[str] = None
    assignee: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"

    def validate(self) -> None:
        """Check every field rule, raising ValidationError on the first failure."""
        if not isinstance(self.title, str) or not self.title.strip():
            raise ValidationError("Title must not be empty")

        if self.status not in VALID_STATUSES:
            raise ValidationError(
                f"Invalid status: {self.status}. Must be one of {', '.join(VALID_STATUSES)}"
            )

        validate_type(self.type)
        validate_priority(self.priority)

        if self.id in self.blocked_by:
            raise ValidationError(f"Work item {self.id} cannot block itself")

        if len(set(self.blocked_by)) != len(self.blocked_by):
            raise ValidationError(f"Duplicate blocker on work item {self.id}")

        if len(set(self.labels)) != len(self.labels):
            raise ValidationError(f"Duplicate label on work item {self.id}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the interchange record shape, omitting absent fields."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority,
            "type": self.type,
            "created": self.created,
            "updated": self.updated,
        }

        if self.description is not None:
            data["description"] = self.description
        if self.blocked_by:
            data["blocked_by"] = list(self.blocked_by)
        if self.labels:
            data["labels"] = list(self.labels)
        if self.closed_reason is not None:
            data["closed_reason"] = self.closed_reason
        if self.log:
            data["log"] = [entry.to_dict() for entry in self.log]
        if self.author is not None:
            data["author"] = self.author
        if self.assignee is not None:
            data["assignee"] = self.assignee

        for key, value in self.extra.items():
            data.setdefault(key, value)

        return data

    @classmethod
    def from_dict(cls, data: Any) -> "WorkItem":
        """Build a WorkItem from an interchange record.

        Raises:
            ValidationError: If a required key is missing or a value is invalid
        """
        if not isinstance(data, dict):
            raise ValidationError("Record must be a JSON object")

        missing = [key for key in REQUIRED_KEYS if key not in data]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

        for key in ("id", "title", "status", "type", "created", "updated"):
            if not isinstance(data[key], str):
                raise ValidationError(f"Field '{key}' must be a string")

        for key in ("description", "closed_reason", "author", "assignee"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValidationError(f"Field '{key}' must be a string")

        for key in ("blocked_by", "labels"):
            value = data.get(key)
            if value is not None and (
                not isinstance(value, list) or not all(isinstance(v, str) for v in value)
            ):
                raise ValidationError(f"Field '{key}' must be a list of strings")

        raw_log = data.get("log") or []
        if not isinstance(raw_log, list):
            raise ValidationError("Field 'log' must be a list")

        known = set(REQUIRED_KEYS) | set(OPTIONAL_KEYS)

        item = cls(
            id=_parse_id(data["id"], "id"),
            title=data["title"],
            status=data["status"],
            priority=data["priority"],
            type=data["type"],
            created=data["created"],
            updated=data["updated"],
            description=data.get("description"),
            blocked_by=[_parse_id(b, "blocked_by") for b in data.get("blocked_by") or []],
            labels=list(data.get("labels") or []),
            closed_reason=data.get("closed_reason"),
            log=[LogEntry.from_dict(entry) for entry in raw_log],
            author=data.get("author"),
            assignee=data.get("assignee"),
            extra={key: value for key, value in data.items() if key not in known},
        )
        item.validate()
        return item


def validate_priority(priority: Any) -> int:
    """Ensure priority is an integer within PRIORITY_RANGE."""
    min_priority, max_priority = PRIORITY_RANGE
    # bool is an int subclass; True is not a priority
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ValidationError(f"Priority must be an integer, got {priority!r}")
    if not (min_priority <= priority <= max_priority):
        raise ValidationError(
            f"Priority must be between {min_priority} and {max_priority}, got {priority}"
        )
    return priority


def validate_type(item_type: str) -> str:
    if item_type not in VALID_TYPES:
        raise ValidationError(
            f"Invalid type: {item_type}. Must be one of {', '.join(VALID_TYPES)}"
        )
    return item_type


def parse_priority(value: Any) -> int:
    """Parse a priority typed on the command line ("1", " 3 ") into an int.

    Raises:
        ValidationError: If the value is not a whole number in range
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return validate_priority(value)
    try:
        priority = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"Priority must be an integer, got {value!r}")
    return validate_priority(priority)


def new_item(
    item_id: str,
    title: str,
    item_type: str = DEFAULT_TYPE,
    priority: int = DEFAULT_PRIORITY,
    author: Optional[str] = None,
    assignee: Optional[str] = None,
    description: Optional[str] = None,
) -> WorkItem:
    """Create a fresh open WorkItem with both timestamps set to now.

    Raises:
        ValidationError: If title is empty, or type/priority is invalid
    """
    now = get_iso_timestamp()
    item = WorkItem(
        id=item_id,
        title=title.strip() if title else "",
        status="open",
        priority=priority,
        type=item_type,
        created=now,
        updated=now,
        description=description,
        author=author or None,
        assignee=assignee or None,
    )
    item.validate()
    return item
