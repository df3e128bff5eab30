"""Custom exceptions for Work."""

__all__ = [
    "WorkError",
    "NotFoundError",
    "DuplicateIdError",
    "ValidationError",
    "UnknownFieldError",
    "CorruptRecordError",
    "UsageError",
    "WorkspaceNotFoundError",
    "LockError",
]


class WorkError(Exception):
    """Base class for every failure reported by the work tracker."""

    pass


class NotFoundError(WorkError):
    """Raised when a work item ID is not in the store."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Work item {item_id} not found")


class DuplicateIdError(WorkError):
    """Raised when inserting an ID that is already present."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Work item {item_id} already exists")


class ValidationError(WorkError):
    """Raised when a field value is empty, out of range, or not allowed."""

    pass


class UnknownFieldError(ValidationError):
    """Raised when `edit` targets a field that cannot be edited."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Unknown field: {field}")


class CorruptRecordError(WorkError):
    """Raised when a line of the interchange file is not a valid record."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Corrupt record on line {line_number}: {reason}")


class UsageError(WorkError):
    """Raised when a command is missing required arguments."""

    pass


class WorkspaceNotFoundError(WorkError):
    """Raised when no .work directory can be found."""

    pass


class LockError(WorkError):
    """Raised when unable to acquire file lock."""

    pass
