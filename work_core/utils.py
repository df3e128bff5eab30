"""Shared utilities for Work - timestamps, ID normalization, file locking."""

import fcntl
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Generator

from work_core.constants import ID_WIDTH, LOCK_TIMEOUT
from work_core.exceptions import LockError

__all__ = [
    "get_iso_timestamp",
    "normalize_id",
    "file_lock",
]


def get_iso_timestamp() -> str:
    """Get current UTC timestamp in ISO format with Z suffix.

    Returns:
        ISO 8601 formatted timestamp string (e.g., "2024-01-15T10:30:00.123456Z")
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_id(item_id: str) -> str:
    """Left-pad an ID with zeros so "1" and "001" refer to the same item.

    Examples:
        >>> normalize_id("1")
        '001'
        >>> normalize_id("0042")
        '0042'
        >>> normalize_id("1234")
        '1234'
    """
    return str(item_id).strip().zfill(ID_WIDTH)


def _try_flock(fd: int) -> bool:
    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


@contextmanager
def file_lock(lock_path: Path, timeout: float = LOCK_TIMEOUT) -> Generator[IO[str], None, None]:
    """Hold the workspace lock (.work/.lock) for the duration of a command.

    Every CLI command runs inside this lock, so two `work` invocations in the
    same checkout cannot interleave a store write with a JSONL export. The
    lock file is created on first use and left in place afterwards.

    Args:
        lock_path: Path to the workspace lock file
        timeout: Seconds to keep retrying before giving up

    Raises:
        LockError: If another command still holds the lock after timeout

    Usage:
        with file_lock(get_lock_path(work_dir)):
            db = get_db(work_dir)
            create_item(db, "Fix login")
            export_to_jsonl(db, str(get_jsonl_path(work_dir)))
    """
    lock_path = Path(lock_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    deadline = time.monotonic() + timeout

    with open(lock_path, "a") as lock_file:
        while not _try_flock(lock_file.fileno()):
            if time.monotonic() >= deadline:
                raise LockError(f"Could not acquire lock on {lock_path} within {timeout}s")
            time.sleep(0.01)

        # Released when the file is closed
        yield lock_file
