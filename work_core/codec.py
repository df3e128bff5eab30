"""Interchange codec for Work - JSON Lines encoding of work items.

Each line is one complete, independently parseable record. There is no header
or footer, so a file can be diffed, merged and reviewed line by line.
"""

import json
from typing import Iterable, List

from work_core.exceptions import CorruptRecordError, ValidationError
from work_core.models import WorkItem

__all__ = [
    "encode_item",
    "encode",
    "decode",
]


def encode_item(item: WorkItem) -> str:
    """Serialize a single work item as one compact JSON line (no newline)."""
    return json.dumps(item.to_dict(), ensure_ascii=False, separators=(",", ":"))


def encode(items: Iterable[WorkItem]) -> str:
    """Serialize work items, one per newline-terminated line.

    An empty collection encodes to the empty string rather than a blank line.
    """
    return "".join(encode_item(item) + "\n" for item in items)


def decode(text: str) -> List[WorkItem]:
    """Parse interchange text back into work items, preserving order.

    Args:
        text: Contents of an interchange file

    Returns:
        List of WorkItem, in file order

    Raises:
        CorruptRecordError: If any line is not a single valid record. The
            error carries the 1-based line number.
    """
    if not text:
        return []

    # Only "\n" ends a record; str.splitlines() would also break on U+2028,
    # U+2029 and U+0085, which encode_item writes unescaped inside strings
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]

    # The final "\n" leaves one empty tail, and one extra blank line is tolerated
    if lines and not lines[-1]:
        lines.pop()
    if lines and not lines[-1].strip():
        lines.pop()

    items = []
    for line_number, line in enumerate(lines, 1):
        if not line.strip():
            raise CorruptRecordError(line_number, "blank line")

        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise CorruptRecordError(line_number, f"invalid JSON ({e.msg})") from e

        try:
            items.append(WorkItem.from_dict(data))
        except ValidationError as e:
            raise CorruptRecordError(line_number, str(e)) from e

    return items
