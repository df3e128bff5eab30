"""CLI module for Work - typer app and all commands."""

import json
import logging
import sqlite3
import sys
from contextlib import contextmanager
from typing import Generator, List, Optional

import typer
from typing_extensions import Annotated

from work_core.constants import DEFAULT_PRIORITY, EDITABLE_FIELDS, VALID_STATUSES
from work_core.db import get_db, get_jsonl_path, get_lock_path, get_work_dir, init_workspace
from work_core.dependencies import (
    add_block as _add_block,
    get_blocked,
    get_ready,
    remove_block as _remove_block,
)
from work_core.exceptions import UsageError, ValidationError, WorkError
from work_core.items import (
    claim_item as _claim_item,
    close_item as _close_item,
    create_item as _create_item,
    edit_item as _edit_item,
    reopen_item as _reopen_item,
    require_item,
    start_item as _start_item,
    unclaim_item as _unclaim_item,
)
from work_core.labels import add_label as _add_label, get_all_labels, remove_label as _remove_label
from work_core.log import add_log_entry
from work_core.migrate import migrate_beads as _migrate_beads
from work_core.models import WorkItem, parse_priority
from work_core.store import list_items
from work_core.sync import export_to_jsonl, import_from_jsonl
from work_core.utils import file_lock, normalize_id

__all__ = ["app", "main", "format_item"]

# Create Typer app
app = typer.Typer(help="Work - Minimal project-local work tracker for AI agent workflows")

STATUS_MARKERS = {
    "open": "○",
    "in_progress": "▶",
    "closed": "✓",
}


@app.callback()
def callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
):
    """Work - Minimal project-local work tracker for AI agent workflows."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def format_item(item: WorkItem) -> str:
    """One-line summary of a work item, e.g. "○ 001 [P2] Fix login"."""
    marker = STATUS_MARKERS.get(item.status, "?")
    return f"{marker} {item.id} [P{item.priority}] {item.title}"


def _print_item_details(item: WorkItem) -> None:
    print(f"ID:       {item.id}")
    print(f"Title:    {item.title}")
    print(f"Status:   {item.status}")
    print(f"Priority: P{item.priority}")
    print(f"Type:     {item.type}")
    print(f"Created:  {item.created}")
    print(f"Updated:  {item.updated}")
    if item.author:
        print(f"Author:   {item.author}")
    if item.assignee:
        print(f"Assignee: {item.assignee}")

    if item.description:
        print(f"\n{item.description}\n")

    if item.blocked_by:
        print(f"Blocked by: {', '.join(item.blocked_by)}")
    if item.labels:
        print(f"Labels: {', '.join(item.labels)}")
    if item.closed_reason:
        print(f"Closed: {item.closed_reason}")

    if item.log:
        print("\nLog:")
        for entry in item.log:
            # Drop microseconds for display
            timestamp = entry.time[:19].replace("T", " ")
            agent = f" [{entry.agent}]" if entry.agent else ""
            print(f"  {timestamp}{agent} {entry.text}")


def _to_json(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _require(value, usage: str) -> None:
    """Raise UsageError if a required argument was not given."""
    if not value:
        raise UsageError(f"Usage: {usage}")


@contextmanager
def _handle_errors() -> Generator[None, None, None]:
    """Report WorkError (and I/O failures) on stderr and exit with code 1."""
    try:
        yield
    except UsageError as e:
        print(str(e), file=sys.stderr)
        raise typer.Exit(code=1)
    except (WorkError, OSError, sqlite3.Error) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=1)


@contextmanager
def _open_workspace(export: bool = False) -> Generator[sqlite3.Connection, None, None]:
    """Open the store of the enclosing .work directory for one command.

    Holds the workspace lock for the whole command. With export=True the
    JSONL file is rewritten from the store once the command body succeeds.
    """
    work_dir = get_work_dir()

    with file_lock(get_lock_path(work_dir)):
        db = get_db(work_dir)
        try:
            yield db
            if export:
                export_to_jsonl(db, str(get_jsonl_path(work_dir)))
        finally:
            db.close()


def _print_items(items: List[WorkItem], as_json: bool, empty_message: str) -> None:
    if as_json:
        print(_to_json([item.to_dict() for item in items]))
        return

    if not items:
        print(empty_message)
        return

    for item in items:
        print(format_item(item))


@app.command()
def init():
    """Initialize .work in current directory."""
    with _handle_errors():
        work_dir = init_workspace()

    if work_dir is None:
        print(".work directory already exists")
        return

    print(f"Initialized .work directory: {work_dir}")


@app.command()
def add(
    title: Annotated[Optional[List[str]], typer.Argument(help="Work item title")] = None,
    item_type: Annotated[str, typer.Option("--type", help="task, bug, feature or message")] = "task",
    priority: Annotated[Optional[str], typer.Option(help="Priority level (0-4)")] = None,
    author: Annotated[Optional[str], typer.Option("--from", help="Author of the work item")] = None,
    assignee: Annotated[Optional[str], typer.Option("--to", help="Assignee of the work item")] = None,
    description: Annotated[Optional[str], typer.Option("--description", "-d", help="Detailed description")] = None,
):
    """Create a new work item."""
    with _handle_errors():
        _require(title, "work add <title> [--type=task|bug|feature|message] [--priority=0-4]")

        parsed_priority = DEFAULT_PRIORITY if priority is None else parse_priority(priority)

        with _open_workspace(export=True) as db:
            item = _create_item(
                db,
                " ".join(title),
                item_type=item_type,
                priority=parsed_priority,
                author=author,
                assignee=assignee,
                description=description,
            )

    print(f"Created {item.id}: {item.title}")


@app.command(name="list")
def list_cmd(
    status: Annotated[Optional[str], typer.Option(help="Filter by status (use 'any' for all statuses)")] = None,
    item_type: Annotated[Optional[str], typer.Option("--type", help="Filter by type")] = None,
    author: Annotated[Optional[str], typer.Option("--from", help="Filter by author")] = None,
    assignee: Annotated[Optional[str], typer.Option("--to", help="Filter by assignee")] = None,
    label: Annotated[Optional[str], typer.Option(help="Filter by label")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
):
    """List work items (default: non-closed)."""
    with _handle_errors():
        if status is not None and status != "any" and status not in VALID_STATUSES:
            raise ValidationError(
                f"Invalid status: {status}. Must be one of {', '.join(VALID_STATUSES)} or 'any'"
            )

        with _open_workspace() as db:
            items = list_items(
                db,
                status=status,
                item_type=item_type,
                author=author,
                assignee=assignee,
                label=label,
            )

    _print_items(items, as_json, "No work items found")


@app.command()
def show(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
):
    """Show work item details."""
    with _handle_errors():
        _require(item_id, "work show <id> [--json]")

        with _open_workspace() as db:
            item = require_item(db, item_id)

    if as_json:
        print(_to_json(item.to_dict()))
        return

    _print_item_details(item)


@app.command()
def start(item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None):
    """Mark work item as in_progress."""
    with _handle_errors():
        _require(item_id, "work start <id>")

        with _open_workspace(export=True) as db:
            item = _start_item(db, item_id)

    print(f"Started {item.id}: {item.title}")


@app.command()
def close(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None,
    reason: Annotated[Optional[List[str]], typer.Argument(help="Why it was closed")] = None,
):
    """Close a work item."""
    with _handle_errors():
        _require(item_id, "work close <id> [reason]")

        with _open_workspace(export=True) as db:
            item = _close_item(db, item_id, reason=" ".join(reason) if reason else None)

    print(f"Closed {item.id}: {item.title}")


@app.command()
def reopen(item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None):
    """Reopen a closed work item."""
    with _handle_errors():
        _require(item_id, "work reopen <id>")

        with _open_workspace(export=True) as db:
            item = _reopen_item(db, item_id)

    print(f"Reopened {item.id}: {item.title}")


@app.command()
def edit(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None,
    field: Annotated[Optional[str], typer.Argument(help="Field to edit")] = None,
    value: Annotated[Optional[List[str]], typer.Argument(help="New value")] = None,
):
    """Edit a work item field."""
    with _handle_errors():
        _require(item_id, "work edit <id> <field> <value>")
        _require(field, f"work edit <id> <field> <value>\nFields: {', '.join(EDITABLE_FIELDS)}")
        _require(value, f"work edit <id> <field> <value>\nFields: {', '.join(EDITABLE_FIELDS)}")

        with _open_workspace(export=True) as db:
            item = _edit_item(db, item_id, field, " ".join(value))

    print(f"Updated {item.id}")


@app.command()
def log(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None,
    message: Annotated[Optional[List[str]], typer.Argument(help="Log message")] = None,
    agent: Annotated[Optional[str], typer.Option(help="Who is logging")] = None,
):
    """Append a log entry to a work item."""
    with _handle_errors():
        _require(item_id, "work log <id> <message> [--agent=name]")
        _require(message, "work log <id> <message> [--agent=name]")

        with _open_workspace(export=True) as db:
            add_log_entry(db, item_id, " ".join(message), agent=agent)

    print(f"Logged to {normalize_id(item_id)}")


@app.command()
def block(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item to block")] = None,
    blocker_id: Annotated[Optional[str], typer.Argument(help="Work item that must close first")] = None,
):
    """Mark a work item as blocked by another."""
    with _handle_errors():
        _require(item_id, "work block <id> <blocker-id>")
        _require(blocker_id, "work block <id> <blocker-id>")

        with _open_workspace(export=True) as db:
            added = _add_block(db, item_id, blocker_id)

    item_id, blocker_id = normalize_id(item_id), normalize_id(blocker_id)
    if added:
        print(f"{item_id} is now blocked by {blocker_id}")
    else:
        print(f"{item_id} is already blocked by {blocker_id}")


@app.command()
def unblock(
    item_id: Annotated[Optional[str], typer.Argument(help="Blocked work item")] = None,
    blocker_id: Annotated[Optional[str], typer.Argument(help="Blocker to remove")] = None,
):
    """Remove a blocking relationship."""
    with _handle_errors():
        _require(item_id, "work unblock <id> <blocker-id>")
        _require(blocker_id, "work unblock <id> <blocker-id>")

        with _open_workspace(export=True) as db:
            removed = _remove_block(db, item_id, blocker_id)

    item_id, blocker_id = normalize_id(item_id), normalize_id(blocker_id)
    if removed:
        print(f"{item_id} is no longer blocked by {blocker_id}")
    else:
        print(f"{item_id} is not blocked by {blocker_id}")


@app.command()
def ready(as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False):
    """Show ready work (not blocked)."""
    with _handle_errors():
        with _open_workspace() as db:
            items = get_ready(db)

    _print_items(items, as_json, "No ready work items")


@app.command()
def blocked(as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False):
    """Show blocked work and what it waits on."""
    with _handle_errors():
        with _open_workspace() as db:
            entries = get_blocked(db)

    if as_json:
        print(_to_json([dict(item.to_dict(), open_blockers=pending) for item, pending in entries]))
        return

    if not entries:
        print("No blocked work items")
        return

    for item, pending in entries:
        print(format_item(item))
        print(f"   └─ blocked by: {', '.join(pending)}")


@app.command()
def label(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None,
    name: Annotated[Optional[str], typer.Argument(help="Label to add")] = None,
):
    """Add a label to a work item."""
    with _handle_errors():
        _require(item_id, "work label <id> <label>")
        _require(name, "work label <id> <label>")

        with _open_workspace(export=True) as db:
            added = _add_label(db, item_id, name)

    item_id = normalize_id(item_id)
    if added:
        print(f"Added label '{name}' to {item_id}")
    else:
        print(f"{item_id} already has label '{name}'")


@app.command()
def unlabel(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None,
    name: Annotated[Optional[str], typer.Argument(help="Label to remove")] = None,
):
    """Remove a label from a work item."""
    with _handle_errors():
        _require(item_id, "work unlabel <id> <label>")
        _require(name, "work unlabel <id> <label>")

        with _open_workspace(export=True) as db:
            removed = _remove_label(db, item_id, name)

    item_id = normalize_id(item_id)
    if removed:
        print(f"Removed label '{name}' from {item_id}")
    else:
        print(f"{item_id} doesn't have label '{name}'")


@app.command()
def labels():
    """List all labels in use."""
    with _handle_errors():
        with _open_workspace() as db:
            names = get_all_labels(db)

    if not names:
        print("No labels in use")
        return

    for name in names:
        print(name)


@app.command()
def claim(
    item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None,
    assignee: Annotated[Optional[str], typer.Argument(help="Who is taking it")] = None,
):
    """Assign a work item."""
    with _handle_errors():
        _require(item_id, "work claim <id> <assignee>")
        _require(assignee, "work claim <id> <assignee>")

        with _open_workspace(export=True) as db:
            item = _claim_item(db, item_id, assignee)

    print(f"Claimed {item.id} for {assignee}")


@app.command()
def unclaim(item_id: Annotated[Optional[str], typer.Argument(help="Work item ID")] = None):
    """Clear the assignee of a work item."""
    with _handle_errors():
        _require(item_id, "work unclaim <id>")

        with _open_workspace(export=True) as db:
            item = _unclaim_item(db, item_id)

    print(f"Unclaimed {item.id}")


@app.command()
def mine(
    assignee: Annotated[Optional[str], typer.Argument(help="Assignee to list work for")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
):
    """List non-closed work assigned to someone."""
    with _handle_errors():
        _require(assignee, "work mine <assignee>")

        with _open_workspace() as db:
            items = list_items(db, assignee=assignee)

    _print_items(items, as_json, f"No work items assigned to {assignee}")


@app.command(name="import")
def import_cmd():
    """Replace the store with the contents of work.jsonl."""
    with _handle_errors():
        work_dir = get_work_dir()
        with _open_workspace() as db:
            count = import_from_jsonl(db, str(get_jsonl_path(work_dir)))

    if count == 0:
        print("No items to import")
        return

    print(f"Imported {count} work items")


@app.command(name="export")
def export_cmd():
    """Rewrite work.jsonl from the store."""
    with _handle_errors():
        work_dir = get_work_dir()
        jsonl_path = get_jsonl_path(work_dir)
        with _open_workspace() as db:
            count = export_to_jsonl(db, str(jsonl_path))

    print(f"Exported {count} work items to {jsonl_path}")


@app.command(name="migrate-beads")
def migrate_beads_cmd(
    export_path: Annotated[Optional[str], typer.Argument(help="Path to a beads JSON or JSONL export")] = None,
):
    """Import issues from a beads export."""
    with _handle_errors():
        _require(export_path, "work migrate-beads <export-path>")

        with _open_workspace(export=True) as db:
            items = _migrate_beads(db, export_path)

    print(f"Migrated {len(items)} issues")
    print("\nSummary:")
    for status in VALID_STATUSES:
        count = sum(1 for item in items if item.status == status)
        print(f"  {status + ':':<13}{count}")
    print(f"  {'total:':<13}{len(items)}")


def main():
    """Main CLI entry point."""
    app()
