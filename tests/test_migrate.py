"""Tests for importing beads exports."""

import json

import pytest


BEADS = [
    {
        "id": "bd-2",
        "title": "Later bug",
        "status": "closed",
        "priority": 1,
        "issue_type": "bug",
        "created_at": "2024-02-01T00:00:00Z",
        "updated_at": "2024-02-03T00:00:00Z",
        "close_reason": "Fixed",
    },
    {
        "id": "bd-1",
        "title": "Early epic",
        "status": "blocked",
        "priority": 7,
        "issue_type": "epic",
        "created_at": "2024-01-01T00:00:00Z",
        "description": "Big one",
        "assignee": "worker",
    },
]


def test_convert_beads_issue_maps_fields():
    from work_core import convert_beads_issue

    item = convert_beads_issue(BEADS[0], "005")

    assert item.id == "005"
    assert item.title == "Later bug"
    assert item.status == "closed"
    assert item.priority == 1
    assert item.type == "bug"
    assert item.created == "2024-02-01T00:00:00Z"
    assert item.updated == "2024-02-03T00:00:00Z"
    assert item.closed_reason == "Fixed"
    assert item.extra == {"beads_id": "bd-2"}


def test_convert_beads_issue_normalizes_unknown_values():
    """Unknown status/type fall back to open/task; priority is clamped."""
    from work_core import convert_beads_issue

    item = convert_beads_issue(BEADS[1], "001")

    assert item.status == "open"
    assert item.type == "task"
    assert item.priority == 4
    assert item.updated == item.created
    assert item.description == "Big one"
    assert item.assignee == "worker"


def test_migrate_beads_from_json_array(db_connection, tmp_path):
    """Issues are numbered in created_at order."""
    from work_core import all_items, migrate_beads

    export = tmp_path / "beads.json"
    export.write_text(json.dumps(BEADS))

    items = migrate_beads(db_connection, str(export))

    assert [(i.id, i.title) for i in items] == [("001", "Early epic"), ("002", "Later bug")]
    assert all_items(db_connection) == items


def test_migrate_beads_from_jsonl(db_connection, tmp_path):
    from work_core import migrate_beads

    export = tmp_path / "issues.jsonl"
    export.write_text("\n".join(json.dumps(b) for b in BEADS) + "\n")

    items = migrate_beads(db_connection, str(export))

    assert len(items) == 2


def test_migrate_beads_numbers_after_existing_items(db_connection, tmp_path):
    from work_core import create_item, migrate_beads

    create_item(db_connection, "Existing")
    export = tmp_path / "beads.json"
    export.write_text(json.dumps(BEADS))

    items = migrate_beads(db_connection, str(export))

    assert [i.id for i in items] == ["002", "003"]


def test_migrate_beads_empty_export(db_connection, tmp_path):
    from work_core import migrate_beads

    export = tmp_path / "beads.json"
    export.write_text("")

    assert migrate_beads(db_connection, str(export)) == []


def test_migrate_beads_invalid_export(db_connection, tmp_path):
    from work_core import ValidationError, migrate_beads

    export = tmp_path / "beads.json"
    export.write_text("{not json")

    with pytest.raises(ValidationError, match="Invalid beads export"):
        migrate_beads(db_connection, str(export))


def test_beads_id_survives_jsonl_round_trip(db_connection, jsonl_path, tmp_path):
    """The original ID is carried as an extra key in the interchange file."""
    from work_core import export_to_jsonl, get_item, import_from_jsonl, migrate_beads

    export = tmp_path / "beads.json"
    export.write_text(json.dumps(BEADS))
    migrate_beads(db_connection, str(export))

    export_to_jsonl(db_connection, str(jsonl_path))
    assert '"beads_id":"bd-1"' in jsonl_path.read_text()

    import_from_jsonl(db_connection, str(jsonl_path))

    assert get_item(db_connection, "001").extra == {"beads_id": "bd-1"}


def test_convert_beads_issue_coerces_scalar_fields():
    """Numbers where text is expected are kept as their text."""
    from work_core import convert_beads_issue

    bead = {"id": 17, "title": 42, "status": "open", "issue_type": 3, "assignee": 7}

    item = convert_beads_issue(bead, "001")

    assert item.title == "42"
    assert item.type == "task"
    assert item.assignee == "7"
    assert item.extra == {"beads_id": "17"}


def test_convert_beads_issue_rejects_structured_title():
    from work_core import ValidationError, convert_beads_issue

    with pytest.raises(ValidationError):
        convert_beads_issue({"id": "bd-1", "title": {"text": "nested"}}, "001")


def test_migrate_beads_bad_issue_writes_nothing(db_connection, tmp_path):
    """One unconvertible issue aborts the whole migration."""
    from work_core import ValidationError, all_items, create_item, migrate_beads

    create_item(db_connection, "Existing")
    export = tmp_path / "beads.json"
    export.write_text(
        json.dumps(
            [
                {"id": "bd-1", "title": "Fine", "created_at": "2024-01-01T00:00:00Z"},
                {"id": "bd-2", "title": ["not", "text"], "created_at": "2024-01-02T00:00:00Z"},
            ]
        )
    )

    with pytest.raises(ValidationError, match="bd-2"):
        migrate_beads(db_connection, str(export))

    assert [i.title for i in all_items(db_connection)] == ["Existing"]


def test_migrate_beads_mixed_created_at_types(db_connection, tmp_path):
    from work_core import migrate_beads

    export = tmp_path / "beads.json"
    export.write_text(
        json.dumps(
            [
                {"id": "bd-1", "title": "Text date", "created_at": "2024-01-01"},
                {"id": "bd-2", "title": "Numeric date", "created_at": 1700000000},
            ]
        )
    )

    items = migrate_beads(db_connection, str(export))

    assert [i.title for i in items] == ["Numeric date", "Text date"]
