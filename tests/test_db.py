"""Tests for workspace discovery and database initialization."""

import sqlite3

import pytest


def test_init_workspace_creates_files(tmp_path):
    """Should create .work with an empty store and an empty JSONL file."""
    from work_core import init_workspace

    work_dir = init_workspace(str(tmp_path))

    assert work_dir == tmp_path / ".work"
    assert (work_dir / "work.db").exists()
    assert (work_dir / "work.jsonl").read_text() == ""


def test_init_workspace_twice_returns_none(tmp_path):
    from work_core import init_workspace

    init_workspace(str(tmp_path))

    assert init_workspace(str(tmp_path)) is None


def test_init_workspace_keeps_existing_data(db_connection, work_dir):
    """Re-initializing must not wipe anything."""
    from work_core import create_item, get_db, init_workspace

    create_item(db_connection, "Keep me")

    assert init_workspace(str(work_dir.parent)) is None

    conn = get_db(work_dir)
    try:
        count = conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]
    finally:
        conn.close()
    assert count == 1


def test_init_database_is_idempotent(tmp_path):
    from work_core import init_database

    db_path = str(tmp_path / "work.db")
    init_database(db_path).close()
    conn = init_database(db_path)

    rows = conn.execute("SELECT value FROM metadata WHERE key = 'schema_version'").fetchall()
    conn.close()

    assert [row["value"] for row in rows] == ["1"]


def test_database_rejects_invalid_status(db_connection):
    """The status column is constrained at the SQL level too."""
    with pytest.raises(sqlite3.IntegrityError):
        db_connection.execute(
            "INSERT INTO items (id, title, status, created, updated) VALUES (?, ?, ?, ?, ?)",
            ("001", "Bad", "done", "t", "t"),
        )


def test_find_work_dir_walks_up(work_dir):
    from work_core import find_work_dir

    nested = work_dir.parent / "src" / "deep"
    nested.mkdir(parents=True)

    assert find_work_dir(str(nested)) == work_dir.resolve()


def test_find_work_dir_returns_none_outside_workspace(tmp_path):
    from work_core import find_work_dir

    assert find_work_dir(str(tmp_path)) is None


def test_get_work_dir_raises_outside_workspace(tmp_path):
    from work_core import WorkspaceNotFoundError, get_work_dir

    with pytest.raises(WorkspaceNotFoundError, match="work init"):
        get_work_dir(str(tmp_path))


def test_work_dir_env_override(tmp_path, monkeypatch):
    """WORK_DIR points straight at a .work directory, ignoring cwd."""
    from work_core import find_work_dir, init_workspace

    target = tmp_path / "elsewhere" / ".work"
    monkeypatch.setenv("WORK_DIR", str(target))

    assert find_work_dir(str(tmp_path)) is None

    assert init_workspace() == target
    assert find_work_dir(str(tmp_path)) == target


def test_workspace_paths(work_dir):
    from work_core import get_db_path, get_jsonl_path, get_lock_path

    assert get_db_path(work_dir) == work_dir / "work.db"
    assert get_jsonl_path(work_dir) == work_dir / "work.jsonl"
    assert get_lock_path(work_dir) == work_dir / ".lock"
