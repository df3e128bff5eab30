"""Shared pytest fixtures for work tests."""

import pytest
from typer.testing import CliRunner


@pytest.fixture(autouse=True)
def isolate_work_dir(monkeypatch):
    """Keep a WORK_DIR from the developer's shell out of the tests."""
    monkeypatch.delenv("WORK_DIR", raising=False)


@pytest.fixture
def work_dir(tmp_path):
    """Create an initialized .work directory under a temporary project root.

    Returns the path to the .work directory.
    """
    from work_core import init_workspace

    return init_workspace(str(tmp_path))


@pytest.fixture
def jsonl_path(work_dir):
    """Path to the workspace's interchange file."""
    return work_dir / "work.jsonl"


@pytest.fixture
def db_connection(work_dir):
    """Open the workspace store.

    Automatically closes the connection after the test completes.
    """
    from work_core import get_db

    conn = get_db(work_dir)

    yield conn

    conn.close()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project root with .work initialized through the CLI, used as cwd.

    Returns a dict with:
        - path: project root
        - work_dir: path to .work
        - jsonl: path to work.jsonl
        - runner: CliRunner
        - run: helper invoking the app with a list of args
    """
    from work_core import app

    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output

    def run(*args):
        return runner.invoke(app, list(args))

    return {
        "path": tmp_path,
        "work_dir": tmp_path / ".work",
        "jsonl": tmp_path / ".work" / "work.jsonl",
        "runner": runner,
        "run": run,
    }
