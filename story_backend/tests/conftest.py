import logging
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    # Never let a developer's real config or data dir leak into tests
    for k in ("STORY_DB_PATH", "STORY_LOG_LEVEL", "STORY_LOCK_TIMEOUT"):
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("STORY_CONFIG", str(tmp_path / "no-such-config.yaml"))
    monkeypatch.setenv("STORY_DATA_DIR", str(tmp_path / "appdata"))
    yield
    pkg_logger = logging.getLogger("story_backend")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def tmp_db_path(tmp_path):
    return str(tmp_path / "db" / "stories.db")


@pytest.fixture()
def store(tmp_db_path):
    from story_backend.services.story_svc import StoryStore

    s = StoryStore.open(tmp_db_path)
    yield s
    s.close()


@pytest.fixture()
def client(store):
    from fastapi.testclient import TestClient
    from story_backend.api import create_app

    app = create_app(store, config={"log_level": "WARNING", "cors_origins": []})
    return TestClient(app)


@pytest.fixture()
def raw_conn(tmp_db_path, store):
    # Second connection to the same file, for backdating rows and inspecting schema
    conn = sqlite3.connect(tmp_db_path)
    conn.row_factory = sqlite3.Row
    yield conn
    conn.close()


@pytest.fixture()
def backdate(raw_conn):
    """Rewrite created_at of one row so ordering tests do not depend on the clock."""

    def _backdate(table: str, story_id: int, created_at: str):
        raw_conn.execute(f"UPDATE {table} SET created_at=? WHERE id=?", (created_at, story_id))
        raw_conn.commit()

    return _backdate
