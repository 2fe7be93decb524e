"""Forward-only schema migrations, applied in order.

The applied version is kept in ``PRAGMA user_version``. A step also counts as
pending when its table or unique index is missing from the file, whatever the
version says; every step is idempotent, so re-running one is harmless.
"""
from __future__ import annotations

import logging
from sqlite3 import Connection
from types import ModuleType

from . import v001_prompt_stories, v002_self_written_stories

logger = logging.getLogger(__name__)

MIGRATIONS: list[ModuleType] = [
    v001_prompt_stories,
    v002_self_written_stories,
]


def current_version(conn: Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def _schema_objects(conn: Connection) -> set[tuple[str, str]]:
    rows = conn.execute("SELECT type, name FROM sqlite_master WHERE type IN ('table', 'index')").fetchall()
    return {(r[0], r[1]) for r in rows}


def pending_migrations(conn: Connection) -> list[ModuleType]:
    applied = current_version(conn)
    present = _schema_objects(conn)
    return [
        m for m in MIGRATIONS
        if m.VERSION > applied
        or ("table", m.TABLE) not in present
        or ("index", m.INDEX) not in present
    ]


def apply_migrations(conn: Connection) -> list[int]:
    """Run pending steps, one transaction each. Returns the versions applied.

    Errors propagate unchanged after rolling back the failing step.
    """
    done: list[int] = []
    for m in pending_migrations(conn):
        conn.execute("BEGIN IMMEDIATE")
        try:
            m.upgrade(conn)
            # never lower a version stamped by a newer step or another tool
            version = max(current_version(conn), int(m.VERSION))
            conn.execute(f"PRAGMA user_version = {version}")
            conn.execute("COMMIT")
        except Exception:
            # sqlite may already have rolled back on its own (e.g. disk full)
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.exception("migration %s (%s) failed", m.VERSION, m.NAME)
            raise
        logger.info("applied migration %s (%s)", m.VERSION, m.NAME)
        done.append(m.VERSION)
    return done
