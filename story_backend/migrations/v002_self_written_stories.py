"""
Migration 2: self-written stories table, unique over (story, name).
"""
from __future__ import annotations

from sqlite3 import Connection

VERSION = 2
NAME = "self_written_stories"
TABLE = "self_written_stories"
INDEX = "idx_unique_self_written_story"


def upgrade(conn: Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS self_written_stories (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            story       TEXT    NOT NULL,
            name        TEXT    NOT NULL,
            created_at  TEXT    NOT NULL
        )
        """
    )
    # purge legacy duplicates, keep the earliest rowid
    conn.execute(
        """
        DELETE FROM self_written_stories
        WHERE rowid NOT IN (
            SELECT MIN(rowid) FROM self_written_stories GROUP BY story, name
        )
        """
    )
    conn.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_unique_self_written_story "
        "ON self_written_stories (story, name)"
    )
