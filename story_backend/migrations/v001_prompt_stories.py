"""
Migration 1: prompt-generated stories table + uniqueness over the prompt tuple.

Rows written before the unique index existed may repeat the same tuple; those
are purged first (earliest rowid survives) so the index can be created.
"""
from __future__ import annotations

from sqlite3 import Connection

VERSION = 1
NAME = "prompt_stories"
TABLE = "stories"
INDEX = "idx_unique_prompt_story"


def upgrade(conn: Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS stories (
            id            INTEGER PRIMARY KEY AUTOINCREMENT,
            story         TEXT    NOT NULL,
            subject       TEXT    NOT NULL,
            verb          TEXT    NOT NULL,
            object        TEXT    NOT NULL,
            setting       TEXT    NOT NULL,
            consequences  TEXT    NOT NULL,
            created_at    TEXT    NOT NULL
        )
        """
    )
    conn.execute(
        """
        DELETE FROM stories
        WHERE rowid NOT IN (
            SELECT MIN(rowid) FROM stories
            GROUP BY story, subject, verb, object, setting, consequences
        )
        """
    )
    conn.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_unique_prompt_story "
        "ON stories (story, subject, verb, object, setting, consequences)"
    )
