from __future__ import annotations

from sqlite3 import Connection


def insert_or_ignore(conn: Connection, story: str, name: str) -> int:
    cur = conn.execute(
        "INSERT OR IGNORE INTO self_written_stories(story, name, created_at) "
        "VALUES(?, ?, datetime('now'))",
        (story, name),
    )
    return cur.rowcount


def list_all(conn: Connection):
    return conn.execute(
        "SELECT id, story, name, created_at FROM self_written_stories "
        "ORDER BY created_at DESC"
    ).fetchall()


def delete(conn: Connection, story_id: int) -> int:
    cur = conn.execute("DELETE FROM self_written_stories WHERE id=?", (story_id,))
    return cur.rowcount
