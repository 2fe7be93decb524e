from __future__ import annotations

from sqlite3 import Connection


def insert_or_ignore(
    conn: Connection,
    story: str,
    subject: str,
    verb: str,
    object: str,
    setting: str,
    consequences: str,
) -> int:
    """Returns the number of rows written (0 when the tuple already exists)."""
    cur = conn.execute(
        "INSERT OR IGNORE INTO stories(story, subject, verb, object, setting, consequences, created_at) "
        "VALUES(?,?,?,?,?,?, datetime('now'))",
        (story, subject, verb, object, setting, consequences),
    )
    return cur.rowcount


def list_all(conn: Connection):
    return conn.execute(
        "SELECT id, story, subject, verb, object, setting, consequences, created_at "
        "FROM stories ORDER BY created_at DESC"
    ).fetchall()


def delete(conn: Connection, story_id: int) -> int:
    cur = conn.execute("DELETE FROM stories WHERE id=?", (story_id,))
    return cur.rowcount
