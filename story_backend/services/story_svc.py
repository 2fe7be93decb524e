from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager, suppress
from typing import Any, Iterator

from ..db import get_db_path, open_conn
from ..errors import StartupError, StoreBusyError, StoreError
from ..migrations import apply_migrations
from ..repository import prompt_story_repo, self_written_story_repo

logger = logging.getLogger(__name__)


class StoryStore:
    """
    Owns the one SQLite connection the app uses and serialises every
    operation on it behind a single lock, across both story kinds.

    Build it once at startup (``StoryStore.open``) and hand it to whoever
    needs it; there is no module-level instance.
    """

    def __init__(self, conn: sqlite3.Connection, lock_timeout: float | None = None):
        self._conn = conn
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout

    @classmethod
    def open(cls, db_path: str | None = None, lock_timeout: float | None = None) -> "StoryStore":
        """Resolve the path, open the file and bring the schema up to date.

        Any failure here is fatal and raised as ``StartupError``.
        """
        path = get_db_path(db_path)
        conn = open_conn(path)
        try:
            applied = apply_migrations(conn)
        except sqlite3.Error as e:
            conn.close()
            raise StartupError(f"Schema bootstrap failed for {path}: {e}") from e
        logger.info("story db ready at %s (migrations applied: %s)", path, applied or "none")
        return cls(conn, lock_timeout=lock_timeout)

    def close(self) -> None:
        with self._locked():
            self._conn.close()

    def __enter__(self) -> "StoryStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @contextmanager
    def _locked(self) -> Iterator[sqlite3.Connection]:
        if self._lock_timeout is None:
            acquired = self._lock.acquire()
        else:
            acquired = self._lock.acquire(timeout=self._lock_timeout)
        if not acquired:
            raise StoreBusyError(f"story store is busy (waited {self._lock_timeout}s for the lock)")
        try:
            yield self._conn
        finally:
            self._lock.release()

    @contextmanager
    def _op(self, what: str) -> Iterator[sqlite3.Connection]:
        """Lock, run, and turn sqlite failures into ``StoreError``."""
        with self._locked() as conn:
            try:
                yield conn
            except sqlite3.Error as e:
                with suppress(sqlite3.ProgrammingError):
                    if conn.in_transaction:
                        conn.rollback()
                logger.exception("%s failed", what)
                raise StoreError(str(e)) from e

    # ---- prompt stories -------------------------------------------------

    def save_prompt_story(self, story: str, subject: str, verb: str, object: str, setting: str, consequences: str) -> None:
        with self._op("save_prompt_story") as conn:
            prompt_story_repo.insert_or_ignore(conn, story, subject, verb, object, setting, consequences)
        logger.info("story saved (or duplicate ignored)")

    def list_prompt_stories(self) -> list[dict[str, Any]]:
        with self._op("list_prompt_stories") as conn:
            rows = [dict(r) for r in prompt_story_repo.list_all(conn)]
        logger.info("returned %d stories", len(rows))
        return rows

    def delete_prompt_story(self, story_id: int) -> None:
        with self._op("delete_prompt_story") as conn:
            prompt_story_repo.delete(conn, story_id)
        logger.info("deleted story %s", story_id)

    # ---- self-written stories -------------------------------------------

    def save_self_written_story(self, story: str, name: str) -> None:
        with self._op("save_self_written_story") as conn:
            self_written_story_repo.insert_or_ignore(conn, story, name)
        logger.info("self-written story saved (or duplicate ignored)")

    def list_self_written_stories(self) -> list[dict[str, Any]]:
        with self._op("list_self_written_stories") as conn:
            rows = [dict(r) for r in self_written_story_repo.list_all(conn)]
        logger.info("returned %d self-written stories", len(rows))
        return rows

    def delete_self_written_story(self, story_id: int) -> None:
        with self._op("delete_self_written_story") as conn:
            self_written_story_repo.delete(conn, story_id)
        logger.info("deleted self-written story %s", story_id)

    # ---- both kinds ------------------------------------------------------

    def list_all_stories(self) -> list[dict[str, Any]]:
        """Both kinds in one feed, tagged with ``kind``, newest first."""
        with self._op("list_all_stories") as conn:
            items = [{**dict(r), "kind": "prompt"} for r in prompt_story_repo.list_all(conn)]
            items += [{**dict(r), "kind": "self"} for r in self_written_story_repo.list_all(conn)]
        items.sort(key=lambda it: it["created_at"], reverse=True)
        logger.info("returned %d stories (all kinds)", len(items))
        return items
