from __future__ import annotations

# story_backend/db.py
import os
import sqlite3
import sys

from .errors import StartupError

# DB 路径解析顺序：
# 1) 环境变量 STORY_DB_PATH / config.yaml 的 db_path（由 get_config 合并）
# 2) 应用数据目录：STORY_DATA_DIR，否则按平台取用户数据目录 + APP_IDENTIFIER
APP_IDENTIFIER = "storyteller"
DB_FILENAME = "stories.db"


def app_data_dir() -> str:
    env_dir = os.environ.get("STORY_DATA_DIR")
    if env_dir:
        return env_dir
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA")
        if not base:
            raise StartupError("Cannot resolve app data dir: APPDATA is not set")
    elif sys.platform == "darwin":
        base = os.path.join(os.path.expanduser("~"), "Library", "Application Support")
    else:
        base = os.environ.get("XDG_DATA_HOME") or os.path.join(os.path.expanduser("~"), ".local", "share")
    if base.startswith("~"):
        raise StartupError("Cannot resolve app data dir: home directory is unknown")
    return os.path.join(base, APP_IDENTIFIER)


def get_db_path(configured: str | None = None) -> str:
    """Resolve the database file and make sure its directory exists."""
    path = configured or os.path.join(app_data_dir(), DB_FILENAME)
    dirn = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(dirn, exist_ok=True)
    except OSError as e:
        raise StartupError(f"Cannot create data dir {dirn}: {e}") from e
    return path


def open_conn(path: str) -> sqlite3.Connection:
    """
    打开 SQLite 连接。check_same_thread=False：连接由 StoryStore 加锁后跨线程共享。
    isolation_level=None：事务由调用方显式 BEGIN/COMMIT。
    """
    try:
        conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
    except sqlite3.Error as e:
        raise StartupError(f"Cannot open database {path}: {e}") from e
    conn.row_factory = sqlite3.Row
    return conn
