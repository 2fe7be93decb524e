# story_backend/services/config_svc.py
from __future__ import annotations

import os
from typing import Any

import yaml

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

DEFAULTS: dict[str, Any] = {
    "db_path": None,
    "log_level": "INFO",
    "lock_timeout": None,
    "cors_origins": [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "tauri://localhost",
    ],
}


def config_file_path() -> str:
    return os.environ.get("STORY_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")


def _read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or config_file_path()
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(cfg, dict):
        return {}
    out: dict[str, Any] = {}
    for k in ("db_path", "log_level"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    v = cfg.get("lock_timeout")
    if isinstance(v, (int, float)) and not isinstance(v, bool) and v > 0:
        out["lock_timeout"] = float(v)
    v = cfg.get("cors_origins")
    if isinstance(v, list):
        out["cors_origins"] = [str(o) for o in v if str(o).strip()]
    return out


def get_config(path: str | None = None) -> dict:
    """Merged settings: defaults < config.yaml < environment."""
    cfg = {**DEFAULTS, **_read_config_yaml(path)}

    env_db = os.environ.get("STORY_DB_PATH")
    if env_db:
        cfg["db_path"] = env_db
    env_level = os.environ.get("STORY_LOG_LEVEL")
    if env_level:
        cfg["log_level"] = env_level
    env_timeout = os.environ.get("STORY_LOCK_TIMEOUT")
    if env_timeout:
        try:
            t = float(env_timeout)
        except ValueError:
            t = None
        cfg["lock_timeout"] = t if t and t > 0 else None
    cfg["cors_origins"] = list(cfg["cors_origins"] or [])
    return cfg
