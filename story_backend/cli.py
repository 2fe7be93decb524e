#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Story backend (SQLite) command line

Commands:
  init                Resolve the data dir, create the DB and run migrations
  migrate             Apply pending migrations (--dry-run lists them only)
  list                Print stories as JSON (--kind prompt|self|all)
  add-prompt          Save a prompt-generated story (duplicates are ignored)
  add-self            Save a self-written story (duplicates are ignored)
  delete              Delete one story by id (missing ids are a no-op)
  serve               Run the HTTP API with uvicorn

The DB location follows STORY_DB_PATH / config.yaml db_path / app data dir.
"""
from __future__ import annotations

import argparse
import json
import sqlite3
import sys

from .db import get_db_path, open_conn
from .errors import StoryBackendError
from .logs import setup_logging
from .migrations import apply_migrations, current_version, pending_migrations
from .services.config_svc import get_config
from .services.story_svc import StoryStore


def _open_store(args) -> StoryStore:
    return StoryStore.open(args.db or args.cfg.get("db_path"), lock_timeout=args.cfg.get("lock_timeout"))


def cmd_init(args):
    with _open_store(args):
        pass
    print(f"DB ready: {get_db_path(args.db or args.cfg.get('db_path'))}")


def cmd_migrate(args):
    path = get_db_path(args.db or args.cfg.get("db_path"))
    conn = open_conn(path)
    try:
        if args.dry_run:
            pending = pending_migrations(conn)
            print(f"current version: {current_version(conn)}")
            for m in pending:
                print(f"pending: {m.VERSION} {m.NAME}")
            if not pending:
                print("nothing to apply")
            return
        applied = apply_migrations(conn)
        print(f"applied: {applied}" if applied else "nothing to apply")
    finally:
        conn.close()


def cmd_list(args):
    with _open_store(args) as store:
        if args.kind == "prompt":
            items = store.list_prompt_stories()
        elif args.kind == "self":
            items = store.list_self_written_stories()
        else:
            items = store.list_all_stories()
    print(json.dumps(items, ensure_ascii=False, indent=2))


def cmd_add_prompt(args):
    with _open_store(args) as store:
        store.save_prompt_story(args.story, args.subject, args.verb, args.object, args.setting, args.consequences)
    print("ok")


def cmd_add_self(args):
    with _open_store(args) as store:
        store.save_self_written_story(args.story, args.name)
    print("ok")


def cmd_delete(args):
    with _open_store(args) as store:
        if args.kind == "prompt":
            store.delete_prompt_story(args.id)
        else:
            store.delete_self_written_story(args.id)
    print("ok")


def cmd_serve(args):
    import uvicorn

    from .api import create_app

    cfg = {**args.cfg, "db_path": args.db or args.cfg.get("db_path")}
    uvicorn.run(create_app(config=cfg), host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="story-backend", description="Story backend (SQLite)")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    parser.add_argument("--db", default=None, help="database file (overrides config)")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create db and run migrations")
    p_init.set_defaults(func=cmd_init)

    p_mig = sub.add_parser("migrate", help="apply pending migrations")
    p_mig.add_argument("--dry-run", action="store_true")
    p_mig.set_defaults(func=cmd_migrate)

    p_list = sub.add_parser("list", help="print stories, newest first")
    p_list.add_argument("--kind", choices=["prompt", "self", "all"], default="all")
    p_list.set_defaults(func=cmd_list)

    p_ap = sub.add_parser("add-prompt", help="save a prompt-generated story")
    for f in ("story", "subject", "verb", "object", "setting", "consequences"):
        p_ap.add_argument(f"--{f}", required=True)
    p_ap.set_defaults(func=cmd_add_prompt)

    p_as = sub.add_parser("add-self", help="save a self-written story")
    p_as.add_argument("--story", required=True)
    p_as.add_argument("--name", required=True)
    p_as.set_defaults(func=cmd_add_self)

    p_del = sub.add_parser("delete", help="delete a story by id")
    p_del.add_argument("--kind", choices=["prompt", "self"], required=True)
    p_del.add_argument("--id", type=int, required=True)
    p_del.set_defaults(func=cmd_delete)

    p_srv = sub.add_parser("serve", help="run the HTTP API")
    p_srv.add_argument("--host", default="127.0.0.1")
    p_srv.add_argument("--port", type=int, default=8000)
    p_srv.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    args.cfg = get_config(args.config)
    setup_logging(args.cfg.get("log_level") or "INFO")
    try:
        args.func(args)
    except (StoryBackendError, sqlite3.Error) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
