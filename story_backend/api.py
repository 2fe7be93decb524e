"""
FastAPI app entry point for the story backend.
Run with `uvicorn story_backend.api:create_app --factory`, or `story-backend serve`.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .logs import setup_logging
from .routes import base as base_routes
from .routes import stories as stories_routes
from .services.config_svc import get_config
from .services.story_svc import StoryStore

logger = logging.getLogger(__name__)


def create_app(store: StoryStore | None = None, config: dict | None = None) -> FastAPI:
    """
    Build the app. With ``store`` given (tests, embedding) it is used as is;
    otherwise one is opened on startup from the resolved config and closed
    on shutdown. A failing startup aborts the server.
    """
    cfg = config if config is not None else get_config()
    setup_logging(cfg.get("log_level") or "INFO")

    owns_store = store is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_store:
            app.state.store = StoryStore.open(cfg.get("db_path"), lock_timeout=cfg.get("lock_timeout"))
        try:
            yield
        finally:
            if owns_store and app.state.store is not None:
                app.state.store.close()
                app.state.store = None
                logger.info("story db closed")

    app = FastAPI(title="story-backend", version=__version__, lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.get("cors_origins") or [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(base_routes.router)
    app.include_router(stories_routes.router)
    return app
