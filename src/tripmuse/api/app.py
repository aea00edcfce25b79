# src/tripmuse/api/app.py
"""
FastAPI application wiring.

`create_app` is the composition root: it builds the settings-driven
`PreferenceManager` (with optional on-disk profile persistence) and stores it on
`app.state`. Business logic lives in `tripmuse.learning` and `tripmuse.recommender`.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from tripmuse.config.settings import Settings, get_settings
from tripmuse.core.env import resolve_project_path
from tripmuse.core.logging import configure_logging
from tripmuse.learning.manager import PreferenceManager
from tripmuse.learning.persistence import JsonProfileRepository
from tripmuse.learning.store import ProfileStore

from .routes import router

logger = logging.getLogger(__name__)


def build_manager(settings: Settings) -> PreferenceManager:
    repository = None
    if settings.persistence.enabled:
        repository = JsonProfileRepository(resolve_project_path(settings.persistence.dir))
        logger.info("Profile persistence enabled at %s", repository.base_dir)
    return PreferenceManager(settings=settings, store=ProfileStore(repository))


def create_app(*, settings: Settings | None = None, manager: PreferenceManager | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="TripMuse API", version="0.1.0")
    app.state.manager = manager or build_manager(settings)

    # Dev-friendly CORS for local frontends, e.g.
    # TRIPMUSE_CORS_ORIGINS="http://localhost:5173,http://127.0.0.1:5173"
    cors_origins = [s.strip() for s in os.getenv("TRIPMUSE_CORS_ORIGINS", "").split(",") if s.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)
    return app


configure_logging()

app = create_app()
