from __future__ import annotations

import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from argus.api import (
    routes_auth,
    routes_cameras,
    routes_events,
    routes_health,
    routes_layouts,
    routes_recordings,
    routes_settings,
)
from argus.auth import AuthService
from argus.config.defaults import APP_RELEASE
from argus.config.migrate import SettingsStore
from argus.pipeline.recorder import RecordingService, Summarizer
from argus.storage.db import Database
from argus.storage.medium import SqliteMedium
from argus.storage.mirror import CameraMirror
from argus.storage.repo import ArgusRepo
from argus.storage.retention import RetentionService, RetentionSummary
from argus.storage.store import RecordStore
from argus.util.logging import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class ArgusState:
    settings_store: SettingsStore
    log_level: str
    db: Database
    store: RecordStore
    repo: ArgusRepo
    auth: AuthService
    retention_service: RetentionService
    recording_service: RecordingService
    data_dir: Path
    last_sweep: RetentionSummary | None = None
    _shutdown_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _shutdown_complete: bool = field(default=False, init=False, repr=False)

    @classmethod
    def create(
        cls,
        data_dir: str | None = None,
        bind: str | None = None,
        port: int | None = None,
        log_level: str = "info",
        summarizer: Summarizer | None = None,
        sweep: bool = True,
        persist_overrides: bool = True,
    ) -> "ArgusState":
        """Open the data directory and wire the services.

        With ``persist_overrides`` false the bind, port and log level only
        apply to this process and ``settings.json`` is left untouched.
        """
        settings_store = SettingsStore(cli_data_dir=data_dir)

        if persist_overrides:
            updates: dict[str, Any] = {"log_level": log_level}
            if bind:
                updates["bind"] = bind
            if port:
                updates["port"] = port
            settings_store.update(**updates)

        layout = settings_store.layout
        setup_logging(log_level, layout.log_file)

        db = Database(layout.database)
        store = RecordStore(SqliteMedium(db))
        mirror = CameraMirror(layout.mirror) if settings_store.settings.mirror_enabled else None
        repo = ArgusRepo(store, mirror=mirror)

        state = cls(
            settings_store=settings_store,
            log_level=log_level,
            db=db,
            store=store,
            repo=repo,
            auth=AuthService(repo),
            retention_service=RetentionService(repo),
            recording_service=RecordingService(repo, summarize=summarizer),
            data_dir=layout.root,
        )
        if sweep:
            state.last_sweep = state.retention_service.apply()
        return state

    def shutdown(self) -> None:
        with self._shutdown_lock:
            if self._shutdown_complete:
                return
            self._shutdown_complete = True
        logger.info("Argus shutting down")
        self.db.close()


def create_app(
    data_dir: str | None = None,
    bind: str | None = None,
    port: int | None = None,
    log_level: str = "info",
    summarizer: Summarizer | None = None,
) -> FastAPI:
    state = ArgusState.create(
        data_dir=data_dir,
        bind=bind,
        port=port,
        log_level=log_level,
        summarizer=summarizer,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            app.state.argus.shutdown()

    app = FastAPI(title="Argus Vision", version=APP_RELEASE, lifespan=lifespan)
    app.state.argus = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:9002", "http://127.0.0.1:9002", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes_health.router, prefix="/api")
    app.include_router(routes_auth.router, prefix="/api")
    app.include_router(routes_cameras.router, prefix="/api")
    app.include_router(routes_layouts.router, prefix="/api")
    app.include_router(routes_recordings.router, prefix="/api")
    app.include_router(routes_events.router, prefix="/api")
    app.include_router(routes_settings.router, prefix="/api")

    return app
