from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from whitecat.api.errors import register_exception_handlers
from whitecat.api.routers.auth import router as auth_router
from whitecat.api.routers.configs import router as configs_router
from whitecat.api.routers.contact import router as contact_router
from whitecat.api.routers.health import router as health_router
from whitecat.api.routers.user import router as user_router
from whitecat.infrastructure.db.engine import ensure_database_directory, get_engine
from whitecat.infrastructure.db.seeds.seed_server_configs import create_tables, seed_server_configs
from whitecat.infrastructure.sessions.memory_session_store import InMemorySessionStore, SessionSweeper
from whitecat.shared.config import Settings, get_settings
from whitecat.shared.logging_setup import configure_logging


logger = logging.getLogger(__name__)


def _init_database(settings: Settings) -> None:
    engine = get_engine(settings.database_url)
    ensure_database_directory(engine)
    create_tables(engine)
    inserted = seed_server_configs(engine)
    logger.info("startup: database_ready seeded=%s", inserted)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.db_auto_init:
            _init_database(settings)

        store = InMemorySessionStore(max_age_seconds=settings.session_max_age_seconds)
        sweeper = SessionSweeper(store, interval_seconds=settings.session_cleanup_interval_seconds)
        app.state.session_store = store
        sweeper.start()
        logger.info("startup: ready environment=%s", settings.environment)
        try:
            yield
        finally:
            sweeper.stop()
            store.clear()
            logger.info("shutdown: sessions_cleared")

    app = FastAPI(title="WhiteCat Hosting API", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, expose_details=not settings.is_production)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(configs_router)
    app.include_router(user_router)
    app.include_router(contact_router)
    return app


app = create_app()
