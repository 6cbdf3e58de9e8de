from __future__ import annotations

import pytest
from sqlalchemy.pool import StaticPool

from whitecat.infrastructure.db.engine import build_engine
from whitecat.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from whitecat.infrastructure.db.seeds.seed_server_configs import create_tables, seed_server_configs
from whitecat.shared.config import Settings


def make_settings(**overrides) -> Settings:
    values = dict(
        environment="test",
        port=3000,
        database_url="sqlite://",
        db_auto_init=False,
        discord_client_id="client-id",
        discord_client_secret="client-secret",
        discord_redirect_uri="http://localhost:3000/auth/discord/callback",
        discord_api_base="https://discord.test/api",
        discord_timeout_seconds=5.0,
        session_cookie_name="whitecat_session",
        session_max_age_seconds=7 * 24 * 60 * 60,
        session_cleanup_interval_seconds=3600.0,
        pre_auth_max_age_seconds=3600,
        cors_origins=["*"],
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def engine():
    engine = build_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    seed_server_configs(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine) -> SqlAccountsRepository:
    return SqlAccountsRepository(engine)


@pytest.fixture
def settings_factory():
    return make_settings
