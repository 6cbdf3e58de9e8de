from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _list(name: str, default: str) -> list[str]:
    value = _env(name, default) or ""
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    environment: str
    port: int
    database_url: str
    db_auto_init: bool
    discord_client_id: str
    discord_client_secret: str
    discord_redirect_uri: str
    discord_api_base: str
    discord_timeout_seconds: float
    session_cookie_name: str
    session_max_age_seconds: int
    session_cleanup_interval_seconds: float
    pre_auth_max_age_seconds: int
    cors_origins: list[str]
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def get_settings() -> Settings:
    port = int(_env("PORT", "3000"))
    return Settings(
        environment=_env("ENVIRONMENT", "development"),
        port=port,
        database_url=_env("DATABASE_URL", "sqlite:///./data/whitecat.db"),
        db_auto_init=_bool("DB_AUTO_INIT", True),
        discord_client_id=_env("DISCORD_CLIENT_ID", ""),
        discord_client_secret=_env("DISCORD_CLIENT_SECRET", ""),
        discord_redirect_uri=_env(
            "DISCORD_REDIRECT_URI",
            f"http://localhost:{port}/auth/discord/callback",
        ),
        discord_api_base=_env("DISCORD_API_BASE", "https://discord.com/api"),
        discord_timeout_seconds=float(_env("DISCORD_TIMEOUT_SECONDS", "10")),
        session_cookie_name=_env("SESSION_COOKIE_NAME", "whitecat_session"),
        session_max_age_seconds=int(_env("SESSION_MAX_AGE_SECONDS", str(7 * 24 * 60 * 60))),
        session_cleanup_interval_seconds=float(_env("SESSION_CLEANUP_INTERVAL_SECONDS", "3600")),
        pre_auth_max_age_seconds=int(_env("PRE_AUTH_MAX_AGE_SECONDS", "3600")),
        cors_origins=_list("CORS_ORIGINS", "*"),
        log_level=_env("LOG_LEVEL", "INFO"),
    )
