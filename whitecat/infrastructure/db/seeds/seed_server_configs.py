from __future__ import annotations

from datetime import datetime, timezone
import logging
import sys

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from whitecat.infrastructure.db.engine import Base, get_engine
from whitecat.infrastructure.db.mappers.accounts_mapper import dump_features
from whitecat.infrastructure.db.models.accounts import ServerConfigModel


logger = logging.getLogger(__name__)

server_configs = ServerConfigModel.__table__

DEFAULT_SERVER_CONFIGS: tuple[dict, ...] = (
    {
        "name": "Kitten",
        "cpu_cores": 1,
        "ram_gb": 1,
        "storage_gb": 2,
        "storage_type": "NVMe SSD Gen 3",
        "bandwidth_gb": 50,
        "price_monthly": 50000,
        "max_websites": 1,
        "features": ["Free SSL", "Weekly backups"],
    },
    {
        "name": "Cat",
        "cpu_cores": 2,
        "ram_gb": 2,
        "storage_gb": 10,
        "storage_type": "NVMe SSD Gen 3",
        "bandwidth_gb": 200,
        "price_monthly": 100000,
        "max_websites": 5,
        "features": ["Free SSL", "Daily automatic backups", "Email hosting"],
    },
    {
        "name": "Lion",
        "cpu_cores": 4,
        "ram_gb": 4,
        "storage_gb": 50,
        "storage_type": "NVMe SSD Gen 3",
        "bandwidth_gb": 0,
        "price_monthly": 200000,
        "max_websites": 0,
        "features": [
            "Free SSL",
            "Daily automatic backups",
            "Email hosting",
            "Priority support",
            "Free CDN",
        ],
    },
)


def create_tables(engine: Engine) -> None:
    # Importing the models module registers every table on Base.metadata.
    Base.metadata.create_all(engine)


def seed_server_configs(engine: Engine) -> int:
    """Insert the default tiers that are missing by name; returns how many were added."""
    now = datetime.now(timezone.utc)
    inserted = 0
    with engine.begin() as conn:
        existing = set(conn.execute(select(server_configs.c.name)).scalars().all())
        for config in DEFAULT_SERVER_CONFIGS:
            if config["name"] in existing:
                continue
            conn.execute(
                insert(server_configs).values(
                    **{**config, "features": dump_features(config["features"])},
                    is_active=True,
                    created_at=now,
                    updated_at=now,
                )
            )
            inserted += 1
    if inserted:
        logger.info("seed_server_configs: inserted=%s", inserted)
    return inserted


def reset_server_configs(engine: Engine) -> int:
    """Delete every tier and re-seed the defaults.

    Fails on databases where purchased servers still reference a tier.
    """
    with engine.begin() as conn:
        deleted = conn.execute(delete(server_configs)).rowcount
    logger.info("reset_server_configs: deleted=%s", deleted)
    return seed_server_configs(engine)


def main(argv: list[str] | None = None) -> int:
    from whitecat.shared.config import get_settings
    from whitecat.shared.logging_setup import configure_logging

    args = sys.argv[1:] if argv is None else argv
    command = args[0] if args else "init"
    settings = get_settings()
    configure_logging(settings.log_level)
    engine = get_engine(settings.database_url)

    if command == "init":
        create_tables(engine)
        seed_server_configs(engine)
        return 0
    if command == "reset":
        create_tables(engine)
        reset_server_configs(engine)
        return 0
    logger.error("seed_server_configs: unknown_command command=%s (use init|reset)", command)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
