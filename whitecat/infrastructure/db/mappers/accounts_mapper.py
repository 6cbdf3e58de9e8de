from __future__ import annotations

from datetime import datetime, timezone
import json
from typing import Any, Mapping

from whitecat.domain.entities.server_config import ServerConfig
from whitecat.domain.entities.transaction import Transaction
from whitecat.domain.entities.user import User
from whitecat.domain.entities.user_server import UserServer


def as_utc(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        # SQLite hands back naive values; everything is stored as UTC.
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_features(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    if isinstance(value, str):
        if not value.strip():
            return []
        parsed = json.loads(value)
        if isinstance(parsed, list):
            return [str(item) for item in parsed]
    return []


def dump_features(features: list[str]) -> str:
    return json.dumps(list(features), ensure_ascii=False)


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=str(row["id"]),
        username=row["username"],
        email=row.get("email"),
        avatar=row.get("avatar"),
        balance=int(row["balance"] or 0),
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
    )


def map_row_to_server_config(row: Mapping[str, Any]) -> ServerConfig:
    return ServerConfig(
        id=int(row["id"]),
        name=row["name"],
        cpu_cores=int(row["cpu_cores"]),
        ram_gb=float(row["ram_gb"]),
        storage_gb=int(row["storage_gb"]),
        storage_type=row["storage_type"],
        bandwidth_gb=int(row["bandwidth_gb"]),
        price_monthly=int(row["price_monthly"]),
        max_websites=int(row["max_websites"]),
        features=parse_features(row.get("features")),
        is_active=bool(row["is_active"]),
        created_at=as_utc(row.get("created_at")),
        updated_at=as_utc(row.get("updated_at")),
    )


def map_row_to_user_server(row: Mapping[str, Any]) -> UserServer:
    return UserServer(
        id=int(row["id"]),
        user_id=str(row["user_id"]),
        config_id=int(row["config_id"]),
        server_name=row["server_name"],
        status=row["status"],
        ip_address=row.get("ip_address"),
        expires_at=as_utc(row["expires_at"]),
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
        config_name=row.get("config_name"),
        cpu_cores=int(row["cpu_cores"]) if row.get("cpu_cores") is not None else None,
        ram_gb=float(row["ram_gb"]) if row.get("ram_gb") is not None else None,
        storage_gb=int(row["storage_gb"]) if row.get("storage_gb") is not None else None,
    )


def map_row_to_transaction(row: Mapping[str, Any]) -> Transaction:
    reference_id = row.get("reference_id")
    return Transaction(
        id=int(row["id"]),
        user_id=str(row["user_id"]),
        type=row["type"],
        amount=int(row["amount"]),
        description=row.get("description") or "",
        reference_id=str(reference_id) if reference_id is not None else None,
        created_at=as_utc(row["created_at"]),
    )
