from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, TypeVar

from sqlalchemy import delete, func, insert, not_, select, update
from sqlalchemy.engine import Connection, Engine

from whitecat.application.ports.accounts_port import AccountsPort
from whitecat.domain.entities.server_config import ServerConfig
from whitecat.domain.entities.transaction import TRANSACTION_TYPES, Transaction
from whitecat.domain.entities.user import User
from whitecat.domain.entities.user_server import SERVER_STATUSES, UserServer
from whitecat.domain.services.calendar import add_months
from whitecat.infrastructure.db.mappers.accounts_mapper import (
    as_utc,
    dump_features,
    map_row_to_server_config,
    map_row_to_transaction,
    map_row_to_user,
    map_row_to_user_server,
)
from whitecat.infrastructure.db.models.accounts import (
    ServerConfigModel,
    TransactionModel,
    UserModel,
    UserServerModel,
)


TResult = TypeVar("TResult")

users = UserModel.__table__
server_configs = ServerConfigModel.__table__
user_servers = UserServerModel.__table__
transactions = TransactionModel.__table__

SERVER_CONFIG_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "cpu_cores",
        "ram_gb",
        "storage_gb",
        "storage_type",
        "bandwidth_gb",
        "price_monthly",
        "max_websites",
        "features",
        "is_active",
    }
)


class SqlAccountsRepository(AccountsPort):
    """Users, server tiers, purchased servers and the ledger on one engine.

    When built with ``connection`` every statement runs on that connection and
    nothing is committed here; ``execute_in_transaction`` uses this to run a
    sequence of calls atomically.
    """

    def __init__(self, engine: Engine, *, connection: Connection | None = None):
        self._engine = engine
        self._conn = connection

    def execute_in_transaction(self, fn: Callable[[AccountsPort], TResult]) -> TResult:
        if self._conn is not None:
            return fn(self)
        with self._engine.begin() as conn:
            return fn(SqlAccountsRepository(self._engine, connection=conn))

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        if self._conn is not None:
            yield self._conn
            return
        with self._engine.connect() as conn:
            yield conn

    @contextmanager
    def _begin(self) -> Iterator[Connection]:
        if self._conn is not None:
            yield self._conn
            return
        with self._engine.begin() as conn:
            yield conn

    @contextmanager
    def _savepoint(self) -> Iterator[Connection]:
        """Like ``_begin`` but a failure inside a bound transaction only rolls back to here."""
        if self._conn is None:
            with self._engine.begin() as conn:
                yield conn
            return
        with self._conn.begin_nested():
            yield self._conn

    # users

    def get_user_by_id(self, *, user_id: str) -> User | None:
        stmt = select(users).where(users.c.id == user_id).limit(1)
        with self._connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def list_users(self) -> list[User]:
        stmt = select(users).order_by(users.c.created_at.desc())
        with self._connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [map_row_to_user(row) for row in rows]

    def upsert_user(
        self,
        *,
        user_id: str,
        username: str,
        email: str | None,
        avatar: str | None,
        now: datetime,
    ) -> User:
        with self._begin() as conn:
            result = conn.execute(
                update(users)
                .where(users.c.id == user_id)
                .values(username=username, email=email, avatar=avatar, updated_at=now)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(users).values(
                        id=user_id,
                        username=username,
                        email=email,
                        avatar=avatar,
                        balance=0,
                        created_at=now,
                        updated_at=now,
                    )
                )
            row = conn.execute(select(users).where(users.c.id == user_id)).mappings().one()
        return map_row_to_user(row)

    def get_balance(self, *, user_id: str) -> int:
        stmt = select(users.c.balance).where(users.c.id == user_id)
        with self._connect() as conn:
            balance = conn.execute(stmt).scalar_one_or_none()
        return int(balance) if balance is not None else 0

    def update_balance(self, *, user_id: str, delta: int, now: datetime) -> int | None:
        stmt = (
            update(users)
            .where(users.c.id == user_id)
            .values(balance=users.c.balance + delta, updated_at=now)
        )
        if delta < 0:
            # Debits never take the stored balance below zero.
            stmt = stmt.where(users.c.balance + delta >= 0)
        with self._begin() as conn:
            result = conn.execute(stmt)
            if result.rowcount == 0:
                return None
            balance = conn.execute(select(users.c.balance).where(users.c.id == user_id)).scalar_one()
        return int(balance)

    def delete_user(self, *, user_id: str) -> bool:
        with self._begin() as conn:
            result = conn.execute(delete(users).where(users.c.id == user_id))
        return result.rowcount > 0

    # server configs

    def get_server_config(self, *, config_id: int) -> ServerConfig | None:
        stmt = select(server_configs).where(server_configs.c.id == config_id).limit(1)
        with self._connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_server_config(row)

    def get_server_config_by_name(self, *, name: str) -> ServerConfig | None:
        stmt = select(server_configs).where(server_configs.c.name == name).limit(1)
        with self._connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_server_config(row)

    def list_server_configs(self, *, active_only: bool) -> list[ServerConfig]:
        stmt = select(server_configs).order_by(
            server_configs.c.price_monthly.asc(),
            server_configs.c.id.asc(),
        )
        if active_only:
            stmt = stmt.where(server_configs.c.is_active.is_(True))
        with self._connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [map_row_to_server_config(row) for row in rows]

    def create_server_config(
        self,
        *,
        name: str,
        cpu_cores: int,
        ram_gb: float,
        storage_gb: int,
        storage_type: str,
        bandwidth_gb: int,
        price_monthly: int,
        max_websites: int,
        features: list[str],
        now: datetime,
    ) -> ServerConfig:
        with self._begin() as conn:
            result = conn.execute(
                insert(server_configs).values(
                    name=name,
                    cpu_cores=cpu_cores,
                    ram_gb=ram_gb,
                    storage_gb=storage_gb,
                    storage_type=storage_type,
                    bandwidth_gb=bandwidth_gb,
                    price_monthly=price_monthly,
                    max_websites=max_websites,
                    features=dump_features(features),
                    is_active=True,
                    created_at=now,
                    updated_at=now,
                )
            )
            config_id = result.inserted_primary_key[0]
            row = conn.execute(
                select(server_configs).where(server_configs.c.id == config_id)
            ).mappings().one()
        return map_row_to_server_config(row)

    def update_server_config(self, *, config_id: int, now: datetime, **fields) -> bool:
        unknown = set(fields) - SERVER_CONFIG_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown server config fields: {sorted(unknown)}")
        values = {key: value for key, value in fields.items() if value is not None}
        if not values:
            return False
        if "features" in values:
            values["features"] = dump_features(values["features"])
        values["updated_at"] = now
        with self._begin() as conn:
            result = conn.execute(
                update(server_configs).where(server_configs.c.id == config_id).values(**values)
            )
        return result.rowcount > 0

    def toggle_server_config_active(self, *, config_id: int, now: datetime) -> bool:
        stmt = (
            update(server_configs)
            .where(server_configs.c.id == config_id)
            .values(is_active=not_(server_configs.c.is_active), updated_at=now)
        )
        with self._begin() as conn:
            result = conn.execute(stmt)
        return result.rowcount > 0

    def delete_server_config(self, *, config_id: int) -> bool:
        with self._begin() as conn:
            result = conn.execute(delete(server_configs).where(server_configs.c.id == config_id))
        return result.rowcount > 0

    # user servers

    def get_user_server(self, *, server_id: int) -> UserServer | None:
        stmt = select(user_servers).where(user_servers.c.id == server_id).limit(1)
        with self._connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_user_server(row)

    def list_user_servers(self, *, user_id: str) -> list[UserServer]:
        stmt = (
            select(
                user_servers,
                server_configs.c.name.label("config_name"),
                server_configs.c.cpu_cores,
                server_configs.c.ram_gb,
                server_configs.c.storage_gb,
            )
            .select_from(user_servers.join(server_configs, user_servers.c.config_id == server_configs.c.id))
            .where(user_servers.c.user_id == user_id)
            .order_by(user_servers.c.created_at.desc(), user_servers.c.id.desc())
        )
        with self._connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [map_row_to_user_server(row) for row in rows]

    def create_user_server(
        self,
        *,
        user_id: str,
        config_id: int,
        server_name: str,
        expires_at: datetime,
        now: datetime,
    ) -> UserServer | None:
        with self._savepoint() as conn:
            config_exists = conn.execute(
                select(server_configs.c.id).where(server_configs.c.id == config_id)
            ).first()
            if config_exists is None:
                return None
            result = conn.execute(
                insert(user_servers).values(
                    user_id=user_id,
                    config_id=config_id,
                    server_name=server_name,
                    status="active",
                    expires_at=expires_at,
                    created_at=now,
                    updated_at=now,
                )
            )
            server_id = result.inserted_primary_key[0]
            row = conn.execute(
                select(user_servers).where(user_servers.c.id == server_id)
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_user_server(row)

    def update_user_server_status(self, *, server_id: int, status: str, now: datetime) -> bool:
        if status not in SERVER_STATUSES:
            raise ValueError(f"Invalid server status: {status}")
        with self._begin() as conn:
            result = conn.execute(
                update(user_servers)
                .where(user_servers.c.id == server_id)
                .values(status=status, updated_at=now)
            )
        return result.rowcount > 0

    def extend_user_server(self, *, server_id: int, months: int, now: datetime) -> UserServer | None:
        with self._begin() as conn:
            current = conn.execute(
                select(user_servers.c.expires_at).where(user_servers.c.id == server_id)
            ).first()
            if current is None:
                return None
            stored_expires_at = current[0]
            new_expires_at = add_months(as_utc(stored_expires_at), months)
            # Compare-and-set on the value just read so a concurrent extend is not lost.
            result = conn.execute(
                update(user_servers)
                .where(
                    user_servers.c.id == server_id,
                    user_servers.c.expires_at == stored_expires_at,
                )
                .values(expires_at=new_expires_at, updated_at=now)
            )
            if result.rowcount == 0:
                return None
            row = conn.execute(
                select(user_servers).where(user_servers.c.id == server_id)
            ).mappings().one()
        return map_row_to_user_server(row)

    def list_expired_user_servers(self, *, now: datetime) -> list[UserServer]:
        stmt = (
            select(user_servers)
            .where(user_servers.c.status == "active", user_servers.c.expires_at < now)
            .order_by(user_servers.c.expires_at.asc())
        )
        with self._connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [map_row_to_user_server(row) for row in rows]

    def delete_user_server(self, *, server_id: int) -> bool:
        with self._begin() as conn:
            result = conn.execute(delete(user_servers).where(user_servers.c.id == server_id))
        return result.rowcount > 0

    # ledger

    def create_transaction(
        self,
        *,
        user_id: str,
        type: str,
        amount: int,
        description: str,
        reference_id: str | None,
        now: datetime,
    ) -> Transaction:
        if type not in TRANSACTION_TYPES:
            raise ValueError(f"Invalid transaction type: {type}")
        with self._begin() as conn:
            result = conn.execute(
                insert(transactions).values(
                    user_id=user_id,
                    type=type,
                    amount=amount,
                    description=description,
                    reference_id=reference_id,
                    created_at=now,
                )
            )
            transaction_id = result.inserted_primary_key[0]
            row = conn.execute(
                select(transactions).where(transactions.c.id == transaction_id)
            ).mappings().one()
        return map_row_to_transaction(row)

    def get_transaction(self, *, transaction_id: int) -> Transaction | None:
        stmt = select(transactions).where(transactions.c.id == transaction_id).limit(1)
        with self._connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return map_row_to_transaction(row)

    def list_transactions(self, *, user_id: str, limit: int) -> list[Transaction]:
        stmt = (
            select(transactions)
            .where(transactions.c.user_id == user_id)
            .order_by(transactions.c.created_at.desc(), transactions.c.id.desc())
            .limit(limit)
        )
        with self._connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [map_row_to_transaction(row) for row in rows]

    def total_deposits(self, *, user_id: str) -> int:
        stmt = select(func.coalesce(func.sum(transactions.c.amount), 0)).where(
            transactions.c.user_id == user_id,
            transactions.c.type == "deposit",
        )
        with self._connect() as conn:
            return int(conn.execute(stmt).scalar_one())

    def total_spending(self, *, user_id: str) -> int:
        stmt = select(func.coalesce(func.sum(func.abs(transactions.c.amount)), 0)).where(
            transactions.c.user_id == user_id,
            transactions.c.type == "purchase",
        )
        with self._connect() as conn:
            return int(conn.execute(stmt).scalar_one())
