from __future__ import annotations

from dataclasses import dataclass

from whitecat.domain.entities.user_server import UserServer


@dataclass(frozen=True)
class DepositInput:
    user_id: str
    amount: int


@dataclass(frozen=True)
class DepositOutput:
    balance: int


@dataclass(frozen=True)
class ListTransactionsInput:
    user_id: str
    limit: int | None = None


@dataclass(frozen=True)
class PurchaseServerInput:
    user_id: str
    config_id: int
    server_name: str
    months: int = 1


@dataclass(frozen=True)
class ExtendServerInput:
    user_id: str
    server_id: int
    months: int = 1


@dataclass(frozen=True)
class ServerOrderOutput:
    server: UserServer
    new_balance: int
