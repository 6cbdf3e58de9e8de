from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from .server_config_port import ServerConfigPort
from .transaction_port import TransactionPort
from .user_port import UserPort
from .user_server_port import UserServerPort


TAccountsResult = TypeVar("TAccountsResult")


class AccountsPort(UserPort, ServerConfigPort, UserServerPort, TransactionPort, Protocol):
    def execute_in_transaction(
        self,
        fn: Callable[[AccountsPort], TAccountsResult],
    ) -> TAccountsResult:
        ...
