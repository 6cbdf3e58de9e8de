from __future__ import annotations

from datetime import datetime
from typing import Protocol

from whitecat.domain.entities.transaction import Transaction, TransactionType


class TransactionPort(Protocol):
    def create_transaction(
        self,
        *,
        user_id: str,
        type: TransactionType,
        amount: int,
        description: str,
        reference_id: str | None,
        now: datetime,
    ) -> Transaction:
        ...

    def get_transaction(self, *, transaction_id: int) -> Transaction | None:
        ...

    def list_transactions(self, *, user_id: str, limit: int) -> list[Transaction]:
        ...

    def total_deposits(self, *, user_id: str) -> int:
        ...

    def total_spending(self, *, user_id: str) -> int:
        ...
