from __future__ import annotations

from whitecat.application.dto.account import ListTransactionsInput
from whitecat.application.ports.transaction_port import TransactionPort
from whitecat.domain.entities.transaction import Transaction


DEFAULT_LIMIT = 50
MAX_LIMIT = 200


class ListTransactionsUseCase:
    def __init__(self, *, transaction_port: TransactionPort):
        self._transaction_port = transaction_port

    def execute(self, command: ListTransactionsInput) -> list[Transaction]:
        limit = command.limit if command.limit else DEFAULT_LIMIT
        limit = max(1, min(limit, MAX_LIMIT))
        return self._transaction_port.list_transactions(user_id=command.user_id, limit=limit)
