from __future__ import annotations

from whitecat.application.ports.user_port import UserPort


class GetBalanceUseCase:
    def __init__(self, *, user_port: UserPort):
        self._user_port = user_port

    def execute(self, *, user_id: str) -> int:
        return self._user_port.get_balance(user_id=user_id)
