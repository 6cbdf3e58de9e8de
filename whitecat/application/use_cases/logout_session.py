from __future__ import annotations

from whitecat.application.ports.session_store_port import SessionStorePort


class LogoutSessionUseCase:
    def __init__(self, *, session_store: SessionStorePort):
        self._session_store = session_store

    def execute(self, *, session_token: str | None) -> bool:
        if not session_token:
            return False
        return self._session_store.delete(session_token)
