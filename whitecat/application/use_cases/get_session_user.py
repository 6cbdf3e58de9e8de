from __future__ import annotations

from whitecat.application.ports.session_store_port import SessionStorePort
from whitecat.application.ports.user_port import UserPort
from whitecat.domain.entities.user import User


class GetSessionUserUseCase:
    def __init__(self, *, session_store: SessionStorePort, user_port: UserPort):
        self._session_store = session_store
        self._user_port = user_port

    def execute(self, *, session_token: str | None) -> User | None:
        if not session_token:
            return None
        session = self._session_store.get(session_token)
        if session is None or not session.user_id:
            return None
        return self._user_port.get_user_by_id(user_id=session.user_id)
