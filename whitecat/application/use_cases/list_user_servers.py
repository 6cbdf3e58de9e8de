from __future__ import annotations

from whitecat.application.ports.user_server_port import UserServerPort
from whitecat.domain.entities.user_server import UserServer


class ListUserServersUseCase:
    def __init__(self, *, user_server_port: UserServerPort):
        self._user_server_port = user_server_port

    def execute(self, *, user_id: str) -> list[UserServer]:
        return self._user_server_port.list_user_servers(user_id=user_id)
