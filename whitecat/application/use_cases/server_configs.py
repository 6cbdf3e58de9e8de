from __future__ import annotations

from whitecat.application.ports.server_config_port import ServerConfigPort
from whitecat.domain.entities.server_config import ServerConfig
from whitecat.domain.exceptions import NotFoundError


class ListServerConfigsUseCase:
    def __init__(self, *, server_config_port: ServerConfigPort):
        self._server_config_port = server_config_port

    def execute(self) -> list[ServerConfig]:
        return self._server_config_port.list_server_configs(active_only=True)


class GetServerConfigUseCase:
    def __init__(self, *, server_config_port: ServerConfigPort):
        self._server_config_port = server_config_port

    def execute(self, *, config_id: int) -> ServerConfig:
        config = self._server_config_port.get_server_config(config_id=config_id)
        if config is None or not config.is_active:
            raise NotFoundError("Server configuration not found")
        return config
