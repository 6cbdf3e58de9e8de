from __future__ import annotations

import secrets

from whitecat.application.dto.auth import StartDiscordLoginOutput
from whitecat.application.ports.discord_oauth_port import DiscordOauthPort
from whitecat.application.ports.session_store_port import SessionStorePort


def new_oauth_state() -> str:
    return secrets.token_hex(16)


class StartDiscordLoginUseCase:
    def __init__(self, *, session_store: SessionStorePort, discord_oauth_port: DiscordOauthPort):
        self._session_store = session_store
        self._discord_oauth_port = discord_oauth_port

    def execute(self) -> StartDiscordLoginOutput:
        state = new_oauth_state()
        authorization_url = self._discord_oauth_port.build_authorization_url(state=state)
        session_token = self._session_store.create(oauth_state=state)
        return StartDiscordLoginOutput(
            session_token=session_token,
            authorization_url=authorization_url,
        )
