from __future__ import annotations

import logging
import secrets

from whitecat.application.dto.auth import CompleteDiscordLoginInput, CompleteDiscordLoginOutput
from whitecat.application.ports.discord_oauth_port import DiscordOauthPort
from whitecat.application.ports.session_store_port import SessionStorePort
from whitecat.application.ports.user_port import UserPort
from whitecat.domain.exceptions import InvalidOAuthStateError
from whitecat.domain.services.avatar import discord_avatar_url

from .common import utcnow


logger = logging.getLogger(__name__)


class CompleteDiscordLoginUseCase:
    def __init__(
        self,
        *,
        session_store: SessionStorePort,
        discord_oauth_port: DiscordOauthPort,
        user_port: UserPort,
    ):
        self._session_store = session_store
        self._discord_oauth_port = discord_oauth_port
        self._user_port = user_port

    def execute(self, command: CompleteDiscordLoginInput) -> CompleteDiscordLoginOutput:
        self._verify_state(command)

        tokens = self._discord_oauth_port.exchange_code(code=command.code)
        profile = self._discord_oauth_port.fetch_profile(access_token=tokens.access_token)
        avatar = discord_avatar_url(profile)

        user = self._user_port.upsert_user(
            user_id=profile.id,
            username=profile.username,
            email=profile.email,
            avatar=avatar,
            now=utcnow(),
        )

        # The pre-auth token is never promoted to a login session.
        if command.pre_auth_token:
            self._session_store.delete(command.pre_auth_token)

        session_token = self._session_store.create(
            user_id=user.id,
            username=user.username,
            email=user.email,
            avatar=avatar,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )
        logger.info("discord_login: login_completed user_id=%s", user.id)
        return CompleteDiscordLoginOutput(
            session_token=session_token,
            user_id=user.id,
            username=user.username,
        )

    def abandon(self, *, pre_auth_token: str | None) -> bool:
        """Drop a pre-auth session after a failed callback.

        Returns True when the browser's cookie is dead and should be cleared.
        A token that already carries a login session is left alone.
        """
        if not pre_auth_token:
            return False
        session = self._session_store.get(pre_auth_token)
        if session is not None and session.is_authenticated:
            return False
        self._session_store.delete(pre_auth_token)
        return True

    def _verify_state(self, command: CompleteDiscordLoginInput) -> None:
        if not command.state or not command.pre_auth_token:
            raise InvalidOAuthStateError("Missing OAuth state.")
        session = self._session_store.get(command.pre_auth_token)
        expected = session.oauth_state if session is not None else None
        if not expected or not secrets.compare_digest(expected, command.state):
            raise InvalidOAuthStateError("OAuth state mismatch.")
