from __future__ import annotations

from dataclasses import dataclass
import logging
from urllib.parse import urlencode

import httpx

from whitecat.application.ports.discord_oauth_port import DiscordOauthPort
from whitecat.domain.entities.discord import DiscordProfile, DiscordTokens
from whitecat.domain.exceptions import ConfigurationError, UpstreamAuthError


logger = logging.getLogger(__name__)

DISCORD_SCOPE = "identify email"


@dataclass(frozen=True)
class DiscordOauthClientSettings:
    client_id: str
    client_secret: str
    redirect_uri: str
    api_base: str = "https://discord.com/api"
    timeout_seconds: float = 10.0


class DiscordOauthClient(DiscordOauthPort):
    def __init__(self, settings: DiscordOauthClientSettings, *, transport: httpx.BaseTransport | None = None):
        self._settings = settings
        self._transport = transport

    def build_authorization_url(self, *, state: str) -> str:
        if not self._settings.client_id:
            raise ConfigurationError("Discord OAuth not configured")
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": self._settings.redirect_uri,
            "response_type": "code",
            "scope": DISCORD_SCOPE,
            "state": state,
        }
        return f"{self._settings.api_base}/oauth2/authorize?{urlencode(params)}"

    def exchange_code(self, *, code: str) -> DiscordTokens:
        data = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._settings.redirect_uri,
        }
        payload = self._request(
            "POST",
            "/oauth2/token",
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            error_message="Failed to exchange authorization code",
        )
        access_token = payload.get("access_token")
        if not access_token:
            raise UpstreamAuthError("Discord token response missing access_token.")
        expires_in = payload.get("expires_in")
        return DiscordTokens(
            access_token=str(access_token),
            refresh_token=payload.get("refresh_token"),
            token_type=str(payload.get("token_type") or "Bearer"),
            expires_in=int(expires_in) if expires_in is not None else None,
            scope=payload.get("scope"),
        )

    def fetch_profile(self, *, access_token: str) -> DiscordProfile:
        payload = self._request(
            "GET",
            "/users/@me",
            headers={"Authorization": f"Bearer {access_token}"},
            error_message="Failed to get user information",
        )
        user_id = payload.get("id")
        username = payload.get("username")
        if not user_id or not username:
            raise UpstreamAuthError("Discord profile missing id or username.")
        discriminator = payload.get("discriminator")
        return DiscordProfile(
            id=str(user_id),
            username=str(username),
            discriminator=str(discriminator) if discriminator is not None else None,
            avatar=payload.get("avatar"),
            email=payload.get("email"),
        )

    def _request(self, method: str, path: str, *, error_message: str, **kwargs) -> dict:
        url = f"{self._settings.api_base}{path}"
        try:
            with httpx.Client(timeout=self._settings.timeout_seconds, transport=self._transport) as client:
                response = client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("discord_oauth_client: request_failed path=%s detail=%s", path, exc)
            raise UpstreamAuthError(error_message) from exc

        if response.status_code >= 400:
            logger.warning(
                "discord_oauth_client: upstream_error path=%s status=%s body=%s",
                path,
                response.status_code,
                response.text[:500],
            )
            raise UpstreamAuthError(error_message)

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamAuthError(error_message) from exc
        if not isinstance(payload, dict):
            raise UpstreamAuthError(error_message)
        return payload
