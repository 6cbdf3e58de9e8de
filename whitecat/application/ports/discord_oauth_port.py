from __future__ import annotations

from typing import Protocol

from whitecat.domain.entities.discord import DiscordProfile, DiscordTokens


class DiscordOauthPort(Protocol):
    def build_authorization_url(self, *, state: str) -> str:
        ...

    def exchange_code(self, *, code: str) -> DiscordTokens:
        ...

    def fetch_profile(self, *, access_token: str) -> DiscordProfile:
        ...
