from __future__ import annotations

from whitecat.domain.entities.discord import DiscordProfile


DISCORD_CDN_BASE = "https://cdn.discordapp.com"
DEFAULT_AVATAR_COUNT = 5


def discord_avatar_url(profile: DiscordProfile) -> str:
    if profile.avatar:
        return f"{DISCORD_CDN_BASE}/avatars/{profile.id}/{profile.avatar}.png"
    index = _discriminator_number(profile.discriminator) % DEFAULT_AVATAR_COUNT
    return f"{DISCORD_CDN_BASE}/embed/avatars/{index}.png"


def _discriminator_number(discriminator: str | None) -> int:
    if not discriminator:
        return 0
    try:
        return int(discriminator)
    except ValueError:
        return 0
