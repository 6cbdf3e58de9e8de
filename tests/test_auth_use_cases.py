from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from whitecat.application.dto.auth import CompleteDiscordLoginInput
from whitecat.application.use_cases.complete_discord_login import CompleteDiscordLoginUseCase
from whitecat.application.use_cases.get_session_user import GetSessionUserUseCase
from whitecat.application.use_cases.logout_session import LogoutSessionUseCase
from whitecat.application.use_cases.start_discord_login import StartDiscordLoginUseCase
from whitecat.domain.entities.discord import DiscordProfile, DiscordTokens
from whitecat.domain.entities.user import User
from whitecat.domain.exceptions import InvalidOAuthStateError, UpstreamAuthError
from whitecat.infrastructure.sessions.memory_session_store import InMemorySessionStore


class FakeDiscordOauthPort:
    def __init__(self, *, avatar: str | None = "hash1", fail_exchange: bool = False):
        self.avatar = avatar
        self.fail_exchange = fail_exchange
        self.exchanged_codes: list[str] = []

    def build_authorization_url(self, *, state: str) -> str:
        return f"https://discord.test/oauth2/authorize?state={state}"

    def exchange_code(self, *, code: str) -> DiscordTokens:
        if self.fail_exchange:
            raise UpstreamAuthError("Failed to exchange authorization code")
        self.exchanged_codes.append(code)
        return DiscordTokens(
            access_token="access-1",
            refresh_token="refresh-1",
            token_type="Bearer",
            expires_in=604800,
        )

    def fetch_profile(self, *, access_token: str) -> DiscordProfile:
        assert access_token == "access-1"
        return DiscordProfile(
            id="80351110224678912",
            username="nelly",
            discriminator="1337",
            avatar=self.avatar,
            email="nelly@example.com",
        )


class FakeUserPort:
    def __init__(self):
        self.users: dict[str, User] = {}

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def upsert_user(
        self,
        *,
        user_id: str,
        username: str,
        email: str | None,
        avatar: str | None,
        now: datetime,
    ) -> User:
        existing = self.users.get(user_id)
        if existing is not None:
            user = replace(existing, username=username, email=email, avatar=avatar, updated_at=now)
        else:
            user = User(
                id=user_id,
                username=username,
                email=email,
                avatar=avatar,
                balance=0,
                created_at=now,
                updated_at=now,
            )
        self.users[user_id] = user
        return user


def _store() -> InMemorySessionStore:
    return InMemorySessionStore(max_age_seconds=3600)


def _start(store: InMemorySessionStore, discord: FakeDiscordOauthPort):
    return StartDiscordLoginUseCase(session_store=store, discord_oauth_port=discord).execute()


def test_start_login_stores_state_in_pre_auth_session():
    store = _store()

    output = _start(store, FakeDiscordOauthPort())

    session = store.get(output.session_token)
    assert session is not None
    assert not session.is_authenticated
    assert len(session.oauth_state) == 32
    assert output.authorization_url.endswith(f"state={session.oauth_state}")


def test_complete_login_creates_user_and_fresh_session():
    store = _store()
    discord = FakeDiscordOauthPort()
    users = FakeUserPort()
    started = _start(store, discord)
    state = store.get(started.session_token).oauth_state

    output = CompleteDiscordLoginUseCase(
        session_store=store,
        discord_oauth_port=discord,
        user_port=users,
    ).execute(CompleteDiscordLoginInput(code="code-1", state=state, pre_auth_token=started.session_token))

    assert output.user_id == "80351110224678912"
    assert output.session_token != started.session_token
    assert store.get(started.session_token) is None
    session = store.get(output.session_token)
    assert session.user_id == "80351110224678912"
    assert session.username == "nelly"
    assert session.access_token == "access-1"
    assert session.refresh_token == "refresh-1"
    assert session.avatar == "https://cdn.discordapp.com/avatars/80351110224678912/hash1.png"
    assert users.users["80351110224678912"].balance == 0
    assert discord.exchanged_codes == ["code-1"]


def test_repeat_login_refreshes_profile_and_keeps_balance():
    store = _store()
    discord = FakeDiscordOauthPort(avatar=None)
    users = FakeUserPort()
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    users.users["80351110224678912"] = User(
        id="80351110224678912",
        username="old-name",
        email=None,
        avatar=None,
        balance=500,
        created_at=now,
        updated_at=now,
    )
    started = _start(store, discord)
    state = store.get(started.session_token).oauth_state

    CompleteDiscordLoginUseCase(session_store=store, discord_oauth_port=discord, user_port=users).execute(
        CompleteDiscordLoginInput(code="code-1", state=state, pre_auth_token=started.session_token)
    )

    user = users.users["80351110224678912"]
    assert user.username == "nelly"
    assert user.balance == 500
    assert user.created_at == now
    assert user.avatar == "https://cdn.discordapp.com/embed/avatars/2.png"


@pytest.mark.parametrize("state", ["wrong-state", None, ""])
def test_complete_login_rejects_state_mismatch(state):
    store = _store()
    discord = FakeDiscordOauthPort()
    started = _start(store, discord)

    with pytest.raises(InvalidOAuthStateError):
        CompleteDiscordLoginUseCase(
            session_store=store,
            discord_oauth_port=discord,
            user_port=FakeUserPort(),
        ).execute(CompleteDiscordLoginInput(code="code-1", state=state, pre_auth_token=started.session_token))

    assert discord.exchanged_codes == []


def test_complete_login_without_pre_auth_session_is_rejected():
    discord = FakeDiscordOauthPort()

    with pytest.raises(InvalidOAuthStateError):
        CompleteDiscordLoginUseCase(
            session_store=_store(),
            discord_oauth_port=discord,
            user_port=FakeUserPort(),
        ).execute(CompleteDiscordLoginInput(code="code-1", state="abc", pre_auth_token=None))


def test_complete_login_propagates_upstream_failure():
    store = _store()
    discord = FakeDiscordOauthPort(fail_exchange=True)
    users = FakeUserPort()
    started = _start(store, discord)
    state = store.get(started.session_token).oauth_state

    with pytest.raises(UpstreamAuthError):
        CompleteDiscordLoginUseCase(session_store=store, discord_oauth_port=discord, user_port=users).execute(
            CompleteDiscordLoginInput(code="code-1", state=state, pre_auth_token=started.session_token)
        )
    assert users.users == {}


def test_abandon_drops_pre_auth_session_only():
    store = _store()
    discord = FakeDiscordOauthPort()
    started = _start(store, discord)
    login_token = store.create(user_id="1", username="nelly")
    use_case = CompleteDiscordLoginUseCase(session_store=store, discord_oauth_port=discord, user_port=FakeUserPort())

    assert use_case.abandon(pre_auth_token=started.session_token) is True
    assert store.get(started.session_token) is None
    assert use_case.abandon(pre_auth_token="stale-token") is True
    assert use_case.abandon(pre_auth_token=None) is False
    assert use_case.abandon(pre_auth_token=login_token) is False
    assert store.get(login_token).user_id == "1"


def test_logout_deletes_session():
    store = _store()
    token = store.create(user_id="1")
    use_case = LogoutSessionUseCase(session_store=store)

    assert use_case.execute(session_token=token) is True
    assert use_case.execute(session_token=token) is False
    assert use_case.execute(session_token=None) is False


def test_get_session_user_requires_authenticated_session():
    store = _store()
    users = FakeUserPort()
    user = users.upsert_user(
        user_id="1",
        username="nelly",
        email=None,
        avatar=None,
        now=datetime.now(timezone.utc),
    )
    use_case = GetSessionUserUseCase(session_store=store, user_port=users)

    assert use_case.execute(session_token=store.create(user_id="1")) == user
    assert use_case.execute(session_token=store.create(oauth_state="s")) is None
    assert use_case.execute(session_token="missing") is None
    assert use_case.execute(session_token=None) is None
