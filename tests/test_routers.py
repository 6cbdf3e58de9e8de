from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient
import pytest

from whitecat.api.deps import get_accounts_repository, get_discord_oauth_client
from whitecat.domain.entities.discord import DiscordProfile, DiscordTokens
from whitecat.domain.exceptions import UpstreamAuthError
from whitecat.main import create_app


class FakeDiscordOauthClient:
    def __init__(self, *, fail: bool = False):
        self.fail = fail

    def build_authorization_url(self, *, state: str) -> str:
        return f"https://discord.test/api/oauth2/authorize?state={state}"

    def exchange_code(self, *, code: str) -> DiscordTokens:
        if self.fail:
            raise UpstreamAuthError("Failed to exchange authorization code")
        return DiscordTokens(access_token="access-1", refresh_token="refresh-1", token_type="Bearer", expires_in=60)

    def fetch_profile(self, *, access_token: str) -> DiscordProfile:
        return DiscordProfile(
            id="80351110224678912",
            username="nelly",
            discriminator="0",
            avatar=None,
            email="nelly@example.com",
        )


@pytest.fixture
def discord_client() -> FakeDiscordOauthClient:
    return FakeDiscordOauthClient()


@pytest.fixture
def client(repository, discord_client, settings_factory):
    app = create_app(settings_factory())
    app.dependency_overrides[get_accounts_repository] = lambda: repository
    app.dependency_overrides[get_discord_oauth_client] = lambda: discord_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _login(client: TestClient) -> None:
    start = client.get("/auth/discord", follow_redirects=False)
    state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]
    callback = client.get(
        "/auth/discord/callback",
        params={"code": "code-1", "state": state},
        follow_redirects=False,
    )
    assert callback.headers["location"] == "/?login=success"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["status"] == "ok"
    assert payload["service"] == "WhiteCat Hosting"
    assert payload["timestamp"]


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Route not found"}


def test_configs_are_public(client):
    response = client.get("/api/configs")

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert [item["name"] for item in payload["data"]] == ["Kitten", "Cat", "Lion"]
    assert isinstance(payload["data"][0]["features"], list)

    detail = client.get(f"/api/configs/{payload['data'][1]['id']}")
    assert detail.status_code == 200
    assert detail.json()["data"]["price_monthly"] == 100000

    missing = client.get("/api/configs/9999")
    assert missing.status_code == 404
    assert missing.json()["success"] is False


def test_start_login_sets_pre_auth_cookie(client):
    response = client.get("/auth/discord", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].startswith("https://discord.test/api/oauth2/authorize")
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("whitecat_session=")
    assert "HttpOnly" in cookie
    assert "Max-Age=3600" in cookie
    assert "samesite=lax" in cookie.lower()


def test_callback_redirects_on_provider_error(client):
    start = client.get("/auth/discord", follow_redirects=False)
    pre_auth_token = start.cookies["whitecat_session"]

    response = client.get("/auth/discord/callback", params={"error": "access_denied"}, follow_redirects=False)

    assert response.headers["location"] == "/?error=discord_auth_failed"
    assert "Max-Age=0" in response.headers["set-cookie"]
    assert client.app.state.session_store.get(pre_auth_token) is None


def test_callback_redirects_when_code_missing(client):
    response = client.get("/auth/discord/callback", follow_redirects=False)
    assert response.headers["location"] == "/?error=no_code"
    assert "set-cookie" not in response.headers


def test_callback_redirects_on_state_mismatch(client):
    start = client.get("/auth/discord", follow_redirects=False)
    pre_auth_token = start.cookies["whitecat_session"]

    response = client.get(
        "/auth/discord/callback",
        params={"code": "code-1", "state": "forged"},
        follow_redirects=False,
    )

    assert response.headers["location"] == "/?error=invalid_state"
    assert "Max-Age=0" in response.headers["set-cookie"]
    assert client.app.state.session_store.get(pre_auth_token) is None


def test_callback_redirects_on_upstream_failure(client, discord_client):
    discord_client.fail = True
    start = client.get("/auth/discord", follow_redirects=False)
    state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]

    response = client.get(
        "/auth/discord/callback",
        params={"code": "code-1", "state": state},
        follow_redirects=False,
    )

    assert response.headers["location"] == "/?error=auth_failed"
    assert "Max-Age=0" in response.headers["set-cookie"]
    assert client.app.state.session_store.get(start.cookies["whitecat_session"]) is None


def test_failed_callback_keeps_existing_login(client):
    _login(client)

    response = client.get("/auth/discord/callback", params={"error": "access_denied"}, follow_redirects=False)

    assert response.headers["location"] == "/?error=discord_auth_failed"
    assert "set-cookie" not in response.headers
    assert client.get("/api/user").json()["authenticated"] is True


def test_current_user_reports_anonymous(client):
    assert client.get("/api/user").json() == {"authenticated": False}


def test_login_then_current_user(client):
    _login(client)

    payload = client.get("/api/user").json()

    assert payload["authenticated"] is True
    assert payload["user"] == {
        "id": "80351110224678912",
        "username": "nelly",
        "avatar": "https://cdn.discordapp.com/embed/avatars/0.png",
        "email": "nelly@example.com",
        "balance": 0,
    }


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("get", "/api/user/balance"),
        ("post", "/api/user/deposit"),
        ("get", "/api/user/transactions"),
        ("get", "/api/user/servers"),
        ("post", "/api/user/servers"),
        ("post", "/api/user/servers/1/extend"),
    ],
)
def test_account_routes_require_session(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized - No session"}


def test_unknown_session_token_is_rejected(client):
    client.cookies.set("whitecat_session", "f" * 64)

    response = client.get("/api/user/balance")

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized - Invalid session"


def test_deposit_purchase_and_extend_flow(client):
    _login(client)

    deposit = client.post("/api/user/deposit", json={"amount": 300000})
    assert deposit.json() == {"success": True, "data": {"balance": 300000}}

    cat_id = client.get("/api/configs").json()["data"][1]["id"]
    purchase = client.post(
        "/api/user/servers",
        json={"config_id": cat_id, "server_name": "my-blog", "months": 2},
    )
    assert purchase.status_code == 200
    order = purchase.json()["data"]
    assert order["new_balance"] == 100000
    assert order["server"]["server_name"] == "my-blog"
    assert order["server"]["status"] == "active"

    servers = client.get("/api/user/servers").json()["data"]
    assert [item["config_name"] for item in servers] == ["Cat"]

    lion_id = client.get("/api/configs").json()["data"][2]["id"]
    rejected = client.post("/api/user/servers", json={"config_id": lion_id, "server_name": "shop"})
    assert rejected.status_code == 400
    assert rejected.json() == {
        "success": False,
        "error": "Insufficient balance",
        "required": 200000,
        "current": 100000,
        "missing": 100000,
    }

    extend = client.post(f"/api/user/servers/{order['server']['id']}/extend")
    assert extend.status_code == 200
    assert extend.json()["data"]["new_balance"] == 0

    history = client.get("/api/user/transactions", params={"limit": 2}).json()["data"]
    assert [item["description"] for item in history] == [
        "Extend server my-blog (1 months)",
        "Purchase server Cat - my-blog (2 months)",
    ]
    assert client.get("/api/user/balance").json()["data"]["balance"] == 0


def test_extend_someone_elses_server_is_not_found(client):
    _login(client)

    response = client.post("/api/user/servers/9999/extend", json={"months": 1})

    assert response.status_code == 404
    assert response.json()["error"] == "Server not found"


def test_extend_another_users_server_changes_nothing(client, repository):
    now = datetime(2026, 1, 31, 9, 0, tzinfo=timezone.utc)
    repository.upsert_user(user_id="other", username="tom", email=None, avatar=None, now=now)
    repository.update_balance(user_id="other", delta=300000, now=now)
    kitten = repository.get_server_config_by_name(name="Kitten")
    server = repository.create_user_server(
        user_id="other",
        config_id=kitten.id,
        server_name="their-blog",
        expires_at=now,
        now=now,
    )
    _login(client)
    client.post("/api/user/deposit", json={"amount": 300000})

    response = client.post(f"/api/user/servers/{server.id}/extend", json={"months": 1})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Server not found"}
    assert repository.get_user_server(server_id=server.id).expires_at == server.expires_at
    assert repository.get_balance(user_id="other") == 300000
    assert repository.list_transactions(user_id="other", limit=50) == []
    assert client.get("/api/user/balance").json()["data"]["balance"] == 300000
    history = client.get("/api/user/transactions").json()["data"]
    assert [item["type"] for item in history] == ["deposit"]


@pytest.mark.parametrize(
    "body",
    [{"amount": 0}, {"amount": -5}, {"amount": "100"}, {"amount": 1.5}, {}],
)
def test_deposit_rejects_invalid_amount(client, body):
    _login(client)

    response = client.post("/api/user/deposit", json=body)

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["errors"][0]["field"] == "amount"


def test_purchase_rejects_invalid_months(client):
    _login(client)

    response = client.post("/api/user/servers", json={"config_id": 1, "server_name": "blog", "months": 25})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "months"


def test_logout_clears_session(client):
    _login(client)

    response = client.post("/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get("/api/user").json() == {"authenticated": False}


def test_contact_form(client):
    ok = client.post(
        "/api/contact",
        json={"name": "Nelly", "email": "nelly@example.com", "message": "Do you offer yearly billing?"},
    )
    assert ok.status_code == 200
    assert ok.json()["success"] is True
    assert ok.json()["message"].startswith("Thank you for contacting WhiteCat Hosting!")

    bad = client.post("/api/contact", json={"name": "N", "email": "nelly", "message": "hi"})
    assert bad.status_code == 400
    assert [item["field"] for item in bad.json()["errors"]] == ["name", "email", "message"]


def test_login_start_without_client_id_is_a_server_error(repository, settings_factory):
    app = create_app(settings_factory(discord_client_id=""))
    app.dependency_overrides[get_accounts_repository] = lambda: repository
    with TestClient(app) as test_client:
        response = test_client.get("/auth/discord", follow_redirects=False)

    assert response.status_code == 500
    assert response.json()["error"] == "Discord OAuth not configured"
