from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request
from sqlalchemy.engine import Engine

from whitecat.application.use_cases.complete_discord_login import CompleteDiscordLoginUseCase
from whitecat.application.use_cases.deposit import DepositUseCase
from whitecat.application.use_cases.extend_server import ExtendServerUseCase
from whitecat.application.use_cases.get_balance import GetBalanceUseCase
from whitecat.application.use_cases.get_session_user import GetSessionUserUseCase
from whitecat.application.use_cases.list_transactions import ListTransactionsUseCase
from whitecat.application.use_cases.list_user_servers import ListUserServersUseCase
from whitecat.application.use_cases.logout_session import LogoutSessionUseCase
from whitecat.application.use_cases.purchase_server import PurchaseServerUseCase
from whitecat.application.use_cases.server_configs import (
    GetServerConfigUseCase,
    ListServerConfigsUseCase,
)
from whitecat.application.use_cases.start_discord_login import StartDiscordLoginUseCase
from whitecat.application.use_cases.submit_contact import SubmitContactUseCase
from whitecat.domain.entities.user import User
from whitecat.domain.exceptions import ConfigurationError, UnauthorizedError
from whitecat.infrastructure.clients.discord_oauth_client import (
    DiscordOauthClient,
    DiscordOauthClientSettings,
)
from whitecat.infrastructure.db.engine import get_engine
from whitecat.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from whitecat.infrastructure.sessions.memory_session_store import InMemorySessionStore
from whitecat.shared.config import Settings, get_settings


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def _get_db_engine(settings: Settings) -> Engine:
    if not settings.database_url:
        raise ConfigurationError("DATABASE_URL is required.")
    return get_engine(settings.database_url)


def get_accounts_repository(
    settings: Settings = Depends(get_app_settings),
) -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine(settings))


def get_session_store(request: Request) -> InMemorySessionStore:
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Session store is not ready.")
    return store


@lru_cache(maxsize=4)
def _get_discord_oauth_client(client_settings: DiscordOauthClientSettings) -> DiscordOauthClient:
    return DiscordOauthClient(client_settings)


def get_discord_oauth_client(
    settings: Settings = Depends(get_app_settings),
) -> DiscordOauthClient:
    return _get_discord_oauth_client(
        DiscordOauthClientSettings(
            client_id=settings.discord_client_id,
            client_secret=settings.discord_client_secret,
            redirect_uri=settings.discord_redirect_uri,
            api_base=settings.discord_api_base,
            timeout_seconds=settings.discord_timeout_seconds,
        )
    )


def get_start_discord_login_use_case(
    session_store: InMemorySessionStore = Depends(get_session_store),
    discord_client: DiscordOauthClient = Depends(get_discord_oauth_client),
) -> StartDiscordLoginUseCase:
    return StartDiscordLoginUseCase(
        session_store=session_store,
        discord_oauth_port=discord_client,
    )


def get_complete_discord_login_use_case(
    session_store: InMemorySessionStore = Depends(get_session_store),
    discord_client: DiscordOauthClient = Depends(get_discord_oauth_client),
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> CompleteDiscordLoginUseCase:
    return CompleteDiscordLoginUseCase(
        session_store=session_store,
        discord_oauth_port=discord_client,
        user_port=repository,
    )


def get_logout_session_use_case(
    session_store: InMemorySessionStore = Depends(get_session_store),
) -> LogoutSessionUseCase:
    return LogoutSessionUseCase(session_store=session_store)


def get_get_session_user_use_case(
    session_store: InMemorySessionStore = Depends(get_session_store),
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> GetSessionUserUseCase:
    return GetSessionUserUseCase(session_store=session_store, user_port=repository)


def get_list_server_configs_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> ListServerConfigsUseCase:
    return ListServerConfigsUseCase(server_config_port=repository)


def get_get_server_config_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> GetServerConfigUseCase:
    return GetServerConfigUseCase(server_config_port=repository)


def get_get_balance_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> GetBalanceUseCase:
    return GetBalanceUseCase(user_port=repository)


def get_deposit_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> DepositUseCase:
    return DepositUseCase(accounts_port=repository)


def get_list_transactions_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> ListTransactionsUseCase:
    return ListTransactionsUseCase(transaction_port=repository)


def get_list_user_servers_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> ListUserServersUseCase:
    return ListUserServersUseCase(user_server_port=repository)


def get_purchase_server_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> PurchaseServerUseCase:
    return PurchaseServerUseCase(accounts_port=repository)


def get_extend_server_use_case(
    repository: SqlAccountsRepository = Depends(get_accounts_repository),
) -> ExtendServerUseCase:
    return ExtendServerUseCase(accounts_port=repository)


def get_submit_contact_use_case() -> SubmitContactUseCase:
    return SubmitContactUseCase()


def get_session_token(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> str | None:
    return request.cookies.get(settings.session_cookie_name) or None


def get_optional_user(
    session_token: str | None = Depends(get_session_token),
    use_case: GetSessionUserUseCase = Depends(get_get_session_user_use_case),
) -> User | None:
    if not session_token:
        return None
    return use_case.execute(session_token=session_token)


def get_current_user(
    session_token: str | None = Depends(get_session_token),
    user: User | None = Depends(get_optional_user),
) -> User:
    if not session_token:
        raise UnauthorizedError("Unauthorized - No session")
    if user is None:
        raise UnauthorizedError("Unauthorized - Invalid session")
    return user
