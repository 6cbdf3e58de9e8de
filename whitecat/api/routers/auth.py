from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import RedirectResponse

from whitecat.api.deps import (
    get_app_settings,
    get_complete_discord_login_use_case,
    get_logout_session_use_case,
    get_optional_user,
    get_session_token,
    get_start_discord_login_use_case,
)
from whitecat.api.schemas.auth import CurrentUserResponse, SessionUserResponse
from whitecat.api.schemas.common import SuccessResponse
from whitecat.application.dto.auth import CompleteDiscordLoginInput
from whitecat.application.use_cases.complete_discord_login import CompleteDiscordLoginUseCase
from whitecat.application.use_cases.logout_session import LogoutSessionUseCase
from whitecat.application.use_cases.start_discord_login import StartDiscordLoginUseCase
from whitecat.domain.entities.user import User
from whitecat.domain.exceptions import InvalidOAuthStateError, UpstreamAuthError
from whitecat.shared.config import Settings


logger = logging.getLogger(__name__)

router = APIRouter()


def _set_session_cookie(response: Response, settings: Settings, token: str, max_age_seconds: int) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=max_age_seconds,
        path="/",
    )


def _redirect_with_error(reason: str, *, settings: Settings, clear_cookie: bool) -> RedirectResponse:
    response = RedirectResponse(url=f"/?error={reason}", status_code=302)
    if clear_cookie:
        response.delete_cookie(key=settings.session_cookie_name, path="/")
    return response


@router.get("/auth/discord")
def start_discord_login(
    settings: Settings = Depends(get_app_settings),
    use_case: StartDiscordLoginUseCase = Depends(get_start_discord_login_use_case),
):
    output = use_case.execute()
    response = RedirectResponse(url=output.authorization_url, status_code=302)
    _set_session_cookie(response, settings, output.session_token, settings.pre_auth_max_age_seconds)
    return response


@router.get("/auth/discord/callback")
def discord_callback(
    code: str | None = None,
    error: str | None = None,
    state: str | None = None,
    settings: Settings = Depends(get_app_settings),
    pre_auth_token: str | None = Depends(get_session_token),
    use_case: CompleteDiscordLoginUseCase = Depends(get_complete_discord_login_use_case),
):
    def _fail(reason: str) -> RedirectResponse:
        cleared = use_case.abandon(pre_auth_token=pre_auth_token)
        return _redirect_with_error(reason, settings=settings, clear_cookie=cleared)

    if error:
        logger.warning("discord_callback: provider_error error=%s", error)
        return _fail("discord_auth_failed")
    if not code:
        return _fail("no_code")

    try:
        output = use_case.execute(
            CompleteDiscordLoginInput(
                code=code,
                state=state,
                pre_auth_token=pre_auth_token,
            )
        )
    except InvalidOAuthStateError as exc:
        logger.warning("discord_callback: invalid_state detail=%s", exc)
        return _fail("invalid_state")
    except UpstreamAuthError as exc:
        logger.warning("discord_callback: auth_failed detail=%s", exc)
        return _fail("auth_failed")

    response = RedirectResponse(url="/?login=success", status_code=302)
    _set_session_cookie(response, settings, output.session_token, settings.session_max_age_seconds)
    return response


@router.post("/auth/logout", response_model=SuccessResponse)
def logout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
    session_token: str | None = Depends(get_session_token),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    use_case.execute(session_token=session_token)
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return SuccessResponse()


@router.get(
    "/api/user",
    response_model=CurrentUserResponse,
    response_model_exclude_unset=True,
)
def get_current_session_user(user: User | None = Depends(get_optional_user)):
    if user is None:
        return CurrentUserResponse(authenticated=False)
    return CurrentUserResponse(
        authenticated=True,
        user=SessionUserResponse(
            id=user.id,
            username=user.username,
            avatar=user.avatar,
            email=user.email,
            balance=user.balance,
        ),
    )
