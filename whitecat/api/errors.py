from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from whitecat.domain.exceptions import (
    ConfigurationError,
    DomainError,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    ServerCreationFailedError,
    UnauthorizedError,
    UpstreamAuthError,
    ValidationError,
)


logger = logging.getLogger(__name__)

# Checked in order, so subclasses must come before their bases.
DOMAIN_ERROR_STATUS: tuple[tuple[type[DomainError], int], ...] = (
    (UnauthorizedError, 401),
    (NotFoundError, 404),
    (ValidationError, 400),
    (InsufficientBalanceError, 400),
    (InvalidStateError, 400),
    (UpstreamAuthError, 502),
    (ServerCreationFailedError, 500),
    (ConfigurationError, 500),
)


def status_for(exc: DomainError) -> int:
    for error_type, status_code in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


def error_body(message: str, exc: BaseException | None = None, *, expose_details: bool = False) -> dict:
    body: dict = {"success": False, "error": message}
    if expose_details and exc is not None:
        body["detail"] = str(exc)
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def register_exception_handlers(app: FastAPI, *, expose_details: bool) -> None:
    """Render every error as ``{"success": false, "error": ...}``."""

    @app.exception_handler(DomainError)
    async def _domain_error(_request: Request, exc: DomainError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("api: domain_error type=%s detail=%s", type(exc).__name__, exc)
        body = error_body(str(exc), exc, expose_details=expose_details and status_code >= 500)
        if isinstance(exc, ValidationError):
            body["errors"] = exc.errors
        if isinstance(exc, InsufficientBalanceError):
            body.update(required=exc.required, current=exc.current, missing=exc.missing)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and message == "Not Found":
            message = "Route not found"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
                "message": error.get("msg", "Invalid value"),
            }
            for error in exc.errors()
        ]
        body = error_body(errors[0]["message"] if errors else "Validation error")
        body["errors"] = errors
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api: unhandled_error path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", exc, expose_details=expose_details),
        )
