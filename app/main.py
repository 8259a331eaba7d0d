"""
FastAPI application entrypoint for the TV pairing service.
"""

from __future__ import annotations

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.errors import (
    AuthenticationError,
    CodeGenerationError,
    ConfigurationError,
    InvalidOwnerError,
    InvalidTokenError,
    LockTimeoutError,
    NotFoundError,
    PairingAuthError,
)
from app.core.logging import configure_logging, get_auth_logger

auth_logger = get_auth_logger()

_ERROR_RESPONSES: dict[type[PairingAuthError], tuple[HTTPStatus, str]] = {
    NotFoundError: (HTTPStatus.NOT_FOUND, "Resource not found"),
    InvalidOwnerError: (HTTPStatus.FORBIDDEN, "Failed to activate TV code"),
    InvalidTokenError: (HTTPStatus.UNAUTHORIZED, "Token invalid or revoked"),
    AuthenticationError: (HTTPStatus.UNAUTHORIZED, "Invalid credentials"),
    ConfigurationError: (HTTPStatus.INTERNAL_SERVER_ERROR, "Service misconfigured"),
    LockTimeoutError: (HTTPStatus.SERVICE_UNAVAILABLE, "Please retry shortly"),
    CodeGenerationError: (HTTPStatus.SERVICE_UNAVAILABLE, "Please retry shortly"),
}


def _describe(exc: PairingAuthError) -> tuple[HTTPStatus, str]:
    for error_type in type(exc).__mro__:
        if error_type in _ERROR_RESPONSES:
            return _ERROR_RESPONSES[error_type]
    return HTTPStatus.INTERNAL_SERVER_ERROR, "An error occurred"


async def handle_pairing_auth_error(request: Request, exc: PairingAuthError) -> JSONResponse:
    """Map core failures to HTTP outcomes and log them with request context."""
    status_code, message = _describe(exc)
    client_host = request.client.host if request.client else "unknown"
    log = (
        auth_logger.error
        if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR
        else auth_logger.warning
    )
    log(
        "Auth %s failed: %s (%s) ip=%s user_agent=%s",
        request.url.path,
        exc,
        type(exc).__name__,
        client_host,
        request.headers.get("user-agent", ""),
    )
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "error": str(exc)},
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="TV Pairing Auth",
        version="0.1.0",
        description="Pair input-constrained devices through short codes and rotate OAuth tokens.",
    )
    app.add_exception_handler(PairingAuthError, handle_pairing_auth_error)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
