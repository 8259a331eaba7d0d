"""
FastAPI routes for TV pairing and token rotation.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from app.dependencies import (
    get_app_settings,
    get_mobile_principal,
    get_password_authenticator,
    get_token_issuer,
    get_token_refresher,
    get_tv_pairing_service,
)
from app.models import Principal
from app.schemas import (
    GenerateCodeRequest,
    LoginRequest,
    LoginResult,
    LoginUser,
    PairingCodeRequest,
    RefreshRequest,
    RefreshResult,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _envelope(payload: Any, **extra: Any) -> dict:
    body = {"data": payload.model_dump(exclude_none=True)}
    body.update(extra)
    return body


@router.get("/health", status_code=HTTPStatus.OK)
def healthcheck(settings: Annotated[Any, Depends(get_app_settings)]) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.post("/login", status_code=HTTPStatus.OK)
def login(
    payload: LoginRequest,
    authenticator: Annotated[Any, Depends(get_password_authenticator)],
    issuer: Annotated[Any, Depends(get_token_issuer)],
) -> dict:
    """Exchange mobile credentials for a token pair with the default scopes."""
    user = authenticator.authenticate(payload.email, payload.password)
    result = LoginResult(user=LoginUser(email=user.email), token=issuer.issue(user.id))
    return _envelope(result)


@router.post("/refresh", status_code=HTTPStatus.OK)
def refresh_tokens(
    payload: RefreshRequest,
    refresher: Annotated[Any, Depends(get_token_refresher)],
) -> dict:
    """Rotate a refresh token; the presented token cannot be used again."""
    result = RefreshResult(token=refresher.refresh(payload.refresh_token))
    return _envelope(result)


@router.post("/generate-tv-code", status_code=HTTPStatus.CREATED)
def generate_tv_code(
    payload: GenerateCodeRequest,
    pairing: Annotated[Any, Depends(get_tv_pairing_service)],
) -> dict:
    """Issue a pairing code for the TV to display."""
    return _envelope(pairing.generate(payload.email))


@router.post("/poll-tv-code", status_code=HTTPStatus.OK)
def poll_tv_code(
    payload: PairingCodeRequest,
    pairing: Annotated[Any, Depends(get_tv_pairing_service)],
) -> dict:
    """Polled by the TV until the code is activated and tokens are returned."""
    return _envelope(pairing.poll(payload.code))


@router.post("/active-tv-code", status_code=HTTPStatus.OK)
def activate_tv_code(
    payload: PairingCodeRequest,
    principal: Annotated[Principal, Depends(get_mobile_principal)],
    pairing: Annotated[Any, Depends(get_tv_pairing_service)],
) -> dict:
    """Approve a pairing code from the signed-in mobile device."""
    result = pairing.activate(payload.code, principal.user_id)
    logger.info("User %s activated a TV pairing code", principal.user_id)
    return _envelope(result, message="TV code activated successfully")


__all__ = ["router"]
