"""Bearer authentication dependency for protected routes."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Header

from app.core.errors import InvalidTokenError
from app.models import Principal

from .clients import get_token_validator

MOBILE_SCOPE = "mobile"


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise InvalidTokenError("No token provided.")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        raise InvalidTokenError("No token provided.")
    return credentials.strip()


def get_mobile_principal(
    validator: Annotated[Any, Depends(get_token_validator)],
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """Resolve the caller of a mobile-only endpoint from its bearer token."""
    return validator.validate(_extract_bearer(authorization), required_scope=MOBILE_SCOPE)


__all__ = ["MOBILE_SCOPE", "get_mobile_principal"]
