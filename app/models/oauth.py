"""
Domain records for issued OAuth credentials.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True, slots=True)
class OAuthClient:
    """The single trusted first-party client; its id is the JWT audience."""

    id: str
    name: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Server-side record behind a bearer JWT (looked up by ``jti``)."""

    id: str
    user_id: int
    client_id: str
    scopes: Tuple[str, ...]
    expires_at: datetime
    revoked: bool = False
    name: str = "Public Client Token"
    created_at: datetime | None = None

    def has_scope(self, scope: str) -> bool:
        return scope in self.scopes


@dataclass(frozen=True, slots=True)
class RefreshToken:
    """Opaque rotating credential paired 1:1 with an access token."""

    id: str
    access_token_id: str
    expires_at: datetime
    revoked: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True, slots=True)
class Principal:
    """The authenticated caller behind a validated bearer token."""

    user_id: int
    email: str
    access_token_id: str
    scopes: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class IssuedTokens:
    """Result of a successful issuance, before it is shaped for the wire."""

    access_token: AccessToken
    refresh_token: RefreshToken
    jwt: str
    token_type: str = field(default="Bearer")


__all__ = ["AccessToken", "IssuedTokens", "OAuthClient", "Principal", "RefreshToken"]
