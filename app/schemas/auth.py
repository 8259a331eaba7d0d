"""Schemas related to token issuance and rotation."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TokenBundle(BaseModel):
    """Credentials handed to a client after login, pairing or refresh."""

    access_token: str = Field(..., description="Signed JWT bearer token.")
    token_type: str = Field("Bearer", description="Always 'Bearer'.")
    expires_at: str = Field(..., description="Access token expiry, 'YYYY-MM-DD HH:MM:SS' UTC.")
    refresh_token: str = Field(..., description="Opaque single-use refresh token.")


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1)


class LoginUser(BaseModel):
    email: str


class LoginResult(BaseModel):
    user: LoginUser
    token: TokenBundle


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class RefreshResult(BaseModel):
    token: TokenBundle


__all__ = [
    "LoginRequest",
    "LoginResult",
    "LoginUser",
    "RefreshRequest",
    "RefreshResult",
    "TokenBundle",
]
