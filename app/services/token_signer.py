"""Symmetric JWT signing for issued access tokens."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable

import jwt

from app.core.config import SecuritySettings
from app.core.errors import ConfigurationError, InvalidTokenError


def load_signing_key(settings: SecuritySettings) -> bytes:
    """Read the signing key once, preferring the inline value over the key file."""
    if settings.signing_key:
        return settings.signing_key.encode("utf-8")

    key_path = Path(settings.signing_key_path or "")
    try:
        key = key_path.read_bytes().strip()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to read JWT signing key from {key_path}."
        ) from exc
    if not key:
        raise ConfigurationError(f"JWT signing key file {key_path} is empty.")
    return key


class TokenSigner:
    """Encode and verify access-token JWTs with a process-wide symmetric key."""

    REQUIRED_CLAIMS = ("iss", "aud", "jti", "iat", "nbf", "exp")

    def __init__(self, *, key: bytes, issuer: str, algorithm: str = "HS256") -> None:
        if not key:
            raise ValueError("JWT signing key must be provided.")
        self._key = key
        self._issuer = issuer
        self._algorithm = algorithm

    @property
    def issuer(self) -> str:
        return self._issuer

    def encode(
        self,
        *,
        token_id: str,
        audience: str,
        user_id: int,
        scopes: Iterable[str],
        issued_at: datetime,
        expires_at: datetime,
    ) -> str:
        """Build the signed bearer token for an access-token record."""
        claims: Dict[str, Any] = {
            "iss": self._issuer,
            "aud": audience,
            "jti": token_id,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": expires_at,
            "scopes": list(scopes),
            "user_id": user_id,
        }
        return jwt.encode(claims, self._key, algorithm=self._algorithm)

    def decode(self, token: str, *, audience: str) -> Dict[str, Any]:
        """Verify signature, time window, issuer and audience; return the claims."""
        try:
            return jwt.decode(
                token,
                self._key,
                algorithms=[self._algorithm],
                audience=audience,
                issuer=self._issuer,
                options={"require": list(self.REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Token validation failed: {exc}") from exc


__all__ = ["TokenSigner", "load_signing_key"]
