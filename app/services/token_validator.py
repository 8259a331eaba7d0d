"""Bearer-token verification for protected endpoints."""

from __future__ import annotations

from app.clients.token_store import SQLiteTokenStore
from app.clients.users import SQLiteUserDirectory
from app.core.errors import InvalidTokenError
from app.models import Principal
from app.services.token_issuer import TokenIssuer
from app.services.token_signer import TokenSigner


class BearerTokenValidator:
    """Checks the JWT, then the access-token record it points at."""

    def __init__(
        self,
        store: SQLiteTokenStore,
        users: SQLiteUserDirectory,
        signer: TokenSigner,
        issuer: TokenIssuer,
    ) -> None:
        self._store = store
        self._users = users
        self._signer = signer
        self._issuer = issuer

    def validate(self, bearer_token: str, *, required_scope: str) -> Principal:
        if not bearer_token:
            raise InvalidTokenError("No token provided.")

        client = self._issuer.get_client()
        claims = self._signer.decode(bearer_token, audience=client.id)

        access_token = self._store.find_access_token(str(claims["jti"]))
        if (
            access_token is None
            or access_token.revoked
            or not access_token.has_scope(required_scope)
            or required_scope not in (claims.get("scopes") or [])
        ):
            raise InvalidTokenError("Token invalid or revoked.")

        user_id = claims.get("user_id")
        if user_id != access_token.user_id:
            raise InvalidTokenError("Token invalid or revoked.")
        user = self._users.find_by_id(access_token.user_id)
        if user is None:
            raise InvalidTokenError("Token invalid or revoked.")

        return Principal(
            user_id=user.id,
            email=user.email,
            access_token_id=access_token.id,
            scopes=access_token.scopes,
        )


__all__ = ["BearerTokenValidator"]
