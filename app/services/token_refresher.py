"""Single-use refresh-token rotation."""

from __future__ import annotations

import logging

from app.clients.token_store import SQLiteTokenStore
from app.core.errors import InvalidTokenError
from app.schemas import TokenBundle
from app.services.token_issuer import TokenIssuer
from app.utils.time import Clock, utcnow

logger = logging.getLogger(__name__)


class TokenRefresher:
    """Revokes the presented token chain, then issues a pair with the same scopes."""

    def __init__(
        self, store: SQLiteTokenStore, issuer: TokenIssuer, clock: Clock = utcnow
    ) -> None:
        self._store = store
        self._issuer = issuer
        self._clock = clock

    def refresh(self, refresh_token_id: str) -> TokenBundle:
        refresh_token = self._store.find_refresh_token(refresh_token_id)
        if (
            refresh_token is None
            or refresh_token.revoked
            or refresh_token.is_expired(self._clock())
        ):
            raise InvalidTokenError("Refresh token not found or is expired.")

        access_token = self._store.find_access_token(refresh_token.access_token_id)
        if access_token is None:
            raise InvalidTokenError("Associated access token not found.")

        # Fail on a missing client before the old chain is revoked.
        self._issuer.get_client()

        claimed = self._store.revoke_chain(
            access_token.id, claim_refresh_token_id=refresh_token.id
        )
        if not claimed:
            # Another request rotated this refresh token between lookup and revoke.
            raise InvalidTokenError("Refresh token not found or is expired.")

        logger.info("Rotated token chain for user %s", access_token.user_id)
        return self._issuer.issue(access_token.user_id, access_token.scopes)


__all__ = ["TokenRefresher"]
