"""
Minting of access/refresh token pairs for the trusted first-party client.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Iterable, Optional

from app.clients.token_store import SQLiteTokenStore
from app.core.config import TokenSettings
from app.core.errors import ConfigurationError
from app.models import AccessToken, IssuedTokens, OAuthClient, RefreshToken
from app.schemas import TokenBundle
from app.services.token_signer import TokenSigner
from app.utils.time import Clock, format_timestamp, utcnow

logger = logging.getLogger(__name__)


class TokenIssuer:
    """Creates the token records and wraps the access token as a signed JWT."""

    ACCESS_TOKEN_BYTES = 32  # 256-bit id
    REFRESH_TOKEN_BYTES = 40  # 320-bit id

    def __init__(
        self,
        store: SQLiteTokenStore,
        signer: TokenSigner,
        settings: TokenSettings,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._signer = signer
        self._settings = settings
        self._clock = clock

    def get_client(self) -> OAuthClient:
        """Resolve the single registered client; its absence is a deployment fault."""
        client = self._store.get_client_by_name(self._settings.client_name)
        if client is None:
            raise ConfigurationError(
                "OAuth client not found. Please check client configuration."
            )
        return client

    def issue(self, user_id: int, scopes: Optional[Iterable[str]] = None) -> TokenBundle:
        """Issue a fresh token pair and shape it for the wire."""
        return self.to_bundle(self.issue_tokens(user_id, scopes))

    def issue_tokens(
        self, user_id: int, scopes: Optional[Iterable[str]] = None
    ) -> IssuedTokens:
        client = self.get_client()
        granted = tuple(scopes) if scopes is not None else tuple(self._settings.default_scopes)
        now = self._clock().replace(microsecond=0)

        access_token = AccessToken(
            id=secrets.token_hex(self.ACCESS_TOKEN_BYTES),
            user_id=user_id,
            client_id=client.id,
            scopes=granted,
            revoked=False,
            created_at=now,
            expires_at=now + timedelta(days=self._settings.access_token_days),
        )
        refresh_token = RefreshToken(
            id=secrets.token_hex(self.REFRESH_TOKEN_BYTES),
            access_token_id=access_token.id,
            revoked=False,
            expires_at=now + timedelta(days=self._settings.refresh_token_days),
        )
        self._store.save_token_pair(access_token, refresh_token)

        encoded = self._signer.encode(
            token_id=access_token.id,
            audience=client.id,
            user_id=user_id,
            scopes=granted,
            issued_at=now,
            expires_at=access_token.expires_at,
        )
        logger.info("Issued access token for user %s with scopes %s", user_id, list(granted))
        return IssuedTokens(access_token=access_token, refresh_token=refresh_token, jwt=encoded)

    def revoke(self, access_token_id: str) -> None:
        """Withdraw a pair that was minted but never handed out."""
        self._store.revoke_chain(access_token_id)

    @staticmethod
    def to_bundle(issued: IssuedTokens) -> TokenBundle:
        return TokenBundle(
            access_token=issued.jwt,
            token_type=issued.token_type,
            expires_at=format_timestamp(issued.access_token.expires_at),
            refresh_token=issued.refresh_token.id,
        )


__all__ = ["TokenIssuer"]
