"""
TV pairing-code lifecycle: generate, poll and activate.

A code moves ``generated -> activated -> consumed``; either of the first two
states ends in ``expired`` once its expiry passes. The durable store is the
system of record. The cache is a replica that is always re-validated against
its recorded expiry before being trusted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from app.clients.code_cache import EphemeralCodeCache
from app.clients.locks import InMemoryLockManager, RedisLockManager
from app.clients.pairing_codes import SQLitePairingCodeStore
from app.clients.users import SQLiteUserDirectory
from app.core.config import PairingSettings
from app.core.errors import (
    CodeCollisionError,
    CodeGenerationError,
    InvalidOwnerError,
    NotFoundError,
)
from app.models import PairingCode
from app.schemas import ActivationResult, GeneratedCode, PollResult
from app.services.code_generator import CodeGenerator
from app.services.token_issuer import TokenIssuer
from app.utils.time import Clock, format_timestamp, utcnow

logger = logging.getLogger(__name__)

TV_SCOPES = ("tv",)


class TvPairingService:
    """Orchestrates the two code stores, the activation lock and token issuance."""

    def __init__(
        self,
        *,
        users: SQLiteUserDirectory,
        codes: SQLitePairingCodeStore,
        cache: EphemeralCodeCache,
        locks: InMemoryLockManager | RedisLockManager,
        generator: CodeGenerator,
        token_issuer: TokenIssuer,
        settings: PairingSettings,
        clock: Clock = utcnow,
    ) -> None:
        self._users = users
        self._codes = codes
        self._cache = cache
        self._locks = locks
        self._generator = generator
        self._issuer = token_issuer
        self._settings = settings
        self._clock = clock

    def generate(self, email: str) -> GeneratedCode:
        """Bind a fresh code to the user, replacing any code they already hold."""
        user = self._users.find_by_email(email)
        if user is None:
            raise NotFoundError("No user registered with that email.")

        now = self._clock().replace(microsecond=0)
        pairing_code, replaced = self._store_new_code(user.id, now)
        if replaced is not None and replaced.code != pairing_code.code:
            self._cache.delete(replaced.code)
        self._cache.put(pairing_code)

        logger.info("Generated pairing code for user %s", user.id)
        return GeneratedCode(
            code=pairing_code.code,
            expires_at=format_timestamp(pairing_code.expires_at),
        )

    def _store_new_code(
        self, user_id: int, now: datetime
    ) -> tuple[PairingCode, Optional[PairingCode]]:
        """Persist a freshly drawn code, redrawing when another user claims it first."""
        attempts = self._settings.max_generation_attempts
        for _ in range(attempts):
            pairing_code = PairingCode(
                code=self._generator.generate(now=now),
                user_id=user_id,
                activated=False,
                expires_at=now + timedelta(minutes=self._settings.code_expiry_minutes),
            )
            try:
                return pairing_code, self._codes.upsert_for_user(pairing_code, now=now)
            except CodeCollisionError:
                logger.debug("Pairing code taken concurrently; drawing another")
        raise CodeGenerationError(
            f"No free pairing code could be stored after {attempts} attempts."
        )

    def poll(self, code: str) -> PollResult:
        """
        Report activation state; once activated, hand out tokens exactly once.

        The durable delete is the claim on the code. When a concurrent poll
        claimed it first, the pair minted here is revoked and the code is
        reported as gone.
        """
        pairing_code = self._lookup(code)
        expires_at = format_timestamp(pairing_code.expires_at)

        if not pairing_code.activated:
            return PollResult(activated=False, expires_at=expires_at)

        issued = self._issuer.issue_tokens(pairing_code.user_id, TV_SCOPES)
        claimed = self._codes.consume(code, user_id=pairing_code.user_id)
        self._cache.delete(code)
        if not claimed:
            self._issuer.revoke(issued.access_token.id)
            raise NotFoundError("Code not found or expired.")

        logger.info("Pairing code consumed by user %s", pairing_code.user_id)
        return PollResult(
            activated=True,
            expires_at=expires_at,
            token=self._issuer.to_bundle(issued),
        )

    def activate(self, code: str, requesting_user_id: int) -> ActivationResult:
        """Mark the code as approved by its owner; repeat calls are harmless."""
        pairing_code = self._lookup(code)
        if pairing_code.user_id != requesting_user_id:
            raise InvalidOwnerError("Code does not belong to the authenticated user.")

        activated = self._locks.with_lock(
            EphemeralCodeCache.key_for(code),
            self._settings.lock_hold_seconds,
            self._settings.lock_wait_seconds,
            lambda: self._mark_activated(code, requesting_user_id),
        )
        return ActivationResult(
            activated=True,
            expires_at=format_timestamp(activated.expires_at),
        )

    def _mark_activated(self, code: str, user_id: int) -> PairingCode:
        stored = self._codes.mark_activated(code, user_id=user_id, now=self._clock())
        if stored is None:
            raise NotFoundError("Code not found or expired.")
        self._cache.put(stored)
        logger.info("Pairing code activated by user %s", user_id)
        return stored

    def _lookup(self, code: str) -> PairingCode:
        cached = self._cache.get(code)
        if cached is not None:
            return cached

        stored: Optional[PairingCode] = self._codes.find_valid(code, now=self._clock())
        if stored is None:
            raise NotFoundError("Code not found or expired.")
        # An activation may have cached newer state since the durable read.
        self._cache.put_if_absent(stored)
        return stored


__all__ = ["TV_SCOPES", "TvPairingService"]
