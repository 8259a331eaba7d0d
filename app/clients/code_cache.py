"""
Ephemeral replicas of pairing-code state.

Two interchangeable key/value backends (in-process and Redis) expose
``get``/``put``/``delete`` with an absolute expiry; ``EphemeralCodeCache``
layers the ``tv_code:`` key scheme and expiry re-validation on top.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from redis import Redis

from app.models import PairingCode
from app.utils.time import Clock, utcnow

logger = logging.getLogger(__name__)


class InMemoryCache:
    """Thread-safe dictionary cache honouring absolute expiry instants."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[datetime, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, payload = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
        return json.loads(payload)

    def put(self, key: str, value: Dict[str, Any], *, expires_at: datetime) -> None:
        if self._clock() >= expires_at:
            self.delete(key)
            return
        with self._lock:
            self._entries[key] = (expires_at, json.dumps(value))

    def put_if_absent(
        self, key: str, value: Dict[str, Any], *, expires_at: datetime
    ) -> bool:
        now = self._clock()
        if now >= expires_at:
            return False
        with self._lock:
            current = self._entries.get(key)
            if current is not None and now < current[0]:
                return False
            self._entries[key] = (expires_at, json.dumps(value))
        return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)


class RedisCache:
    """Redis-backed cache; expiry is delegated to ``SET ... EXAT``."""

    def __init__(self, client: Redis, clock: Clock = utcnow) -> None:
        self._client = client
        self._clock = clock

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._client.get(key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    def put(self, key: str, value: Dict[str, Any], *, expires_at: datetime) -> None:
        if self._clock() >= expires_at:
            self.delete(key)
            return
        self._client.set(key, json.dumps(value), exat=int(expires_at.timestamp()))

    def put_if_absent(
        self, key: str, value: Dict[str, Any], *, expires_at: datetime
    ) -> bool:
        if self._clock() >= expires_at:
            return False
        stored = self._client.set(
            key, json.dumps(value), nx=True, exat=int(expires_at.timestamp())
        )
        return bool(stored)

    def delete(self, key: str) -> None:
        self._client.delete(key)


class EphemeralCodeCache:
    """Pairing codes keyed as ``tv_code:<code>`` with TTL equal to code expiry."""

    KEY_PREFIX = "tv_code:"

    def __init__(self, backend: InMemoryCache | RedisCache, clock: Clock = utcnow) -> None:
        self._backend = backend
        self._clock = clock

    @classmethod
    def key_for(cls, code: str) -> str:
        return f"{cls.KEY_PREFIX}{code}"

    def get(self, code: str) -> Optional[PairingCode]:
        """Return the cached code, ignoring entries whose recorded expiry has passed."""
        payload = self._backend.get(self.key_for(code))
        if payload is None:
            return None
        try:
            pairing_code = PairingCode.from_cache_payload(code, payload)
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed cache entry for pairing code")
            self.delete(code)
            return None
        if pairing_code.is_expired(self._clock()):
            return None
        return pairing_code

    def put(self, pairing_code: PairingCode) -> None:
        self._backend.put(
            self.key_for(pairing_code.code),
            pairing_code.to_cache_payload(),
            expires_at=pairing_code.expires_at,
        )

    def put_if_absent(self, pairing_code: PairingCode) -> bool:
        """Repopulate an empty slot; never overwrites a newer entry."""
        return self._backend.put_if_absent(
            self.key_for(pairing_code.code),
            pairing_code.to_cache_payload(),
            expires_at=pairing_code.expires_at,
        )

    def delete(self, code: str) -> None:
        self._backend.delete(self.key_for(code))


__all__ = ["EphemeralCodeCache", "InMemoryCache", "RedisCache"]
