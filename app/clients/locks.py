"""
Exclusive, key-scoped locks with a bounded hold (lease) and a bounded wait.

``InMemoryLockManager`` serves single-process deployments; ``RedisLockManager``
shares locks between instances through redis-py's ``Lock``.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Tuple, TypeVar

from redis import Redis
from redis.exceptions import LockError, LockNotOwnedError

from app.core.errors import LockTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _LockManager:
    """Callable-style entry point shared by both managers; subclasses provide ``hold``."""

    def with_lock(
        self,
        key: str,
        hold_seconds: float,
        wait_seconds: float,
        fn: Callable[[], T],
    ) -> T:
        """Run ``fn`` while holding ``key``; raises ``LockTimeoutError`` on wait exhaustion."""
        with self.hold(key, hold_seconds=hold_seconds, wait_seconds=wait_seconds):
            return fn()


class InMemoryLockManager(_LockManager):
    """
    Per-key leases guarded by one condition variable.

    A lease that outlives ``hold_seconds`` is considered abandoned and may be
    taken over by a waiter, mirroring the expiry of a distributed lock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._condition = threading.Condition()
        self._leases: Dict[str, Tuple[str, float]] = {}

    @contextmanager
    def hold(self, key: str, *, hold_seconds: float, wait_seconds: float) -> Iterator[None]:
        owner = uuid.uuid4().hex
        deadline = self._clock() + wait_seconds
        with self._condition:
            while True:
                now = self._clock()
                lease = self._leases.get(key)
                if lease is None or lease[1] <= now:
                    self._leases[key] = (owner, now + hold_seconds)
                    break
                remaining = deadline - now
                if remaining <= 0:
                    raise LockTimeoutError(
                        f"Could not acquire lock '{key}' within {wait_seconds}s."
                    )
                self._condition.wait(timeout=min(remaining, lease[1] - now))
        try:
            yield
        finally:
            with self._condition:
                lease = self._leases.get(key)
                if lease is not None and lease[0] == owner:
                    del self._leases[key]
                else:
                    logger.warning("Lock '%s' lease expired before release", key)
                self._condition.notify_all()


class RedisLockManager(_LockManager):
    """Distributed variant backed by ``SET NX PX`` locks."""

    KEY_PREFIX = "lock:"

    def __init__(self, client: Redis) -> None:
        self._client = client

    @contextmanager
    def hold(self, key: str, *, hold_seconds: float, wait_seconds: float) -> Iterator[None]:
        lock = self._client.lock(
            f"{self.KEY_PREFIX}{key}",
            timeout=hold_seconds,
            blocking_timeout=wait_seconds,
        )
        try:
            acquired = lock.acquire()
        except LockError as exc:
            raise LockTimeoutError(f"Could not acquire lock '{key}': {exc}") from exc
        if not acquired:
            raise LockTimeoutError(
                f"Could not acquire lock '{key}' within {wait_seconds}s."
            )
        try:
            yield
        finally:
            try:
                lock.release()
            except LockNotOwnedError:
                logger.warning("Lock '%s' lease expired before release", key)


__all__ = ["InMemoryLockManager", "RedisLockManager"]
