"""Expose storage, cache and lock backends."""

from .code_cache import EphemeralCodeCache, InMemoryCache, RedisCache
from .locks import InMemoryLockManager, RedisLockManager
from .pairing_codes import SQLitePairingCodeStore
from .sqlite_store import SQLiteStore
from .token_store import SQLiteTokenStore
from .users import SQLiteUserDirectory

__all__ = [
    "EphemeralCodeCache",
    "InMemoryCache",
    "InMemoryLockManager",
    "RedisCache",
    "RedisLockManager",
    "SQLitePairingCodeStore",
    "SQLiteStore",
    "SQLiteTokenStore",
    "SQLiteUserDirectory",
]
