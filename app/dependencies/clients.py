"""
Factory functions to provide shared stores and services as FastAPI dependencies.

This module is the composition root: every collaborator is constructed here
once per process and injected explicitly.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from redis import Redis

from app.clients import (
    EphemeralCodeCache,
    InMemoryCache,
    InMemoryLockManager,
    RedisCache,
    RedisLockManager,
    SQLitePairingCodeStore,
    SQLiteTokenStore,
    SQLiteUserDirectory,
)
from app.core.config import AppSettings, get_settings
from app.services import (
    BearerTokenValidator,
    CodeGenerator,
    PasswordAuthenticator,
    TokenIssuer,
    TokenRefresher,
    TokenSigner,
    TvPairingService,
    load_signing_key,
)

logger = logging.getLogger(__name__)


@lru_cache()
def _settings() -> AppSettings:
    """Internal helper to cache settings for client factories."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return _settings()


@lru_cache()
def get_redis_client() -> Optional[Redis]:
    """Provide a shared Redis connection when ``REDIS_URL`` is configured."""
    settings = _settings()
    if not settings.redis_url:
        return None
    return Redis.from_url(settings.redis_url)


@lru_cache()
def get_user_directory() -> SQLiteUserDirectory:
    return SQLiteUserDirectory(_settings().database_path)


@lru_cache()
def get_pairing_code_store() -> SQLitePairingCodeStore:
    """Provide the durable pairing-code store."""
    return SQLitePairingCodeStore(_settings().database_path)


@lru_cache()
def get_token_store() -> SQLiteTokenStore:
    return SQLiteTokenStore(_settings().database_path)


@lru_cache()
def get_code_cache() -> EphemeralCodeCache:
    """Provide the pairing-code cache, Redis-backed when available."""
    redis_client = get_redis_client()
    if redis_client is None:
        logger.info("REDIS_URL not set; using in-process pairing-code cache")
        return EphemeralCodeCache(InMemoryCache())
    return EphemeralCodeCache(RedisCache(redis_client))


@lru_cache()
def get_lock_manager() -> InMemoryLockManager | RedisLockManager:
    redis_client = get_redis_client()
    if redis_client is None:
        return InMemoryLockManager()
    return RedisLockManager(redis_client)


@lru_cache()
def get_token_signer() -> TokenSigner:
    """Load the signing key once and share the signer."""
    settings = _settings()
    return TokenSigner(
        key=load_signing_key(settings.security),
        issuer=settings.issuer,
        algorithm=settings.security.algorithm,
    )


@lru_cache()
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(
        store=get_token_store(),
        signer=get_token_signer(),
        settings=_settings().tokens,
    )


@lru_cache()
def get_token_refresher() -> TokenRefresher:
    return TokenRefresher(store=get_token_store(), issuer=get_token_issuer())


@lru_cache()
def get_token_validator() -> BearerTokenValidator:
    return BearerTokenValidator(
        store=get_token_store(),
        users=get_user_directory(),
        signer=get_token_signer(),
        issuer=get_token_issuer(),
    )


@lru_cache()
def get_password_authenticator() -> PasswordAuthenticator:
    return PasswordAuthenticator(get_user_directory())


@lru_cache()
def get_code_generator() -> CodeGenerator:
    return CodeGenerator(
        get_pairing_code_store(),
        max_attempts=_settings().pairing.max_generation_attempts,
    )


@lru_cache()
def get_tv_pairing_service() -> TvPairingService:
    """Assemble the pairing service from the shared stores."""
    return TvPairingService(
        users=get_user_directory(),
        codes=get_pairing_code_store(),
        cache=get_code_cache(),
        locks=get_lock_manager(),
        generator=get_code_generator(),
        token_issuer=get_token_issuer(),
        settings=_settings().pairing,
    )


__all__ = [
    "get_app_settings",
    "get_code_cache",
    "get_code_generator",
    "get_lock_manager",
    "get_pairing_code_store",
    "get_password_authenticator",
    "get_redis_client",
    "get_token_issuer",
    "get_token_refresher",
    "get_token_signer",
    "get_token_store",
    "get_token_validator",
    "get_tv_pairing_service",
    "get_user_directory",
]
