"""Expose dependency helpers for FastAPI routers."""

from .auth import MOBILE_SCOPE, get_mobile_principal
from .clients import (
    get_app_settings,
    get_code_cache,
    get_code_generator,
    get_lock_manager,
    get_pairing_code_store,
    get_password_authenticator,
    get_redis_client,
    get_token_issuer,
    get_token_refresher,
    get_token_signer,
    get_token_store,
    get_token_validator,
    get_tv_pairing_service,
    get_user_directory,
)

__all__ = [
    "MOBILE_SCOPE",
    "get_app_settings",
    "get_code_cache",
    "get_code_generator",
    "get_lock_manager",
    "get_mobile_principal",
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
