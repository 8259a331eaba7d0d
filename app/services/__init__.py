"""Service layer exports."""

from .code_generator import CodeGenerator
from .token_issuer import TokenIssuer
from .token_refresher import TokenRefresher
from .token_signer import TokenSigner, load_signing_key
from .token_validator import BearerTokenValidator
from .tv_pairing import TV_SCOPES, TvPairingService
from .user_auth import PasswordAuthenticator, hash_password

__all__ = [
    "BearerTokenValidator",
    "CodeGenerator",
    "PasswordAuthenticator",
    "TV_SCOPES",
    "TokenIssuer",
    "TokenRefresher",
    "TokenSigner",
    "TvPairingService",
    "hash_password",
    "load_signing_key",
]
