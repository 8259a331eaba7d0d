"""Domain record exports."""

from .oauth import AccessToken, IssuedTokens, OAuthClient, Principal, RefreshToken
from .pairing import PairingCode, User

__all__ = [
    "AccessToken",
    "IssuedTokens",
    "OAuthClient",
    "PairingCode",
    "Principal",
    "RefreshToken",
    "User",
]
