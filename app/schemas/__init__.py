"""Public schema exports."""

from .auth import (
    LoginRequest,
    LoginResult,
    LoginUser,
    RefreshRequest,
    RefreshResult,
    TokenBundle,
)
from .pairing import (
    ActivationResult,
    GenerateCodeRequest,
    GeneratedCode,
    PairingCodeRequest,
    PollResult,
)

__all__ = [
    "ActivationResult",
    "GenerateCodeRequest",
    "GeneratedCode",
    "LoginRequest",
    "LoginResult",
    "LoginUser",
    "PairingCodeRequest",
    "PollResult",
    "RefreshRequest",
    "RefreshResult",
    "TokenBundle",
]
