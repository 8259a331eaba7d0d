"""Typed failures raised by the pairing and token services."""

from __future__ import annotations


class PairingAuthError(Exception):
    """Base class for every business-rule failure raised by the core."""


class NotFoundError(PairingAuthError):
    """Unknown email, code or token, or a code that expired or was consumed."""


class InvalidOwnerError(PairingAuthError):
    """A pairing code was activated by a user it does not belong to."""


class InvalidTokenError(PairingAuthError):
    """A refresh or bearer token is unknown, revoked, expired or malformed."""


class ConfigurationError(PairingAuthError):
    """The deployment is missing required configuration (e.g. the OAuth client)."""


class LockTimeoutError(PairingAuthError):
    """An exclusive lock could not be acquired within its wait budget."""


class AuthenticationError(PairingAuthError):
    """Login credentials did not match a known user."""


class CodeGenerationError(PairingAuthError):
    """No free pairing code was found within the retry bound."""


class CodeCollisionError(CodeGenerationError):
    """The drawn code was taken by another user before it could be stored."""


__all__ = [
    "AuthenticationError",
    "CodeCollisionError",
    "CodeGenerationError",
    "ConfigurationError",
    "InvalidOwnerError",
    "InvalidTokenError",
    "LockTimeoutError",
    "NotFoundError",
    "PairingAuthError",
]
