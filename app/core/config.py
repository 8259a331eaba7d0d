"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the pairing services and
the maintenance scripts share a consistent configuration surface.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

from pydantic import AnyHttpUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class _EnvSettings(BaseSettings):
    """Shared loading rules: environment first, then the local ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class SecuritySettings(_EnvSettings):
    """Signing material for issued access tokens."""

    signing_key: Optional[str] = Field(
        None,
        validation_alias="JWT_SIGNING_KEY",
        description="Inline symmetric key used to sign access tokens.",
    )
    signing_key_path: Optional[str] = Field(
        None,
        validation_alias="JWT_SIGNING_KEY_PATH",
        description="File holding the symmetric signing key.",
    )
    algorithm: str = Field("HS256", validation_alias="JWT_ALGORITHM")

    @model_validator(mode="after")
    def _require_key_source(self) -> "SecuritySettings":
        if not self.signing_key and not self.signing_key_path:
            raise ValueError(
                "Either JWT_SIGNING_KEY or JWT_SIGNING_KEY_PATH must be configured."
            )
        return self


class PairingSettings(_EnvSettings):
    """Pairing-code lifecycle tuning."""

    code_expiry_minutes: int = Field(10, validation_alias="TV_CODE_EXPIRY_MINUTES")
    lock_hold_seconds: float = Field(10.0, validation_alias="TV_CODE_LOCK_HOLD_SECONDS")
    lock_wait_seconds: float = Field(5.0, validation_alias="TV_CODE_LOCK_WAIT_SECONDS")
    max_generation_attempts: int = Field(
        20,
        validation_alias="TV_CODE_MAX_ATTEMPTS",
        description="Upper bound on collision retries when generating a code.",
    )


class TokenSettings(_EnvSettings):
    """Access/refresh token lifetimes and the trusted client."""

    access_token_days: int = Field(15, validation_alias="ACCESS_TOKEN_EXPIRY_DAYS")
    refresh_token_days: int = Field(30, validation_alias="REFRESH_TOKEN_EXPIRY_DAYS")
    client_name: str = Field("cross-authentication", validation_alias="OAUTH_CLIENT_NAME")
    default_scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("mobile",),
        validation_alias="OAUTH_DEFAULT_SCOPES",
    )

    @field_validator("default_scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class AppSettings(_EnvSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    app_url: AnyHttpUrl = Field(
        "http://localhost:8000",
        validation_alias="APP_URL",
        description="Public base URL, used as the issuer of access tokens.",
    )
    database_path: str = Field("data/pairing.db", validation_alias="DATABASE_PATH")
    redis_url: Optional[str] = Field(
        None,
        validation_alias="REDIS_URL",
        description=(
            "When set, the code cache and activation locks live in Redis so "
            "several instances can share them."
        ),
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    pairing: PairingSettings = Field(default_factory=PairingSettings)
    tokens: TokenSettings = Field(default_factory=TokenSettings)

    @property
    def issuer(self) -> str:
        return str(self.app_url).rstrip("/")


def load_settings(env_file: str | Path) -> AppSettings:
    """Build settings from an explicit env file, including the nested sections."""
    return AppSettings(  # type: ignore[call-arg]
        _env_file=env_file,
        security=SecuritySettings(_env_file=env_file),  # type: ignore[call-arg]
        pairing=PairingSettings(_env_file=env_file),  # type: ignore[call-arg]
        tokens=TokenSettings(_env_file=env_file),  # type: ignore[call-arg]
    )


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "PairingSettings",
    "SecuritySettings",
    "TokenSettings",
    "get_settings",
    "load_settings",
]
