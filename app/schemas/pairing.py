"""Request and response shapes for the TV pairing flow."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.auth import TokenBundle

CODE_PATTERN = r"^\d{6}$"


class GenerateCodeRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")


class PairingCodeRequest(BaseModel):
    """Body of the poll and activate calls."""

    code: str = Field(..., pattern=CODE_PATTERN, description="Six-digit pairing code.")


class GeneratedCode(BaseModel):
    code: str
    expires_at: str


class PollResult(BaseModel):
    activated: bool
    expires_at: str
    token: Optional[TokenBundle] = Field(
        None, description="Present only once the code has been activated."
    )


class ActivationResult(BaseModel):
    activated: bool = True
    expires_at: str


__all__ = [
    "ActivationResult",
    "CODE_PATTERN",
    "GenerateCodeRequest",
    "GeneratedCode",
    "PairingCodeRequest",
    "PollResult",
]
