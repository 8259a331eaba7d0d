"""Random six-digit pairing codes that avoid every currently valid code."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Callable, Protocol

from app.core.errors import CodeGenerationError

logger = logging.getLogger(__name__)


class _CodeLookup(Protocol):
    def is_code_in_use(self, code: str, *, now: datetime) -> bool: ...


class CodeGenerator:
    """Draws codes from a CSPRNG; retries on collision up to ``max_attempts``."""

    CODE_LENGTH = 6

    def __init__(
        self,
        store: _CodeLookup,
        *,
        max_attempts: int = 20,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self._store = store
        self._max_attempts = max_attempts
        self._randbelow = randbelow

    def generate(self, *, now: datetime) -> str:
        for attempt in range(1, self._max_attempts + 1):
            code = str(self._randbelow(10**self.CODE_LENGTH)).zfill(self.CODE_LENGTH)
            if not self._store.is_code_in_use(code, now=now):
                return code
            logger.debug("Pairing code collision on attempt %s", attempt)
        raise CodeGenerationError(
            f"No free pairing code found after {self._max_attempts} attempts."
        )


__all__ = ["CodeGenerator"]
