"""
Domain records for TV pairing codes and the users they bind to.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict


@dataclass(frozen=True, slots=True)
class User:
    """Identity resolved from the user directory."""

    id: int
    email: str


@dataclass(frozen=True, slots=True)
class PairingCode:
    """A one-time code binding a TV session to a user."""

    code: str
    user_id: int
    expires_at: datetime
    activated: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def to_cache_payload(self) -> Dict[str, Any]:
        """Cache representation: expiry is stored as a unix timestamp."""
        return {
            "user_id": self.user_id,
            "activated": self.activated,
            "expires_at": int(self.expires_at.timestamp()),
        }

    @classmethod
    def from_cache_payload(cls, code: str, payload: Dict[str, Any]) -> "PairingCode":
        return cls(
            code=code,
            user_id=int(payload["user_id"]),
            activated=bool(payload["activated"]),
            expires_at=datetime.fromtimestamp(int(payload["expires_at"]), tz=timezone.utc),
        )


__all__ = ["PairingCode", "User"]
