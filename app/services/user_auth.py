"""Password verification for the first-party login endpoint."""

from __future__ import annotations

from passlib.context import CryptContext

from app.clients.users import SQLiteUserDirectory
from app.core.errors import AuthenticationError
from app.models import User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


class PasswordAuthenticator:
    def __init__(self, users: SQLiteUserDirectory) -> None:
        self._users = users

    def authenticate(self, email: str, password: str) -> User:
        password_hash = self._users.get_password_hash(email)
        if password_hash is None or not pwd_context.verify(password, password_hash):
            raise AuthenticationError("Invalid credentials.")
        user = self._users.find_by_email(email)
        if user is None:  # pragma: no cover - deleted between the two reads
            raise AuthenticationError("Invalid credentials.")
        return user


__all__ = ["PasswordAuthenticator", "hash_password", "pwd_context"]
