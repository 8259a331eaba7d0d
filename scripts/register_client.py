"""Seed the trusted OAuth client and, optionally, a user allowed to pair TVs.

Token issuance fails with a configuration error until the client exists, so
run this once per environment::

    python -m scripts.register_client
    python -m scripts.register_client --email user@example.com --password s3cret
"""

from __future__ import annotations

import argparse
import sqlite3
import sys

from app.clients import SQLiteTokenStore, SQLiteUserDirectory
from app.core.config import get_settings
from app.services.user_auth import hash_password

EXIT_OK = 0
EXIT_USAGE_ERROR = 2
EXIT_CONFLICT = 4


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Register the first-party OAuth client and optionally seed a user."
    )
    parser.add_argument(
        "--database",
        default=None,
        help="SQLite database path (default: DATABASE_PATH from settings).",
    )
    parser.add_argument(
        "--client-name",
        default=None,
        help="Client name (default: OAUTH_CLIENT_NAME from settings).",
    )
    parser.add_argument("--email", help="Email of a user to create.")
    parser.add_argument("--password", help="Password for the user being created.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if bool(args.email) != bool(args.password):
        print("--email and --password must be given together.", file=sys.stderr)
        return EXIT_USAGE_ERROR

    settings = get_settings()
    database = args.database or settings.database_path
    client_name = args.client_name or settings.tokens.client_name

    client = SQLiteTokenStore(database).register_client(client_name)
    print(f"OAuth client '{client.name}' ready (id={client.id})")

    if args.email:
        users = SQLiteUserDirectory(database)
        try:
            user = users.add_user(email=args.email, password_hash=hash_password(args.password))
        except sqlite3.IntegrityError:
            print(f"User {args.email} already exists.", file=sys.stderr)
            return EXIT_CONFLICT
        print(f"Created user {user.email} (id={user.id})")

    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
