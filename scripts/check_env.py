"""Pre-flight check for a TV pairing deployment.

Loads the settings from an ``.env`` file, reads the JWT signing key and looks
up the OAuth client that every issued token is bound to. Any of these failing
means logins and pairings would be rejected at runtime, so run it before
(re)starting the API::

    python -m scripts.check_env --env-file /opt/tv-pairing/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from app.clients import SQLiteTokenStore
from app.core.config import AppSettings, load_settings
from app.core.errors import ConfigurationError
from app.services.token_signer import load_signing_key

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_MISSING_CLIENT = 3
EXIT_RUNTIME_ERROR = 5


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate settings, the signing key and the OAuth client record."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the repo root).",
    )
    return parser


def _client_registered(settings: AppSettings) -> bool:
    database = Path(settings.database_path)
    if not database.exists():
        return False
    store = SQLiteTokenStore(str(database))
    return store.get_client_by_name(settings.tokens.client_name) is not None


def _describe(settings: AppSettings) -> str:
    backend = "redis" if settings.redis_url else "in-process"
    return (
        f"issuer={settings.issuer} database={settings.database_path} "
        f"cache/locks={backend} client={settings.tokens.client_name}"
    )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings = load_settings(env_file)
        load_signing_key(settings.security)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except ConfigurationError as exc:
        print(f"Signing key could not be loaded: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    if not _client_registered(settings):
        print(
            f"OAuth client '{settings.tokens.client_name}' is not registered in "
            f"{settings.database_path}. Run `python -m scripts.register_client`.",
            file=sys.stderr,
        )
        return EXIT_MISSING_CLIENT

    print(f"Configuration OK: {_describe(settings)}")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
