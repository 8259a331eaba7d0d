"""
Logging setup for the API process and the maintenance scripts.

Failed authentication and pairing attempts go to a dedicated ``auth`` logger
so operators can route them separately from application logs.
"""

import logging
import sys

AUTH_LOGGER_NAME = "app.auth"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once per process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def get_auth_logger() -> logging.Logger:
    return logging.getLogger(AUTH_LOGGER_NAME)


__all__ = ["AUTH_LOGGER_NAME", "configure_logging", "get_auth_logger"]
