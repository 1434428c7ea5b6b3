"""Logging helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
LOGGER_NAME = "emailable_verifier"


def configure_logging(verbose: bool = False) -> None:
    """Configure application logging once for CLI usage.

    urllib3 connection chatter stays at WARNING unless verbose output is requested.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_logger() -> logging.Logger:
    """Return the package logger shared by the client, batching and CLI."""
    return logging.getLogger(LOGGER_NAME)
