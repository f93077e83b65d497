"""Logging configuration helpers for deployctl."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER_NAME = "deployctl"
DEPLOYCTL_LOG_FILE_ENV = "DEPLOYCTL_LOG_FILE"


def _close_handlers(logger: logging.Logger) -> None:
    """Detach and close all handlers currently bound to the logger."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def configure_logging(*, log_file: Path, verbose: bool) -> logging.Logger:
    """Configure file logging for the deployctl CLI and return the logger.

    Logging is reconfigured on every CLI invocation and the target file is
    truncated so each command run has an isolated log history.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    _close_handlers(logger)

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    log_path = log_file.expanduser().resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger


def default_log_file() -> Path | None:
    """Return the log file named by the environment, if any."""
    env_value = os.environ.get(DEPLOYCTL_LOG_FILE_ENV)
    if env_value:
        return Path(env_value)
    return None


def get_logger() -> logging.Logger:
    """Return the deployctl logger (configured or with null handler)."""
    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger
