"""Logging setup for the `aha_cli` logger namespace."""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

LOGGER_NAME = "aha_cli"

_SECRET_PATTERNS = [
    re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+"),
    re.compile(r"(token[\"'=:\s]+)[A-Za-z0-9._\-]{8,}", re.IGNORECASE),
]


def mask_secrets(message: str) -> str:
    for pattern in _SECRET_PATTERNS:
        message = pattern.sub(r"\1***", message)
    return message


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that masks bearer tokens and API keys in log messages."""

    def format(self, record: logging.LogRecord) -> str:
        return mask_secrets(super().format(record))


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    quiet: bool = False,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        verbose: Emit DEBUG records (skipped PRs, request URLs) instead of INFO.
        log_file: Also write every record to this file, truncated per run.
        quiet: Suppress the stderr handler, e.g. while the terminal UI owns the screen.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()
    logger.propagate = False

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_format = "%(levelname)s %(message)s" if verbose else "%(message)s"
        console_handler.setFormatter(SecretMaskingFormatter(console_format))
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            SecretMaskingFormatter("%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
