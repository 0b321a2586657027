# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Logging for Parish Finance Pivot.

User-facing output (tables, summaries, "Wrote ..." lines) is printed by the
CLI. Diagnostics go through the ``logging`` module under the
``parish_pivot`` logger:

- skipped duplicate filenames and loaded files (info/debug),
- unclassifiable filenames and period keys loaded twice (warning),
- unreadable CSV files and balances side tables (warning).

Library modules only call :func:`get_logger`. The CLI calls
:func:`configure_logging` once, with the level from ``--log-level`` or
``[logging].level``; the ``PARISH_PIVOT_LOG_LEVEL`` environment variable
applies when neither is set.
"""

import logging
import os
import sys
from typing import IO, Optional, Union

PACKAGE_LOGGER = "parish_pivot"
LOG_LEVEL_ENV_VAR = "PARISH_PIVOT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_LEVEL_NAMES = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_CONFIGURED = False


def resolve_level(level: Union[int, str, None]) -> int:
    """Turn ``20``, ``"20"``, ``"info"`` or None into a numeric level.

    Unknown names and None fall back to the environment variable, then to
    ``logging.INFO``.
    """
    if isinstance(level, int):
        return level

    text = (level or "").strip().upper()
    if text.isdigit():
        return int(text)
    if text in _LEVEL_NAMES:
        return _LEVEL_NAMES[text]

    env_text = os.getenv(LOG_LEVEL_ENV_VAR, "").strip()
    if env_text and env_text.upper() != text:
        return resolve_level(env_text)
    return logging.INFO


def configure_logging(
    level: Union[int, str, None] = None,
    *,
    fmt: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Send package diagnostics to ``stream`` (stderr by default).

    Only the first call has an effect.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.handlers = [
        h for h in pkg_logger.handlers if not isinstance(h, logging.NullHandler)
    ]

    numeric_level = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    handler.setLevel(numeric_level)

    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(numeric_level)
    pkg_logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Logger for a package module; silent until :func:`configure_logging`."""
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
