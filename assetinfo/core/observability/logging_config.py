"""
Logging configuration for the assetinfo CLI.

``configure_logging`` is called once per invocation by main.py, after the
config file has been read.  Modules only ever do
``logger = logging.getLogger(__name__)``.

The console level is resolved in this order, first match wins::

    --debug / --verbose / --quiet
    ASSETINFO_LOG_LEVEL
    log_level from assetinfo.yml
    WARNING

A log file is written when ASSETINFO_LOG_FILE is set.  Its level comes
from ASSETINFO_LOG_FILE_LEVEL and defaults to the console level.
"""

from __future__ import annotations

import logging
import os
import sys

LEVEL_ENV = "ASSETINFO_LOG_LEVEL"
FILE_ENV = "ASSETINFO_LOG_FILE"
FILE_LEVEL_ENV = "ASSETINFO_LOG_FILE_LEVEL"

DEFAULT_LEVEL = "WARNING"

# ── Formats ─────────────────────────────────────────────────────

# (highest level the format applies to, format, datefmt)
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = ("%(levelname)s: %(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _console_formatter(level: int) -> logging.Formatter:
    for ceiling, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= ceiling:
            return logging.Formatter(fmt, datefmt=datefmt)
    fmt, datefmt = _CONSOLE_DEFAULT
    return logging.Formatter(fmt, datefmt=datefmt)


# ── Level resolution ────────────────────────────────────────────


def parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant.

    Accepts the standard names plus ``TRACE`` (mapped to DEBUG) and
    ``WARN``; anything unknown falls back to WARNING.
    """
    if not level:
        return logging.WARNING
    name = level.upper()
    if name == "TRACE":
        return logging.DEBUG
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric


def resolve_level(flag_level: str | None, config_level: str | None) -> str:
    """Pick the console level name from CLI flag, environment and config."""
    return flag_level or os.environ.get(LEVEL_ENV) or config_level or DEFAULT_LEVEL


# ── Setup ───────────────────────────────────────────────────────


def setup_logging(
    level: str = DEFAULT_LEVEL,
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root handlers with a stderr handler and an optional file.

    Args:
        level: Console level name.
        log_file: Optional path to a log file.
        log_file_level: Level for the log file, defaults to ``level``.
    """
    console_level = parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(fh)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def configure_logging(flag_level: str | None = None, config_level: str | None = None) -> str:
    """Resolve the level and set up handlers from the environment.

    Returns:
        The console level name that was applied.
    """
    level = resolve_level(flag_level, config_level)
    setup_logging(
        level=level,
        log_file=os.environ.get(FILE_ENV),
        log_file_level=os.environ.get(FILE_LEVEL_ENV),
    )
    return level
