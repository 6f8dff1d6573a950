"""
Logging configuration — set up once by the CLI before resolving.

Modules log through ``logging.getLogger(__name__)`` and never touch
handlers themselves.

Console level, highest precedence first:
    -d  →  DEBUG
    -v  →  INFO
    PDS4GEN_LOG_LEVEL
    WARNING

A log file is added when PDS4GEN_LOG_FILE is set; its level comes from
PDS4GEN_LOG_FILE_LEVEL and falls back to the console level.

Nothing is ever logged to stdout: with no ``-o`` flag, stdout carries
the rendered label.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LOG_LEVEL = "PDS4GEN_LOG_LEVEL"
ENV_LOG_FILE = "PDS4GEN_LOG_FILE"
ENV_LOG_FILE_LEVEL = "PDS4GEN_LOG_FILE_LEVEL"

# (format, datefmt) for the console, picked by the console level
_CONSOLE_FORMATS = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    logging.WARNING: ("%(levelname)s: %(message)s", None),
}

_FILE_FORMAT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%Y-%m-%d %H:%M:%S")

# Chatty below WARNING and of no use to someone writing templates
_NOISY_LOGGERS = ("markupsafe", "jinja2", "yaml")


def resolve_level(verbose: bool = False, debug: bool = False) -> str:
    """Console level name from the -v/-d flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return os.environ.get(ENV_LOG_LEVEL, "WARNING")


def _console_handler(level: int) -> logging.Handler:
    bucket = logging.DEBUG if level <= logging.DEBUG else logging.INFO if level <= logging.INFO else logging.WARNING
    fmt, datefmt = _CONSOLE_FORMATS[bucket]
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    fmt, datefmt = _FILE_FORMAT
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Replace the root logger's handlers for this process.

    Args:
        level: Console level name.
        log_file: Also log to this file when given.
        log_file_level: Level for the file (default: ``level``).
        quiet_third_party: Hold template/YAML library loggers at
            WARNING unless the console is at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # root must let through whatever the most verbose handler wants
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown or empty names mean WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
