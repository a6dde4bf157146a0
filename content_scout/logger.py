# === FILE: content_scout/logger.py ===
"""Logging setup for **ContentScout**.

Every module logs through a child of the ``ContentScout`` logger::

      from content_scout.logger import get_logger
      logger = get_logger("crawler")     # -> "ContentScout.crawler"

Nothing is printed until :func:`init_logging` (the CLI) or :func:`configure`
installs handlers; on import the project logger only gets a ``NullHandler``.
Console output always goes to stderr because stdout may be the sink of a
pipeline run (``-o -``).
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "ContentScout"

# rotation of --log-file
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUP_COUNT: Final[int] = 3

# "verbose" progress chatter and "success" summaries have no level of their own
LEVEL_ALIASES: Final[dict] = {"VERBOSE": logging.DEBUG, "SUCCESS": logging.INFO}

_LevelT = Union[int, str]


def resolve_level(level: _LevelT) -> int:
    """Числовой уровень из имени (``"debug"``, ``"VERBOSE"``) или числа."""
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name in LEVEL_ALIASES:
        return LEVEL_ALIASES[name]
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"unknown log level: {level!r}")
    return value


def _build_handlers(log_format: str, log_file: str | Path | None) -> List[logging.Handler]:
    formatter = logging.Formatter(log_format)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the project logger or its child ``ContentScout.<component>``."""
    if not component:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{component}")


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Level name, alias from :data:`LEVEL_ALIASES`, or number.
    log_file
        Rotating log file in addition to stderr; *None* means stderr only.
    log_format
        Format string shared by all handlers.
    replace_handlers
        Close and drop previously installed handlers first.
    """
    lg = get_logger()
    lg.setLevel(resolve_level(level))

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    for handler in _build_handlers(log_format, log_file):
        lg.addHandler(handler)

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """CLI entry: replace handlers and apply the given settings."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


logger: logging.Logger = get_logger()
logger.addHandler(logging.NullHandler())

__all__ = ["LEVEL_ALIASES", "logger", "get_logger", "resolve_level", "configure", "init_logging"]
