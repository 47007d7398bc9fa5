"""Severity levels and their mapping onto stdlib ``logging`` numbers."""

from __future__ import annotations

import logging
from enum import IntEnum

TRACE_LEVEL_NUM = 5


class Level(IntEnum):
    """Ordered severity; a larger value is more severe.

    ``OFF`` only appears in filter directives and is never attached to an
    event.
    """

    TRACE = TRACE_LEVEL_NUM
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    OFF = logging.CRITICAL + 10

    @classmethod
    def parse(cls, value: str) -> "Level":
        """Return the level named by *value* (case-insensitive).

        Raises ``ValueError`` for unknown names.
        """

        candidate = (value or "").strip().upper()
        alias = _ALIASES.get(candidate, candidate)
        try:
            return cls[alias]
        except KeyError:
            raise ValueError(f"Unknown log level '{value}'") from None

    @classmethod
    def from_logging(cls, levelno: int) -> "Level":
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.TRACE

    def to_logging(self) -> int:
        return int(self)


_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "ERROR",
    "FATAL": "ERROR",
}


def install_trace_level() -> None:
    """Make ``TRACE`` a known level name for stdlib ``logging``."""

    if logging.getLevelName(TRACE_LEVEL_NUM) != "TRACE":
        logging.addLevelName(TRACE_LEVEL_NUM, "TRACE")
