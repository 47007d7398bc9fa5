"""A logger compatible with Elastic Common Schema (ECS) logging."""

from __future__ import annotations

from .config import LoggerSettings, get_settings
from .ecs import ECS_VERSION, Event, build_event
from .errors import (
    EcsLoggerError,
    EmitError,
    ExtraFieldsError,
    InvalidJsonError,
    NotObjectError,
    SetLoggerError,
)
from .extra_fields import ExtraFieldsStore, clear_extra_fields, set_extra_fields
from .filter import Filter
from .handler import EcsHandler, HandlerRegistry, get_default_registry
from .levels import Level
from .logger import Builder, Logger
from .logging_config import configure_logging


def init(registry: HandlerRegistry | None = None) -> Logger:
    """Build a logger from the environment and register it process-wide.

    Raises ``SetLoggerError`` when a logger is already registered.
    """

    logger = Builder.from_settings(get_settings()).build()
    (registry or get_default_registry()).register(logger)
    return logger


def try_init(registry: HandlerRegistry | None = None) -> bool:
    """Like ``init`` but return False instead of raising when already registered."""

    try:
        init(registry)
    except SetLoggerError:
        return False
    return True


__all__ = [
    "ECS_VERSION",
    "Builder",
    "EcsHandler",
    "EcsLoggerError",
    "EmitError",
    "Event",
    "ExtraFieldsError",
    "ExtraFieldsStore",
    "Filter",
    "HandlerRegistry",
    "InvalidJsonError",
    "Level",
    "Logger",
    "LoggerSettings",
    "NotObjectError",
    "SetLoggerError",
    "build_event",
    "clear_extra_fields",
    "configure_logging",
    "get_default_registry",
    "get_settings",
    "init",
    "set_extra_fields",
    "try_init",
]
