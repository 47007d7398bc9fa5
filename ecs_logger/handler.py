"""Bridge from stdlib ``logging`` call-sites to the ECS logger."""

from __future__ import annotations

import logging
import threading
from typing import Iterator

import structlog

from .errors import EmitError, SetLoggerError
from .levels import Level, install_trace_level
from .logger import Logger

# LogRecord attribute carrying a call-site resolved before the record was made
CALLSITE_ATTR = "ecs_callsite"

_log = structlog.get_logger(__name__)

# shared by every registry so the check-and-install is atomic process-wide
_registration_lock = threading.Lock()


class EcsHandler(logging.Handler):
    """``logging.Handler`` that forwards records to a ``Logger``.

    Errors raised while emitting propagate to the logging call-site instead of
    going through ``handleError``.
    """

    def __init__(self, logger: Logger) -> None:
        super().__init__(level=logging.NOTSET)
        self._ecs_logger = logger
        self._exception_formatter = logging.Formatter()

    @property
    def ecs_logger(self) -> Logger:
        return self._ecs_logger

    def handle(self, record: logging.LogRecord) -> logging.LogRecord | bool:
        # the Logger owns the sink lock; the Handler lock is not taken
        accepted = self.filter(record)
        if isinstance(accepted, logging.LogRecord):
            record = accepted
        if accepted:
            self.emit(record)
        return accepted

    def emit(self, record: logging.LogRecord) -> None:
        level = Level.from_logging(record.levelno)
        if not self._ecs_logger.enabled(level, record.name):
            return

        callsite = getattr(record, CALLSITE_ATTR, None) or {}
        self._ecs_logger.log(
            level,
            record.name,
            self._render_message(record),
            source_file=callsite.get("pathname", record.pathname) or None,
            source_line=callsite.get("lineno", record.lineno),
            module_path=callsite.get("module", record.module) or None,
        )

    def _render_message(self, record: logging.LogRecord) -> str:
        try:
            message = record.getMessage()
        except (TypeError, ValueError) as exc:
            raise EmitError("Unexpected message formatting error") from exc
        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self._exception_formatter.formatException(record.exc_info)
        if record.exc_text:
            message = f"{message}\n{record.exc_text}"
        if record.stack_info:
            message = f"{message}\n{self._exception_formatter.formatStack(record.stack_info)}"
        return message

    def flush(self) -> None:
        self._ecs_logger.flush()


def installed_handlers() -> Iterator[EcsHandler]:
    """Yield every ``EcsHandler`` attached to any stdlib logger in the process."""

    loggers = [logging.getLogger()]
    loggers.extend(
        item
        for item in list(logging.Logger.manager.loggerDict.values())
        if isinstance(item, logging.Logger)
    )
    for std_logger in loggers:
        for handler in list(std_logger.handlers):
            if isinstance(handler, EcsHandler):
                yield handler


class HandlerRegistry:
    """Installs the single ECS handler of the process on a stdlib logger (the root by default)."""

    def __init__(self, root: logging.Logger | None = None) -> None:
        self._root = root if root is not None else logging.getLogger()
        self._handler: EcsHandler | None = None

    @property
    def root(self) -> logging.Logger:
        return self._root

    @property
    def active(self) -> Logger | None:
        with _registration_lock:
            return self._handler.ecs_logger if self._handler is not None else None

    def register(self, logger: Logger) -> EcsHandler:
        """Make *logger* the active handler.

        Raises ``SetLoggerError`` when an ECS handler is already installed on
        any logger in the process, leaving the existing one untouched.
        """

        with _registration_lock:
            if self._handler is not None or next(installed_handlers(), None) is not None:
                raise SetLoggerError()

            install_trace_level()
            handler = EcsHandler(logger)
            min_level = logger.filter.min_level
            self._root.setLevel(min_level.to_logging())
            self._root.addHandler(handler)
            self._handler = handler

        _log.debug("ecs_logger_registered", root=self._root.name, min_level=min_level.name)
        return handler


_default_registry = HandlerRegistry()


def get_default_registry() -> HandlerRegistry:
    return _default_registry
