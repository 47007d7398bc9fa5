"""Structlog configuration that routes structlog events to stdlib logging."""

from __future__ import annotations

from typing import Any, Dict

import structlog
from structlog.processors import CallsiteParameter

from .handler import CALLSITE_ATTR

_CALLSITE_KEYS = ("pathname", "lineno", "module")

_render_pairs = structlog.processors.KeyValueRenderer(
    sort_keys=True, key_order=["event"], drop_missing=True
)


def render_to_ecs_record(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Render the event into the record message and carry the call-site as a record attribute."""

    callsite = {key: event_dict.pop(key) for key in _CALLSITE_KEYS if key in event_dict}
    return {
        "msg": _render_pairs(logger, method_name, event_dict),
        "extra": {CALLSITE_ATTR: callsite},
    }


def configure_logging() -> None:
    """Configure structlog so its events reach the registered ECS handler.

    Each event dict is rendered into the record message; the structlog logger
    name becomes the ECS target. The call-site is resolved by structlog, so it
    is correct for stdlib loggers created before this call too.
    """

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.CallsiteParameterAdder(
                {
                    CallsiteParameter.PATHNAME,
                    CallsiteParameter.LINENO,
                    CallsiteParameter.MODULE,
                }
            ),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            render_to_ecs_record,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
