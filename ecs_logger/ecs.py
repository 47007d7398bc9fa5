"""Pydantic models describing an ECS log event.

The event follows the ECS logging spec:
https://github.com/elastic/ecs-logging/tree/main/spec
"""

from __future__ import annotations

import ntpath
from datetime import UTC, datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from .levels import Level

ECS_VERSION = "1.12.1"

_NANOS_PER_SECOND = 1_000_000_000


class _EventModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class LogOriginFile(_EventModel):
    line: int | None = Field(None, ge=0)
    name: str | None = None


class LogOriginPython(_EventModel):
    target: str
    module_path: str | None = None
    file_path: str | None = None


class LogOrigin(_EventModel):
    file: LogOriginFile
    python: LogOriginPython


class Event(_EventModel):
    timestamp: str = Field(..., alias="@timestamp")
    log_level: str = Field(..., alias="log.level")
    message: str
    ecs_version: str = Field(ECS_VERSION, alias="ecs.version")
    log_origin: LogOrigin = Field(..., alias="log.origin")

    def to_document(self) -> Dict[str, Any]:
        """Return the JSON-object form with absent optional fields omitted."""

        return self.model_dump(by_alias=True, exclude_none=True)


def format_timestamp(nanos: int) -> str:
    """Render nanoseconds since the Unix epoch as RFC3339 UTC with nine fraction digits."""

    seconds, fraction = divmod(nanos, _NANOS_PER_SECOND)
    moment = datetime.fromtimestamp(seconds, tz=UTC)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{fraction:09d}Z"


def file_name(path: str | None) -> str | None:
    """Return the final segment of *path*, accepting ``/`` and ``\\`` separators."""

    if not path:
        return None
    # ntpath splits on both separators regardless of the host platform
    return ntpath.basename(path.rstrip("/\\")) or None


def build_event(
    now: int,
    level: Level,
    message: str,
    target: str,
    source_file: str | None = None,
    source_line: int | None = None,
    module_path: str | None = None,
) -> Event:
    """Build the ECS event for one log call.

    *now* is the event instant in nanoseconds since the Unix epoch.
    """

    return Event(
        timestamp=format_timestamp(now),
        log_level=level.name,
        message=message,
        log_origin=LogOrigin(
            file=LogOriginFile(line=source_line, name=file_name(source_file)),
            python=LogOriginPython(
                target=target,
                module_path=module_path,
                file_path=source_file,
            ),
        ),
    )
