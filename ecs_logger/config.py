"""Pydantic-based configuration helpers for the ECS logger."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Iterable, List, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator


FILTER_ENV_VAR = "ECS_LOG"
WRITER_ENV_VAR = "ECS_LOG_WRITER"


class LoggerSettings(BaseModel):
    """Settings read from the environment when the logger is initialised."""

    log_filter: str | None = Field(None, alias=FILTER_ENV_VAR)
    writer: Literal["stderr", "stdout"] = Field("stderr", alias=WRITER_ENV_VAR)

    @field_validator("log_filter", mode="before")
    @classmethod
    def _blank_filter_is_unset(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = str(value).strip()
        return trimmed or None

    @field_validator("writer", mode="before")
    @classmethod
    def _normalise_writer(cls, value: str) -> str:
        return str(value).strip().lower()


def _format_invalid(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of invalid env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> LoggerSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return LoggerSettings.model_validate(os.environ)
    except ValidationError as exc:
        invalid = [str(error["loc"][0]) for error in exc.errors()]
        message = (
            "Invalid logger environment variables: "
            f"{_format_invalid(invalid)}"
        )
        raise RuntimeError(message) from exc
