"""Exception types raised by the ECS logger."""

from __future__ import annotations


class EcsLoggerError(Exception):
    """Base class for every error raised by this package."""


class ExtraFieldsError(EcsLoggerError, ValueError):
    """Extra fields could not be stored; the previous document is kept."""


class InvalidJsonError(ExtraFieldsError):
    def __init__(self, message: str = "the data cannot be converted into JSON") -> None:
        super().__init__(message)


class NotObjectError(ExtraFieldsError):
    def __init__(self, message: str = "the data cannot be converted into a JSON object") -> None:
        super().__init__(message)


class SetLoggerError(EcsLoggerError):
    """A logger has already been registered as the process-wide handler."""

    def __init__(self, message: str = "an ECS logger is already registered") -> None:
        super().__init__(message)


class EmitError(EcsLoggerError):
    """An accepted event could not be serialized or written to the sink."""
