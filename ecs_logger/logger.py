"""The ECS logger: filter, format, merge extra fields, write one JSON line."""

from __future__ import annotations

import io
import json
import sys
import threading
import time
from typing import Any, Callable, Protocol, TextIO

from .config import LoggerSettings
from .ecs import Event, build_event
from .errors import EmitError
from .extra_fields import ExtraFieldsStore, get_default_store
from .filter import Filter
from .levels import Level

DEFAULT_FILTER = "error"


class BinarySink(Protocol):
    """Destination for serialized log lines."""

    def write(self, data: bytes) -> Any: ...

    def flush(self) -> Any: ...


class TextStreamSink:
    """Adapts a text stream that exposes no binary buffer (e.g. ``io.StringIO``)."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write(self, data: bytes) -> int:
        return self._stream.write(data.decode("utf-8"))

    def flush(self) -> None:
        self._stream.flush()


def stream_sink(stream: TextIO) -> BinarySink:
    """Return the binary side of *stream*, wrapping it when there is none."""

    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        return buffer
    return TextStreamSink(stream)


class Logger:
    """Formats accepted log calls as ECS JSON lines.

    The filter is read-only after construction. The sink is guarded by a
    single lock so lines written from different threads never interleave.
    """

    def __init__(
        self,
        filter: Filter,
        writer: BinarySink,
        *,
        extra_fields: ExtraFieldsStore | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self._filter = filter
        self._writer = writer
        self._lock = threading.Lock()
        self._extra_fields = extra_fields if extra_fields is not None else get_default_store()
        self._clock = clock

    @property
    def filter(self) -> Filter:
        return self._filter

    @property
    def extra_fields(self) -> ExtraFieldsStore:
        return self._extra_fields

    def enabled(self, level: Level, target: str) -> bool:
        return self._filter.accepts(level, target)

    def log(
        self,
        level: Level,
        target: str,
        message: str,
        source_file: str | None = None,
        source_line: int | None = None,
        module_path: str | None = None,
    ) -> None:
        """Emit one event if the filter accepts it.

        Raises ``EmitError`` when the event cannot be serialized or written;
        nothing reaches the sink in the serialization case.
        """

        if not self._filter.matches(level, target, message):
            return

        event = build_event(
            self._clock(),
            level,
            message,
            target,
            source_file=source_file,
            source_line=source_line,
            module_path=module_path,
        )
        self._write(self.format(event))

    def format(self, event: Event) -> bytes:
        """Return *event* with extra fields merged in as one newline-terminated JSON line."""

        try:
            document = self._extra_fields.merge_into(event.to_document())
            body = json.dumps(document, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
            return (body + "\n").encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EmitError("Unexpected serialization error") from exc

    def _write(self, line: bytes) -> None:
        with self._lock:
            try:
                self._writer.write(line)
                self._writer.flush()
            except (OSError, TypeError, ValueError) as exc:
                raise EmitError("Unexpected writer error") from exc

    def flush(self) -> None:
        """Writes are flushed as they happen; kept for handler symmetry."""


class Builder:
    """Fluent options for a ``Logger``; the default is ERROR only, written to stderr."""

    def __init__(self) -> None:
        self._filter: str | None = DEFAULT_FILTER
        self._writer: BinarySink | None = None
        self._extra_fields: ExtraFieldsStore | None = None
        self._clock: Callable[[], int] = time.time_ns

    @classmethod
    def from_settings(cls, settings: LoggerSettings) -> "Builder":
        """Seed a builder from ``LoggerSettings``."""

        builder = cls()
        if settings.log_filter is not None:
            builder.filter(settings.log_filter)
        if settings.writer == "stdout":
            builder.writer_stdout()
        else:
            builder.writer_stderr()
        return builder

    def filter(self, spec: str | None) -> "Builder":
        self._filter = spec
        return self

    def writer(self, writer: BinarySink | TextIO) -> "Builder":
        """Set the sink; text streams are written through their binary side."""

        if isinstance(writer, io.TextIOBase):
            writer = stream_sink(writer)
        self._writer = writer
        return self

    def writer_stdout(self) -> "Builder":
        return self.writer(stream_sink(sys.stdout))

    def writer_stderr(self) -> "Builder":
        return self.writer(stream_sink(sys.stderr))

    def extra_fields(self, store: ExtraFieldsStore) -> "Builder":
        self._extra_fields = store
        return self

    def clock(self, clock: Callable[[], int]) -> "Builder":
        self._clock = clock
        return self

    def build(self) -> Logger:
        writer = self._writer if self._writer is not None else stream_sink(sys.stderr)
        return Logger(
            Filter.parse(self._filter),
            writer,
            extra_fields=self._extra_fields,
            clock=self._clock,
        )
