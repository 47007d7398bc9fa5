"""Process-wide extra fields deep-merged into every emitted event."""

from __future__ import annotations

import copy
import json
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from pydantic_core import PydanticSerializationError, to_json

from .errors import InvalidJsonError, NotObjectError

JsonMap = Dict[str, Any]


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Waiting writers block new readers so a steady stream of log calls cannot
    starve ``set``/``clear``.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def to_json_object(value: Any) -> JsonMap:
    """Serialize *value* and return it as a fresh JSON object.

    Raises ``InvalidJsonError`` when *value* cannot be serialized and
    ``NotObjectError`` when it serializes to anything but an object.
    """

    try:
        raw = to_json(value, inf_nan_mode="null")
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise InvalidJsonError() from exc

    document = json.loads(raw)
    if not isinstance(document, dict):
        raise NotObjectError()
    return document


def deep_merge(base: JsonMap, overlay: JsonMap) -> JsonMap:
    """Deep merge *overlay* into *base* and return *base*.

    Nested objects present on both sides are merged key by key; any other
    collision is resolved by replacing the base value with a copy of the
    overlay value. Arrays are replaced, never concatenated.
    """

    for key, value in overlay.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            deep_merge(current, value)
        else:
            base[key] = copy.deepcopy(value)
    return base


class ExtraFieldsStore:
    """Holds the extra fields document shared by every logger in the process."""

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._fields: JsonMap | None = None

    def set(self, value: Any) -> None:
        """Replace the stored document; on error the previous one is kept."""

        document = to_json_object(value)
        with self._lock.write():
            self._fields = document

    def clear(self) -> None:
        with self._lock.write():
            self._fields = None

    @property
    def is_set(self) -> bool:
        with self._lock.read():
            return self._fields is not None

    def snapshot(self) -> JsonMap | None:
        """Return a copy of the stored document, or None when unset."""

        with self._lock.read():
            return copy.deepcopy(self._fields)

    def merge_into(self, document: JsonMap) -> JsonMap:
        """Deep merge the stored fields into *document*, stored values winning.

        *document* is updated in place and returned; it is returned untouched
        when no extra fields are set.
        """

        with self._lock.read():
            if self._fields is None:
                return document
            return deep_merge(document, self._fields)


_default_store = ExtraFieldsStore()


def get_default_store() -> ExtraFieldsStore:
    """Return the store used by loggers that were not given one explicitly."""

    return _default_store


def set_extra_fields(value: Any) -> None:
    """Set the extra fields merged into every event logged by this process.

    *value* may be anything pydantic can serialize (dicts, models,
    dataclasses, ...) as long as it serializes to a JSON object.
    """

    _default_store.set(value)


def clear_extra_fields() -> None:
    _default_store.clear()


def merge_extra_fields(document: JsonMap) -> JsonMap:
    return _default_store.merge_into(document)
