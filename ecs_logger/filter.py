"""Level/target filtering driven by ``env_logger`` style directive strings.

Examples of accepted filter text::

    info
    warn,myapp=debug
    myapp.db=trace,myapp.http=off
    info/request \\d+
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Pattern, Tuple

import structlog

from .levels import Level

DEFAULT_LEVEL = Level.ERROR

_log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Directive:
    """Minimum level for *name* and its dotted descendants; global when name is None."""

    name: str | None
    level: Level

    def covers(self, target: str) -> bool:
        if self.name is None:
            return True
        return target == self.name or target.startswith(self.name + ".")


def _parse_directive(text: str) -> Directive | None:
    parts = text.split("=")

    if len(parts) == 1:
        try:
            return Directive(name=None, level=Level.parse(text))
        except ValueError:
            # a bare target enables everything for it
            return Directive(name=text, level=Level.TRACE)

    if len(parts) == 2:
        name, raw_level = (part.strip() for part in parts)
        try:
            level = Level.parse(raw_level)
        except ValueError:
            _log.warning(
                "invalid_filter_directive",
                directive=text,
                reason=f"unknown level '{raw_level}'",
            )
            return None
        return Directive(name=name or None, level=level)

    _log.warning("invalid_filter_directive", directive=text, reason="too many '='")
    return None


def parse_filter(spec: str | None) -> Tuple[List[Directive], Pattern[str] | None]:
    """Split filter text into directives and an optional message regex.

    Malformed parts are skipped with a warning instead of failing.
    """

    if not spec:
        return [], None

    directives_text, has_regex, regex_text = spec.partition("/")

    directives: List[Directive] = []
    for chunk in directives_text.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        directive = _parse_directive(chunk)
        if directive is not None:
            directives.append(directive)

    regex: Pattern[str] | None = None
    if has_regex and regex_text:
        try:
            regex = re.compile(regex_text)
        except re.error as exc:
            _log.warning("invalid_filter_regex", regex=regex_text, error=str(exc))

    return directives, regex


class Filter:
    """Pure predicate over (level, target), fixed after construction."""

    def __init__(self, directives: Iterable[Directive] = (), regex: Pattern[str] | None = None) -> None:
        by_name: dict[str | None, Directive] = {}
        for directive in directives:
            by_name[directive.name] = directive

        if not by_name:
            by_name[None] = Directive(name=None, level=DEFAULT_LEVEL)

        # most specific first
        self._directives: Tuple[Directive, ...] = tuple(
            sorted(by_name.values(), key=lambda item: len(item.name or ""), reverse=True)
        )
        self._regex = regex

    @classmethod
    def parse(cls, spec: str | None) -> "Filter":
        directives, regex = parse_filter(spec)
        return cls(directives, regex)

    @property
    def directives(self) -> Tuple[Directive, ...]:
        return self._directives

    @property
    def regex(self) -> Pattern[str] | None:
        return self._regex

    @property
    def min_level(self) -> Level:
        """The most verbose level any directive enables."""

        return min(directive.level for directive in self._directives)

    def level_for(self, target: str) -> Level:
        """Return the threshold that applies to *target*; ``OFF`` when no directive covers it."""

        for directive in self._directives:
            if directive.covers(target):
                return directive.level
        return Level.OFF

    def accepts(self, level: Level, target: str) -> bool:
        threshold = self.level_for(target)
        return threshold is not Level.OFF and level >= threshold

    def matches(self, level: Level, target: str, message: str | None = None) -> bool:
        """Like ``accepts`` but also applies the message regex when one is configured."""

        if not self.accepts(level, target):
            return False
        if self._regex is None or message is None:
            return True
        return self._regex.search(message) is not None
