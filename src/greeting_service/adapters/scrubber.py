"""Regex-based field scrubber.

Purpose
-------
Mask secrets in the ``extra`` payload of :class:`LogEvent` objects before the
console or Datadog ever see them. Keys are matched case-insensitively so
``API_KEY`` and ``api_key`` are treated alike.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Pattern

from greeting_service.application.ports.scrubber import ScrubberPort
from greeting_service.domain.events import LogEvent


DEFAULT_PATTERNS: Mapping[str, str] = {
    "password": r".+",
    "secret": r".+",
    "token": r".+",
    "api_key": r".+",
    "authorization": r".+",
}


class RegexScrubber(ScrubberPort):
    """Redact sensitive fields using regular expressions.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from greeting_service.domain.context import LogContext
    >>> from greeting_service.domain.levels import LogLevel
    >>> ctx = LogContext(service='svc', environment='prod')
    >>> event = LogEvent('id', datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), 'svc', LogLevel.INFO, 'msg', ctx, extra={'Token': 'secret123'})
    >>> RegexScrubber(patterns={'token': 'secret'}).scrub(event).extra['Token']
    '***'
    """

    def __init__(self, *, patterns: Mapping[str, str], replacement: str = "***") -> None:
        self._patterns: dict[str, Pattern[str]] = {key.lower(): re.compile(pattern) for key, pattern in patterns.items()}
        self._replacement = replacement

    def scrub(self, event: LogEvent) -> LogEvent:
        """Return a copy of ``event`` with matching extra fields redacted."""
        if not event.extra:
            return event
        return event.replace(extra=self._scrub_mapping(event.extra))

    def _scrub_mapping(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in payload.items():
            pattern = self._patterns.get(str(key).lower())
            if pattern is not None:
                result[key] = self._scrub_value(value, pattern)
            elif isinstance(value, Mapping):
                result[key] = self._scrub_mapping(value)
            else:
                result[key] = value
        return result

    def _scrub_value(self, value: Any, pattern: Pattern[str]) -> Any:
        """Recursively scrub ``value`` of a sensitive key using ``pattern``."""
        if isinstance(value, str):
            return self._replacement if pattern.search(value) else value
        if isinstance(value, bytes):
            text = value.decode("utf-8", errors="ignore")
            return self._replacement if pattern.search(text) else value
        if isinstance(value, Mapping):
            return {k: self._scrub_value(v, pattern) for k, v in value.items()}
        if isinstance(value, Sequence):
            converted = [self._scrub_value(item, pattern) for item in value]
            return tuple(converted) if isinstance(value, tuple) else converted
        return self._replacement if pattern.search(str(value)) else value


__all__ = ["DEFAULT_PATTERNS", "RegexScrubber"]
