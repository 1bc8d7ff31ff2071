"""Log record travelling from a request handler to the sinks.

A :class:`LogEvent` is created on the request thread, crosses the bounded
queue unchanged, and is rendered by the console sink or encoded for the
Datadog intake on the worker thread. It is frozen so the two threads never
observe a half-updated record.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .context import LogContext
from .levels import LogLevel


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class LogEvent:
    """One structured log record.

    Attributes
    ----------
    event_id:
        Unique identifier, also sent to Datadog so duplicates can be spotted.
    timestamp:
        Emission time, normalised to UTC.
    logger_name:
        Dotted name of the emitting logger (``greeting_service.web``,
        ``werkzeug``, ...).
    level:
        Severity of the record.
    message:
        Rendered message; never blank.
    context:
        Service identity plus whatever the request bound (``request_id``).
    extra:
        Caller supplied fields, copied on construction.
    exc_info:
        Rendered traceback when the record was logged from an ``except``
        block.
    """

    event_id: str
    timestamp: datetime
    logger_name: str
    level: LogLevel
    message: str
    context: LogContext
    extra: dict[str, Any] = field(default_factory=dict)
    exc_info: str | None = None

    def __post_init__(self) -> None:
        if not self.event_id:
            raise ValueError("event_id must not be empty")
        if not self.message.strip():
            raise ValueError("message must not be empty")
        object.__setattr__(self, "timestamp", _as_utc(self.timestamp))
        object.__setattr__(self, "extra", dict(self.extra))

    @property
    def request_id(self) -> str | None:
        return self.context.request_id

    @property
    def rfc3339(self) -> str:
        """Timestamp as RFC 3339 with a ``Z`` suffix, e.g. ``2025-09-23T12:00:00Z``."""
        return self.timestamp.isoformat().replace("+00:00", "Z")

    def to_dict(self) -> dict[str, Any]:
        """Return the record as one flat mapping.

        Context fields and context ``extra`` are lifted to the top level,
        followed by the event's own ``extra``; later keys win.

        >>> from greeting_service.domain.context import LogContext
        >>> ctx = LogContext(service='svc', environment='prod', request_id='r1')
        >>> event = LogEvent('id', datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc), 'web', LogLevel.INFO, 'hi', ctx)
        >>> event.to_dict()['timestamp'], event.to_dict()['request_id']
        ('2025-09-23T12:00:00Z', 'r1')
        """

        context = self.context.to_dict()
        context_extra = context.pop("extra", {})
        payload: dict[str, Any] = {
            "timestamp": self.rfc3339,
            "level": self.level.name,
            "target": self.logger_name,
            "message": self.message,
            "event_id": self.event_id,
        }
        payload.update(context)
        payload.update(context_extra)
        payload.update(self.extra)
        if self.exc_info:
            payload["exc_info"] = self.exc_info
        return payload

    def replace(self, **changes: Any) -> "LogEvent":
        return replace(self, **changes)


__all__ = ["LogEvent"]
