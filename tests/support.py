"""Test doubles shared across the suite."""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from greeting_service.domain import LogContext, LogEvent, LogLevel


@dataclass
class FakeResponse:
    status_code: int = 202
    text: str = "{}"


@dataclass
class FakeSession:
    """Stand-in for :class:`requests.Session` recording every post."""

    status_code: int = 202
    error: Exception | None = None
    headers: dict[str, str] = field(default_factory=dict)
    posts: list[dict[str, Any]] = field(default_factory=list)
    closed: bool = False
    delay: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def post(self, url: str, *, data: bytes, timeout: float) -> FakeResponse:
        with self._lock:
            self.posts.append({"url": url, "data": data, "timeout": timeout})
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return FakeResponse(status_code=self.status_code)

    def close(self) -> None:
        self.closed = True

    def entries(self) -> list[dict[str, Any]]:
        """Return every entry posted so far, in order."""
        with self._lock:
            posts = list(self.posts)
        return [entry for post in posts for entry in json.loads(post["data"])]


class RecordingExporter:
    """Export port collecting events in memory."""

    def __init__(self) -> None:
        self.events: list[LogEvent] = []
        self.flushes = 0
        self.closed = False

    def emit(self, event: LogEvent) -> None:
        self.events.append(event)

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True


def build_event(index: int = 0, *, level: LogLevel = LogLevel.INFO, **overrides: Any) -> LogEvent:
    data: dict[str, Any] = {
        "event_id": f"evt-{index}",
        "timestamp": datetime(2025, 9, 23, 12, index % 60, tzinfo=timezone.utc),
        "logger_name": "tests",
        "level": level,
        "message": f"message-{index}",
        "context": LogContext(service="svc", environment="test", hostname="host", process_id=42, version="0.1.0"),
    }
    data.update(overrides)
    return LogEvent(**data)
