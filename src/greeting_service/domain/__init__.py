"""Domain entities and value objects used by the logging runtime."""

from __future__ import annotations

from .context import ContextBinder, LogContext
from .events import LogEvent
from .levels import LogLevel

__all__ = [
    "ContextBinder",
    "LogContext",
    "LogEvent",
    "LogLevel",
]
