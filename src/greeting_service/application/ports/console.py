"""Console port describing terminal emission contracts."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from greeting_service.domain.events import LogEvent


@runtime_checkable
class ConsolePort(Protocol):
    """Render a log event to the process console."""

    def emit(self, event: LogEvent, *, colorize: bool) -> None:
        """Render ``event`` with optional colour control."""


__all__ = ["ConsolePort"]
