"""Port describing the bounded queue between producers and the export worker."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from greeting_service.domain.events import LogEvent


@runtime_checkable
class QueuePort(Protocol):
    """Bridge between request threads and the background worker."""

    def start(self) -> None:
        """Start the queue worker."""

    def stop(self, *, drain: bool = True) -> None:
        """Stop the queue worker, optionally draining queued events."""

    def put(self, event: LogEvent) -> bool:
        """Enqueue ``event`` without blocking; ``False`` when it was dropped."""


__all__ = ["QueuePort"]
