"""Port describing the remote log-collection sink (Datadog logs intake)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from greeting_service.domain.events import LogEvent


@runtime_checkable
class ExportPort(Protocol):
    """Forward structured events to an external log backend, best effort."""

    def emit(self, event: LogEvent) -> None:
        """Accept ``event`` for delivery; must not raise on transport errors."""

    def flush(self) -> None:
        """Deliver anything still buffered."""

    def close(self) -> None:
        """Release network resources."""


__all__ = ["ExportPort"]
