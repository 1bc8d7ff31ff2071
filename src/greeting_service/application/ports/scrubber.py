"""Port masking secrets carried in request log fields.

The process use case calls the scrubber once per record, on the request
thread, so both the console line and the Datadog entry see the same
masked ``extra`` payload.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from greeting_service.domain.events import LogEvent


@runtime_checkable
class ScrubberPort(Protocol):
    """Mask sensitive ``extra`` values (API keys, tokens, passwords)."""

    def scrub(self, event: LogEvent) -> LogEvent:
        """Return ``event`` itself when it has no ``extra``, else a masked copy.

        Context fields (``service``, ``request_id``, ...) are never touched.
        """


__all__ = ["ScrubberPort"]
