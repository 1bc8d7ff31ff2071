"""Shutdown orchestration for the logging runtime.

Purpose
-------
Provide one teardown routine that drains the queue before the export sink
sends its last batch and closes its HTTP session.

System Role
-----------
Runs from ``finally`` blocks (server shutdown, ``LoggingRuntime.shutdown``),
so a stuck export worker is logged here and never raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Callable

from greeting_service.application.ports.export import ExportPort
from greeting_service.application.ports.queue import QueuePort


LOGGER = logging.getLogger(__name__)


def create_shutdown(
    *,
    queue: QueuePort | None,
    exporter: ExportPort | None,
) -> Callable[[], None]:
    """Return a callable performing the shutdown sequence."""

    def shutdown() -> None:
        """Drain the queue, flush the exporter, and release its resources.

        When the queue worker misses its stop deadline it still owns the
        exporter buffer, so the final flush is skipped and only ``close`` runs.
        """
        drained = True
        try:
            if queue is not None:
                try:
                    queue.stop(drain=True)
                except RuntimeError as exc:
                    drained = False
                    LOGGER.warning("Log export queue did not drain before shutdown: %s", exc)
        finally:
            if exporter is not None:
                try:
                    if drained:
                        exporter.flush()
                finally:
                    exporter.close()

    return shutdown


__all__ = ["create_shutdown"]
