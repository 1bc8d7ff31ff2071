"""Use case turning a logging call into a queued, fanned-out log event.

Purpose
-------
Tie together severity filtering, context binding, scrubbing, and fan-out to
the console and export sinks.

Contents
--------
* :func:`create_process_log_event` factory returning the runtime callable.

System Role
-----------
Application-layer orchestrator invoked by the runtime composition. When a
queue is configured the callable only enqueues, so request threads never wait
for the network; the queue worker runs :attr:`fan_out` on its own thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from greeting_service.application.ports import (
    ClockPort,
    ConsolePort,
    ExportPort,
    IdProvider,
    QueuePort,
    ScrubberPort,
)
from greeting_service.domain import ContextBinder, LogEvent, LogLevel

logger = logging.getLogger(__name__)

DiagnosticHook = Callable[[str, dict[str, Any]], None]


def create_process_log_event(
    *,
    context_binder: ContextBinder,
    console: ConsolePort | None,
    console_level: LogLevel,
    exporter: ExportPort | None,
    export_level: LogLevel,
    scrubber: ScrubberPort,
    clock: ClockPort,
    id_provider: IdProvider,
    queue: QueuePort | None,
    colorize_console: bool = True,
    diagnostic: DiagnosticHook | None = None,
) -> Callable[..., dict[str, Any]]:
    """Build the orchestrator capturing the current dependency wiring.

    Parameters
    ----------
    context_binder:
        Shared :class:`ContextBinder` supplying contextual metadata.
    console:
        Console adapter; ``None`` disables terminal output.
    console_level, export_level:
        Minimum levels for the console and for the export sink.
    exporter:
        Remote sink; ``None`` keeps events local.
    scrubber:
        Masks sensitive ``extra`` values before any sink sees them.
    clock, id_provider:
        Sources of timestamps and event identifiers.
    queue:
        Optional :class:`QueuePort`; when present events are enqueued and
        :attr:`fan_out` runs on the queue worker.
    diagnostic:
        Optional callback receiving pipeline milestones (``queued``,
        ``queue_full``, ``emitted``). Exceptions raised by it are logged and
        ignored.

    Returns
    -------
    Callable
        Function accepting ``logger_name``, ``level``, ``message``, ``extra``
        and ``exc_info``, returning a diagnostic dictionary. The function
        exposes the fan-out step as ``process.fan_out``.
    """

    active_levels = [lvl for sink, lvl in ((console, console_level), (exporter, export_level)) if sink is not None]
    threshold = min(active_levels, key=lambda lvl: lvl.value) if active_levels else None

    def _diagnose(name: str, payload: dict[str, Any]) -> None:
        if diagnostic is None:
            return
        try:
            diagnostic(name, payload)
        except Exception:  # noqa: BLE001
            logger.exception("Diagnostic hook raised while reporting %s", name)

    def fan_out(event: LogEvent) -> None:
        """Deliver ``event`` to every sink whose threshold it passes."""

        if console is not None and event.level.allows(console_level):
            console.emit(event, colorize=colorize_console)
        if exporter is not None and event.level.allows(export_level):
            exporter.emit(event)
        _diagnose("emitted", {"event_id": event.event_id, "level": event.level.severity})

    def process(
        *,
        logger_name: str,
        level: LogLevel,
        message: str,
        extra: Mapping[str, Any] | None = None,
        exc_info: str | None = None,
    ) -> dict[str, Any]:
        """Build, scrub, and dispatch one log event."""

        if threshold is None or not level.allows(threshold):
            return {"ok": False, "reason": "below_threshold"}

        event = LogEvent(
            event_id=id_provider(),
            timestamp=clock.now(),
            logger_name=logger_name,
            level=level,
            message=message,
            context=context_binder.current(),
            extra=dict(extra or {}),
            exc_info=exc_info,
        )
        event = scrubber.scrub(event)

        if queue is None:
            fan_out(event)
            return {"ok": True, "event_id": event.event_id, "queued": False}

        if queue.put(event):
            _diagnose("queued", {"event_id": event.event_id})
            return {"ok": True, "event_id": event.event_id, "queued": True}

        _diagnose("queue_full", {"event_id": event.event_id})
        return {"ok": False, "event_id": event.event_id, "reason": "queue_full"}

    setattr(process, "fan_out", fan_out)
    return process


__all__ = ["DiagnosticHook", "create_process_log_event"]
