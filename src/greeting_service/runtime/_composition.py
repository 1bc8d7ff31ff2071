"""Runtime composition helpers wiring domain, application, and adapters.

Purpose
-------
Translate :class:`~greeting_service.config.RuntimeSettings` into a live
:class:`LoggingRuntime`. Collaborators can be injected (console, HTTP session,
exporter) so tests exercise the real wiring without a network.
"""

from __future__ import annotations

import os
import socket
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

import requests
from rich.console import Console

from greeting_service.adapters import DEFAULT_PATTERNS, DatadogAdapter, QueueAdapter, RegexScrubber, RichConsoleAdapter
from greeting_service.application.ports import ClockPort, ConsolePort, ExportPort, IdProvider
from greeting_service.application.use_cases.process_event import DiagnosticHook, create_process_log_event
from greeting_service.application.use_cases.shutdown import create_shutdown
from greeting_service.config import DatadogSettings, RuntimeSettings
from greeting_service.domain import ContextBinder, LogContext, LogEvent

from ._runtime import LoggingRuntime


class SystemClock(ClockPort):
    """Concrete clock port returning timezone-aware UTC timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class UuidProvider(IdProvider):
    """Generate random hexadecimal identifiers for log events."""

    def __call__(self) -> str:
        return uuid4().hex


def _short_hostname() -> str | None:
    hostname = socket.gethostname() or ""
    return hostname.split(".", 1)[0] or None


def create_base_context(settings: RuntimeSettings) -> LogContext:
    """Return the process-wide frame stamped on every event."""

    return LogContext(
        service=settings.service,
        environment=settings.environment,
        hostname=_short_hostname(),
        process_id=os.getpid(),
        version=settings.version,
    )


def create_console(settings: RuntimeSettings, console: Console | None = None) -> ConsolePort:
    return RichConsoleAdapter(
        console=console,
        fmt=settings.console_format,
        force_color=settings.force_color,
        no_color=settings.no_color,
    )


def create_exporter(settings: RuntimeSettings, session: requests.Session | None = None) -> DatadogAdapter:
    dd = settings.datadog
    return DatadogAdapter(
        api_key=dd.api_key,
        service=settings.service,
        tags=dd.tags,
        site=dd.site,
        source=dd.source,
        batch_size=dd.batch_size,
        timeout=dd.timeout,
        session=session,
    )


def create_scrubber(settings: RuntimeSettings) -> RegexScrubber:
    patterns = dict(DEFAULT_PATTERNS)
    patterns.update(settings.scrub_patterns)
    return RegexScrubber(patterns=patterns)


def build_runtime(
    settings: RuntimeSettings,
    *,
    console: Console | None = None,
    console_enabled: bool = True,
    session: requests.Session | None = None,
    exporter: ExportPort | None = None,
    queue_enabled: bool = True,
    diagnostic: DiagnosticHook | None = None,
) -> LoggingRuntime:
    """Assemble the logging runtime from resolved settings.

    Parameters
    ----------
    settings:
        Resolved runtime settings.
    console:
        Optional Rich console (record consoles in tests).
    console_enabled:
        ``False`` skips the console sink entirely.
    session:
        Optional HTTP session handed to the Datadog adapter.
    exporter:
        Replace the Datadog adapter with another :class:`ExportPort`.
    queue_enabled:
        ``False`` fans out inline on the calling thread; only useful in tests.
    diagnostic:
        Callback receiving pipeline and queue milestones.
    """

    binder = ContextBinder(create_base_context(settings))
    console_port = create_console(settings, console) if console_enabled else None
    export_port = exporter if exporter is not None else create_exporter(settings, session)
    scrubber = create_scrubber(settings)
    clock: ClockPort = SystemClock()
    id_provider: IdProvider = UuidProvider()

    def _process_factory(queue: QueueAdapter | None) -> Callable[..., dict]:
        return create_process_log_event(
            context_binder=binder,
            console=console_port,
            console_level=settings.level,
            exporter=export_port,
            export_level=settings.level,
            scrubber=scrubber,
            clock=clock,
            id_provider=id_provider,
            queue=queue,
            colorize_console=not settings.no_color,
            diagnostic=diagnostic,
        )

    process = _process_factory(None)
    queue: QueueAdapter | None = None
    if queue_enabled:
        queue = QueueAdapter(
            worker=_fan_out_callable(process),
            maxsize=settings.queue_maxsize,
            drop_policy=settings.queue_policy,
            on_flush=export_port.flush,
            flush_interval=settings.datadog.flush_interval,
            stop_timeout=queue_stop_timeout(settings.datadog),
            diagnostic=diagnostic,
        )
        queue.start()
        process = _process_factory(queue)
        queue.set_worker(_fan_out_callable(process))

    return LoggingRuntime(
        binder=binder,
        process=process,
        shutdown_callable=create_shutdown(queue=queue, exporter=export_port),
        queue=queue,
        exporter=export_port,
        service=settings.service,
        environment=settings.environment,
        level=settings.level,
    )


def queue_stop_timeout(datadog: DatadogSettings) -> float:
    """Seconds the queue may spend draining on shutdown.

    Leaves room for the post already in flight plus one more batch drained
    behind it, each bounded by ``DD_TIMEOUT``.

    >>> queue_stop_timeout(DatadogSettings(api_key='k', timeout=5.0, flush_interval=2.0))
    12.0
    """
    return datadog.timeout * 2 + datadog.flush_interval


def _fan_out_callable(process: Callable[..., dict]) -> Callable[[LogEvent], None]:
    """Extract the fan-out helper exposed by the process use case."""

    fan_out = getattr(process, "fan_out")

    def _worker(event: LogEvent) -> None:
        fan_out(event)

    return _worker


__all__ = ["SystemClock", "UuidProvider", "build_runtime", "create_base_context"]
