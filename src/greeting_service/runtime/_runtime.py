"""Live logging runtime handed to every component by reference."""

from __future__ import annotations

import threading
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, MutableMapping, Optional

from greeting_service.adapters.queue import QueueAdapter
from greeting_service.adapters.stdlib_bridge import StdlibBridgeHandler, attach_stdlib, detach_stdlib
from greeting_service.application.ports import ExportPort
from greeting_service.domain import ContextBinder, LogContext, LogLevel


class LoggerProxy:
    """Lightweight facade for structured logging calls.

    Level helpers return the diagnostic dictionary of the process use case
    (``ok``, ``event_id``, ``queued``) so tests can assert on delivery.
    """

    def __init__(self, name: str, process: Callable[..., dict[str, Any]]) -> None:
        self._name = name
        self._process = process

    @property
    def name(self) -> str:
        return self._name

    def debug(self, message: str, *, extra: Optional[MutableMapping[str, Any]] = None) -> dict[str, Any]:
        return self._log(LogLevel.DEBUG, message, extra)

    def info(self, message: str, *, extra: Optional[MutableMapping[str, Any]] = None) -> dict[str, Any]:
        return self._log(LogLevel.INFO, message, extra)

    def warning(self, message: str, *, extra: Optional[MutableMapping[str, Any]] = None) -> dict[str, Any]:
        return self._log(LogLevel.WARNING, message, extra)

    def error(self, message: str, *, extra: Optional[MutableMapping[str, Any]] = None) -> dict[str, Any]:
        return self._log(LogLevel.ERROR, message, extra)

    def critical(self, message: str, *, extra: Optional[MutableMapping[str, Any]] = None) -> dict[str, Any]:
        return self._log(LogLevel.CRITICAL, message, extra)

    def exception(self, message: str, *, extra: Optional[MutableMapping[str, Any]] = None) -> dict[str, Any]:
        """Emit an ``ERROR`` carrying the traceback of the exception being handled."""
        return self._log(LogLevel.ERROR, message, extra, exc_info=traceback.format_exc())

    def _log(
        self,
        level: LogLevel,
        message: str,
        extra: Optional[MutableMapping[str, Any]],
        exc_info: str | None = None,
    ) -> dict[str, Any]:
        payload = extra if extra is not None else {}
        return self._process(logger_name=self._name, level=level, message=message, extra=payload, exc_info=exc_info)


@dataclass(slots=True)
class LoggingRuntime:
    """Aggregate of live collaborators assembled by the composition root.

    The runtime owns the export client and the queue worker; call
    :meth:`shutdown` (or use it as a context manager) to drain and release
    them.

    Parameters
    ----------
    binder:
        Context stack manager holding the process-wide base frame.
    process:
        Callable returned by ``create_process_log_event``.
    shutdown_callable:
        Callable returned by ``create_shutdown``.
    queue:
        Queue adapter, ``None`` when events are processed inline.
    exporter:
        Export sink (the Datadog adapter in production).
    service / environment / level:
        Resolved identity and minimum severity.
    """

    binder: ContextBinder
    process: Callable[..., dict[str, Any]]
    shutdown_callable: Callable[[], None]
    queue: QueueAdapter | None
    exporter: ExportPort | None
    service: str
    environment: str
    level: LogLevel
    _bridge: StdlibBridgeHandler | None = field(default=None, repr=False)
    _closed: bool = field(default=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, name: str) -> LoggerProxy:
        """Return a logger proxy bound to this runtime."""
        if self._closed:
            raise RuntimeError("logging runtime has been shut down")
        return LoggerProxy(name, self.process)

    @contextmanager
    def bind(self, **fields: Any) -> Iterator[LogContext]:
        """Scope metadata (e.g. ``request_id``) to the current execution flow."""
        with self.binder.bind(**fields) as ctx:
            yield ctx

    def attach_stdlib(self) -> StdlibBridgeHandler:
        """Route :mod:`logging` records of the whole process into this runtime."""
        with self._lock:
            if self._bridge is None:
                self._bridge = attach_stdlib(self.process, level=self.level)
            return self._bridge

    def detach_stdlib(self) -> None:
        with self._lock:
            bridge, self._bridge = self._bridge, None
        if bridge is not None:
            detach_stdlib(bridge)

    def stats(self) -> dict[str, int]:
        """Return delivery counters of the queue and the exporter."""
        return {
            "queue_dropped": self.queue.dropped if self.queue is not None else 0,
            "queue_worker_errors": self.queue.worker_errors if self.queue is not None else 0,
            "export_delivered": getattr(self.exporter, "delivered", 0),
            "export_failed": getattr(self.exporter, "failed", 0),
        }

    def shutdown(self) -> None:
        """Detach the stdlib bridge, drain the queue, and flush the exporter.

        Safe to call more than once.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.detach_stdlib()
        self.shutdown_callable()

    def __enter__(self) -> "LoggingRuntime":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.shutdown()


__all__ = ["LoggerProxy", "LoggingRuntime"]
