"""Thread-based bounded queue feeding the log export worker.

Purpose
-------
Decouple request threads from the network-bound Datadog sink. Producers never
block: when the queue is full the configured overflow policy decides which
record is lost.

Contents
--------
* :class:`QueueAdapter` - background worker implementation of :class:`QueuePort`.
* :data:`DROP_POLICIES` - accepted overflow policy names.

System Role
-----------
Owned by the logging runtime; started during composition and drained by
:func:`greeting_service.application.use_cases.shutdown.create_shutdown`.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from typing import Any

from greeting_service.application.ports.queue import QueuePort
from greeting_service.domain.events import LogEvent


LOGGER = logging.getLogger(__name__)

DROP_POLICIES = frozenset({"drop", "drop_oldest"})
"""``drop`` rejects the incoming event, ``drop_oldest`` evicts the oldest queued one."""


class QueueAdapter(QueuePort):
    """Process log events on a background thread.

    Examples
    --------
    >>> processed = []
    >>> adapter = QueueAdapter(worker=lambda event: processed.append(event))
    >>> adapter.start()
    >>> from datetime import datetime, timezone
    >>> from greeting_service.domain.context import LogContext
    >>> from greeting_service.domain.levels import LogLevel
    >>> ctx = LogContext(service='svc', environment='prod')
    >>> event = LogEvent('id', datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), 'svc', LogLevel.INFO, 'msg', ctx)
    >>> adapter.put(event)
    True
    >>> adapter.stop(drain=True)
    >>> processed[0].event_id
    'id'
    """

    def __init__(
        self,
        *,
        worker: Callable[[LogEvent], None] | None = None,
        maxsize: int = 2048,
        drop_policy: str = "drop",
        on_flush: Callable[[], None] | None = None,
        flush_interval: float = 2.0,
        stop_timeout: float | None = 5.0,
        diagnostic: Callable[[str, dict[str, Any]], None] | None = None,
    ) -> None:
        """Create the queue with an optional worker and capacity.

        Parameters
        ----------
        worker:
            Callable invoked for each event on the worker thread.
        maxsize:
            Maximum number of queued events before the overflow policy applies.
        drop_policy:
            One of :data:`DROP_POLICIES`.
        on_flush:
            Callback run on the worker thread every ``flush_interval`` seconds,
            busy or not; the export sink uses it to send partial batches.
        stop_timeout:
            Default drain deadline (seconds) for :meth:`stop`. ``None`` waits
            indefinitely.
        """
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        policy = drop_policy.lower()
        if policy not in DROP_POLICIES:
            raise ValueError("drop_policy must be 'drop' or 'drop_oldest'")
        if flush_interval <= 0:
            raise ValueError("flush_interval must be positive")
        self._worker = worker
        self._queue: queue.Queue[LogEvent | None] = queue.Queue(maxsize=maxsize)
        # serialises drop_oldest evictions against concurrent producers
        self._put_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._drop_policy = policy
        self._on_flush = on_flush
        self._flush_interval = flush_interval
        self._stop_timeout = stop_timeout
        self._diagnostic = diagnostic
        self._dropped = 0
        self._worker_errors = 0

    @property
    def dropped(self) -> int:
        """Number of events discarded by the overflow policy or a hurried stop."""
        return self._dropped

    @property
    def worker_errors(self) -> int:
        """Number of exceptions raised by the worker callable so far."""
        return self._worker_errors

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background worker thread if it is not already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="greeting-log-export", daemon=True)
        self._thread.start()

    def stop(self, *, drain: bool = True, timeout: float | None = None) -> None:
        """Stop the worker thread, optionally draining queued events.

        Parameters
        ----------
        drain:
            When ``True`` queued events are processed before the worker exits.
            When ``False`` pending events are discarded and counted as dropped.
        timeout:
            Per-call override for the drain deadline.

        Raises
        ------
        RuntimeError
            When the worker does not finish within the deadline.
        """
        thread = self._thread
        if thread is None:
            return

        effective_timeout = timeout if timeout is not None else self._stop_timeout
        deadline = time.monotonic() + effective_timeout if effective_timeout is not None else None

        if not drain:
            self._discard_pending()
        self._stop_event.set()
        self._wake_worker()

        if deadline is None:
            thread.join()
        else:
            thread.join(max(0.0, deadline - time.monotonic()))

        if thread.is_alive():
            self._discard_pending()
            self._emit_diagnostic("queue_shutdown_timeout", {"timeout": effective_timeout})
            raise RuntimeError("Queue worker failed to stop within the allotted timeout")
        self._thread = None

    def put(self, event: LogEvent) -> bool:
        """Enqueue ``event`` without blocking.

        Returns ``True`` when the event was accepted. With the ``drop`` policy a
        full queue rejects ``event`` and ``False`` is returned; with
        ``drop_oldest`` the oldest queued event is evicted instead and ``event``
        is accepted.
        """
        if self._drop_policy == "drop":
            try:
                self._queue.put_nowait(event)
            except queue.Full:
                self._handle_drop(event)
                return False
            return True

        with self._put_lock:
            while True:
                try:
                    self._queue.put_nowait(event)
                    return True
                except queue.Full:
                    self._evict_oldest()

    def set_worker(self, worker: Callable[[LogEvent], None]) -> None:
        """Swap the worker callable used to process events."""
        self._worker = worker

    def _run(self) -> None:
        """Worker loop draining the queue until stopped.

        ``on_flush`` runs whenever ``flush_interval`` has elapsed since its
        previous run, whether or not events kept arriving in between.
        """
        next_flush = time.monotonic() + self._flush_interval
        while True:
            remaining = next_flush - time.monotonic()
            if remaining <= 0:
                self._run_flush()
                next_flush = time.monotonic() + self._flush_interval
                continue
            try:
                item = self._queue.get(timeout=remaining)
            except queue.Empty:
                if self._stop_event.is_set():
                    break
                continue
            try:
                if item is not None:
                    self._process(item)
            finally:
                self._queue.task_done()
            if self._stop_event.is_set() and self._queue.empty():
                break

    def _process(self, event: LogEvent) -> None:
        if self._worker is None:
            return
        try:
            self._worker(event)
        except Exception as exc:  # noqa: BLE001
            self._worker_errors += 1
            LOGGER.error("Queue worker raised an exception; continuing", exc_info=exc)
            self._emit_diagnostic(
                "queue_worker_error",
                {"event_id": event.event_id, "logger": event.logger_name, "exception": repr(exc)},
            )

    def _run_flush(self) -> None:
        if self._on_flush is None:
            return
        try:
            self._on_flush()
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Queue flush callback raised an exception; continuing", exc_info=exc)

    def _evict_oldest(self) -> None:
        try:
            oldest = self._queue.get_nowait()
        except queue.Empty:
            return
        self._queue.task_done()
        if oldest is not None:
            self._handle_drop(oldest)

    def _discard_pending(self) -> None:
        while True:
            try:
                pending = self._queue.get_nowait()
            except queue.Empty:
                break
            self._queue.task_done()
            if pending is not None:
                self._handle_drop(pending)

    def _wake_worker(self) -> None:
        """Push a sentinel so a blocked ``get`` returns promptly."""
        try:
            self._queue.put_nowait(None)
        except queue.Full:
            # the worker is busy with a full queue and will see the stop flag
            pass

    def _handle_drop(self, event: LogEvent) -> None:
        self._dropped += 1
        self._emit_diagnostic("queue_drop", {"event_id": event.event_id, "policy": self._drop_policy})

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Queue diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)


__all__ = ["DROP_POLICIES", "QueueAdapter"]
