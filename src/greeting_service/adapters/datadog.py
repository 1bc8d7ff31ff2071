"""Datadog HTTP logs intake adapter.

Purpose
-------
Ship log events to the Datadog logs intake (``/api/v2/logs``) in JSON batches,
tagged with the service name, environment, and version of this process.

Contents
--------
* :data:`DATADOG_SITES` - region name to site domain mapping.
* :func:`resolve_site` - accept either a region name or a site domain.
* :class:`DatadogAdapter` - batching :class:`ExportPort` implementation.

System Role
-----------
Runs on the queue worker thread only. Delivery is best effort: transport
errors and rejected batches are counted and reported on standard error, never
raised to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Sequence

import requests

from greeting_service.application.ports.export import ExportPort
from greeting_service.domain.events import LogEvent


LOGGER = logging.getLogger(__name__)

DATADOG_SITES: Mapping[str, str] = {
    "US1": "datadoghq.com",
    "US3": "us3.datadoghq.com",
    "US5": "us5.datadoghq.com",
    "EU": "datadoghq.eu",
    "AP1": "ap1.datadoghq.com",
    "US1_FED": "ddog-gov.com",
}

MAX_BATCH_ENTRIES = 1000
MAX_BATCH_BYTES = 5 * 1024 * 1024
MAX_ENTRY_BYTES = 1024 * 1024

_RESERVED_KEYS = frozenset({"ddsource", "ddtags", "hostname", "message", "service", "status", "date"})


def resolve_site(value: str) -> str:
    """Return the site domain for a region name or a site domain.

    >>> resolve_site("eu")
    'datadoghq.eu'
    >>> resolve_site("us5.datadoghq.com")
    'us5.datadoghq.com'
    """
    candidate = value.strip()
    if not candidate:
        raise ValueError("Datadog site must not be empty")
    region = DATADOG_SITES.get(candidate.upper())
    if region is not None:
        return region
    if "." not in candidate:
        raise ValueError(f"Unknown Datadog region: {value!r}")
    return candidate.lower()


def intake_url(site: str) -> str:
    """Return the logs intake endpoint for ``site``."""
    return f"https://http-intake.logs.{resolve_site(site)}/api/v2/logs"


class DatadogAdapter(ExportPort):
    """Batch log events and post them to the Datadog logs intake.

    Parameters
    ----------
    api_key:
        Datadog API key sent as the ``DD-API-KEY`` header.
    service:
        Value of the ``service`` attribute on every entry.
    tags:
        Tags joined into ``ddtags``; the environment and version tags are
        prepended by the runtime composition.
    site:
        Region name (``US1``, ``EU``, …) or site domain.
    source:
        Value of the ``ddsource`` attribute.
    batch_size:
        Entries per intake request, between 1 and :data:`MAX_BATCH_ENTRIES`.
    timeout:
        Seconds before an intake request is abandoned.
    session:
        Optional pre-configured :class:`requests.Session`; tests inject fakes.
    """

    def __init__(
        self,
        *,
        api_key: str,
        service: str,
        tags: Sequence[str] = (),
        site: str = "US1",
        source: str = "python",
        batch_size: int = 100,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ValueError("api_key must not be empty")
        if not 1 <= batch_size <= MAX_BATCH_ENTRIES:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_ENTRIES}")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._url = intake_url(site)
        self._service = service
        self._tags = ",".join(tag for tag in tags if tag)
        self._source = source
        self._batch_size = batch_size
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "DD-API-KEY": api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        self._buffer: list[str] = []
        self._buffer_bytes = 0
        self._delivered = 0
        self._failed = 0

    @property
    def delivered(self) -> int:
        """Entries accepted by the intake so far."""
        return self._delivered

    @property
    def failed(self) -> int:
        """Entries lost to transport errors or rejected batches."""
        return self._failed

    def emit(self, event: LogEvent) -> None:
        """Buffer ``event`` and send the batch once it is full."""
        encoded = json.dumps(self._build_entry(event), default=str, separators=(",", ":"))
        size = len(encoded.encode("utf-8"))
        if size > MAX_ENTRY_BYTES:
            LOGGER.warning("Dropping log entry %s larger than the intake limit (%d bytes)", event.event_id, size)
            self._failed += 1
            return
        if self._buffer and self._buffer_bytes + size + 2 > MAX_BATCH_BYTES:
            self.flush()
        self._buffer.append(encoded)
        self._buffer_bytes += size + 1
        if len(self._buffer) >= self._batch_size:
            self.flush()

    def flush(self) -> None:
        """Post every buffered entry; failures are reported, not raised."""
        if not self._buffer:
            return
        batch = self._buffer
        self._buffer = []
        self._buffer_bytes = 0
        body = "[" + ",".join(batch) + "]"
        try:
            response = self._session.post(self._url, data=body.encode("utf-8"), timeout=self._timeout)
        except requests.RequestException as exc:
            self._failed += len(batch)
            LOGGER.warning("Datadog log export failed (%d entries): %s", len(batch), exc)
            return
        if response.status_code >= 400:
            self._failed += len(batch)
            LOGGER.warning(
                "Datadog rejected %d log entries: HTTP %s %s",
                len(batch),
                response.status_code,
                response.text[:200],
            )
            return
        self._delivered += len(batch)

    def close(self) -> None:
        self._session.close()

    def _build_entry(self, event: LogEvent) -> dict[str, Any]:
        context = event.context
        entry: dict[str, Any] = {
            key: value for key, value in event.extra.items() if key not in _RESERVED_KEYS
        }
        entry.update(
            {
                "ddsource": self._source,
                "ddtags": self._tags,
                "hostname": context.hostname or "",
                "service": self._service,
                "message": event.message,
                "status": event.level.severity,
                "date": event.timestamp.isoformat(),
                "event_id": event.event_id,
                "logger": {"name": event.logger_name},
            }
        )
        if event.request_id:
            entry["request_id"] = event.request_id
        if context.process_id is not None:
            entry["process_id"] = context.process_id
        if context.extra:
            entry["context"] = dict(context.extra)
        if event.exc_info:
            entry["error"] = {"stack": event.exc_info}
        return entry


__all__ = ["DATADOG_SITES", "DatadogAdapter", "MAX_BATCH_ENTRIES", "intake_url", "resolve_site"]
