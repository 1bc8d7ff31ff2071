"""Bridge from :mod:`logging` records into the logging runtime.

Purpose
-------
Flask, Werkzeug, and every other library in the process log through the
standard library. :class:`StdlibBridgeHandler` turns those records into runtime
events so they reach the console and Datadog with the same service metadata as
the service's own records.

System Role
-----------
Records of the export path itself (this adapters package, ``urllib3``,
``requests``) are never forwarded; an export failure that was exported would
feed back into the queue. Those records are written to standard error instead
when they are warnings or worse.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable
from typing import Any

from greeting_service.domain.levels import LogLevel


EXCLUDED_LOGGERS: tuple[str, ...] = ("greeting_service.adapters", "urllib3", "requests")

# attributes present on every LogRecord; anything else came from ``extra=``
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _is_excluded(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in EXCLUDED_LOGGERS)


class StdlibBridgeHandler(logging.Handler):
    """Forward :class:`logging.LogRecord` objects to the runtime process callable."""

    def __init__(self, process: Callable[..., dict[str, Any]], *, level: int = logging.NOTSET) -> None:
        super().__init__(level=level)
        self._process = process
        self._fallback = logging.StreamHandler(sys.stderr)
        self._fallback.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        self._local = threading.local()
        # level the target logger had before attach_stdlib lowered it
        self.previous_level: int | None = None

    def emit(self, record: logging.LogRecord) -> None:
        if _is_excluded(record.name):
            if record.levelno >= logging.WARNING:
                self._fallback.handle(record)
            return
        if getattr(self._local, "active", False):
            return
        self._local.active = True
        try:
            message = record.getMessage()
            if not message.strip():
                return
            exc_text = None
            if record.exc_info:
                exc_text = (self.formatter or logging.Formatter()).formatException(record.exc_info)
            extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES and not key.startswith("_")}
            extra.setdefault("origin", "stdlib")
            self._process(
                logger_name=record.name,
                level=LogLevel.from_python_level(record.levelno),
                message=message,
                extra=extra,
                exc_info=exc_text,
            )
        except Exception:  # noqa: BLE001
            self.handleError(record)
        finally:
            self._local.active = False


def attach_stdlib(
    process: Callable[..., dict[str, Any]],
    *,
    level: LogLevel = LogLevel.DEBUG,
    logger: logging.Logger | None = None,
) -> StdlibBridgeHandler:
    """Install a :class:`StdlibBridgeHandler` on ``logger`` (root by default).

    The logger level is lowered to ``level`` when it is higher or unset;
    :func:`detach_stdlib` puts the old level back.
    """

    target = logger if logger is not None else logging.getLogger()
    handler = StdlibBridgeHandler(process)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > level.to_python_level():
        handler.previous_level = target.level
        target.setLevel(level.to_python_level())
    return handler


def detach_stdlib(handler: StdlibBridgeHandler, *, logger: logging.Logger | None = None) -> None:
    """Remove ``handler`` and restore the level it replaced; a no-op when it is not attached."""

    target = logger if logger is not None else logging.getLogger()
    if handler not in target.handlers:
        return
    target.removeHandler(handler)
    if handler.previous_level is not None:
        target.setLevel(handler.previous_level)
        handler.previous_level = None
    handler.close()


__all__ = ["EXCLUDED_LOGGERS", "StdlibBridgeHandler", "attach_stdlib", "detach_stdlib"]
