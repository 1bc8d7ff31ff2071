"""Runtime façade composing the logging pipeline of the service.

Purpose
-------
Expose :func:`init`, the single composition root for logging. It returns a
:class:`LoggingRuntime` that the caller passes explicitly to the web
application and keeps until shutdown; nothing is stored in module globals.

Contents
--------
* ``init`` – compose the runtime from settings and optionally route stdlib
  logging into it.
* ``LoggingRuntime`` / ``LoggerProxy`` – the injected logging context and its
  per-name facade.

System Role
-----------
Outer shell of the logging layers: the web layer and the CLI only import from
here, never from the adapters directly.
"""

from __future__ import annotations

from typing import Any

from greeting_service.config import RuntimeSettings

from ._composition import build_runtime, create_base_context
from ._runtime import LoggerProxy, LoggingRuntime


def init(settings: RuntimeSettings, *, capture_stdlib: bool = True, **overrides: Any) -> LoggingRuntime:
    """Compose the logging runtime according to ``settings``.

    Parameters
    ----------
    settings:
        Resolved :class:`~greeting_service.config.RuntimeSettings`.
    capture_stdlib:
        When ``True`` a bridge handler is attached to the root logger so
        records of Flask, Werkzeug, and other libraries are exported too.
    **overrides:
        Collaborators forwarded to :func:`build_runtime` (``console``,
        ``session``, ``exporter``, ``queue_enabled``, ``diagnostic``).

    Returns
    -------
    LoggingRuntime
        Live runtime; the caller owns it and must call
        :meth:`LoggingRuntime.shutdown`.

    Examples
    --------
    >>> from greeting_service.config import load_settings
    >>> settings = load_settings({"DD_API_KEY": "doc"})
    >>> runtime = init(settings.runtime, capture_stdlib=False, console_enabled=False, queue_enabled=False)  # doctest: +SKIP
    >>> runtime.get("docs").info("ready")["ok"]  # doctest: +SKIP
    True
    >>> runtime.shutdown()  # doctest: +SKIP
    """

    runtime = build_runtime(settings, **overrides)
    if capture_stdlib:
        runtime.attach_stdlib()
    return runtime


__all__ = [
    "LoggerProxy",
    "LoggingRuntime",
    "build_runtime",
    "create_base_context",
    "init",
]
