"""Rich-powered console adapter implementing :class:`ConsolePort`.

Purpose
-------
Mirror every exported record on the process console, either as a styled
human-readable line or as one flattened JSON object per line for platforms
that scrape container stdout.

Contents
--------
* :data:`CONSOLE_FORMATS` - accepted ``format`` values.
* :class:`RichConsoleAdapter` - adapter constructed by the runtime.
"""

from __future__ import annotations

import json
from typing import Mapping

from rich.console import Console

from greeting_service.application.ports.console import ConsolePort
from greeting_service.domain.events import LogEvent
from greeting_service.domain.levels import LogLevel


CONSOLE_FORMATS = frozenset({"text", "json"})

_STYLE_MAP: Mapping[LogLevel, str] = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "cyan",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "red",
    LogLevel.CRITICAL: "bold red",
}


class RichConsoleAdapter(ConsolePort):
    """Render log events using Rich, as text lines or flattened JSON."""

    def __init__(
        self,
        *,
        console: Console | None = None,
        fmt: str = "text",
        force_color: bool = False,
        no_color: bool = False,
    ) -> None:
        fmt = fmt.lower()
        if fmt not in CONSOLE_FORMATS:
            raise ValueError("console format must be 'text' or 'json'")
        if console is not None:
            self._console = console
        else:
            self._console = Console(stderr=False, force_terminal=force_color or None, no_color=no_color)
        self._fmt = fmt
        self._no_color = no_color

    def emit(self, event: LogEvent, *, colorize: bool) -> None:
        """Print ``event`` in the configured format.

        Examples
        --------
        >>> from datetime import datetime, timezone
        >>> from io import StringIO
        >>> from greeting_service.domain.context import LogContext
        >>> ctx = LogContext(service='svc', environment='prod')
        >>> event = LogEvent('id', datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), 'web', LogLevel.INFO, 'msg', ctx)
        >>> console = Console(file=StringIO(), record=True, width=200)
        >>> RichConsoleAdapter(console=console).emit(event, colorize=False)
        >>> 'msg' in console.export_text()
        True
        """
        if self._fmt == "json":
            self._console.print(self._format_json(event), markup=False, highlight=False, soft_wrap=True)
            return
        style = _STYLE_MAP.get(event.level, "") if colorize and not self._no_color else ""
        self._console.print(self._format_line(event), style=style, markup=False, highlight=False, soft_wrap=True)

    @staticmethod
    def _format_line(event: LogEvent) -> str:
        """Return a human-friendly console line for ``event``."""
        context = event.context.to_dict()
        context.pop("extra", None)
        merged = {**context, **event.context.extra, **event.extra}
        fields = " ".join(f"{key}={value}" for key, value in sorted(merged.items()) if value not in (None, ""))
        suffix = f" {fields}" if fields else ""
        line = f"{event.timestamp.isoformat()} {event.level.icon} {event.level.code} {event.logger_name}: {event.message}{suffix}"
        if event.exc_info:
            line = f"{line}\n{event.exc_info}"
        return line

    @staticmethod
    def _format_json(event: LogEvent) -> str:
        return json.dumps(event.to_dict(), default=str)


__all__ = ["CONSOLE_FORMATS", "RichConsoleAdapter"]
