"""Concrete adapters implementing the application ports."""

from __future__ import annotations

from .console.rich_console import CONSOLE_FORMATS, RichConsoleAdapter
from .datadog import DATADOG_SITES, DatadogAdapter
from .queue import DROP_POLICIES, QueueAdapter
from .scrubber import DEFAULT_PATTERNS, RegexScrubber
from .stdlib_bridge import StdlibBridgeHandler, attach_stdlib, detach_stdlib

__all__ = [
    "CONSOLE_FORMATS",
    "DATADOG_SITES",
    "DEFAULT_PATTERNS",
    "DROP_POLICIES",
    "DatadogAdapter",
    "QueueAdapter",
    "RegexScrubber",
    "RichConsoleAdapter",
    "StdlibBridgeHandler",
    "attach_stdlib",
    "detach_stdlib",
]
