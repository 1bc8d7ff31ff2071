"""Console adapters."""

from __future__ import annotations

from .rich_console import CONSOLE_FORMATS, RichConsoleAdapter

__all__ = ["CONSOLE_FORMATS", "RichConsoleAdapter"]
