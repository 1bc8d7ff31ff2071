"""Protocols the application layer depends on."""

from __future__ import annotations

from .console import ConsolePort
from .export import ExportPort
from .queue import QueuePort
from .scrubber import ScrubberPort
from .time import ClockPort, IdProvider

__all__ = [
    "ClockPort",
    "ConsolePort",
    "ExportPort",
    "IdProvider",
    "QueuePort",
    "ScrubberPort",
]
