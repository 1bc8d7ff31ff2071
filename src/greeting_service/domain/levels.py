"""Severity levels shared by the request path and the export sinks.

Purpose
-------
Give the logging runtime one severity type that maps cleanly onto the
:mod:`logging` constants (for the stdlib bridge) and onto the ``status``
attribute understood by the Datadog logs intake.

Contents
--------
* :class:`LogLevel` enum with conversion helpers and presentation metadata.
* ``_ICON_TABLE`` / ``_CODE_TABLE`` lookup constants for console rendering.
"""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """Enumerated logging levels used throughout the service."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @property
    def severity(self) -> str:
        """Return the lowercase severity name used as Datadog ``status``."""

        return self.name.lower()

    @property
    def icon(self) -> str:
        """Return the glyph shown next to the level on text consoles."""

        return _ICON_TABLE[self]

    @property
    def code(self) -> str:
        """Return the fixed-width four letter code for aligned console output."""

        return _CODE_TABLE[self]

    def to_python_level(self) -> int:
        """Return the :mod:`logging` constant matching this level."""

        return getattr(logging, self.name)

    def allows(self, threshold: "LogLevel") -> bool:
        """Return ``True`` when this level passes ``threshold``."""

        return self.value >= threshold.value

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        if normalized == "WARN":
            normalized = "WARNING"
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "LogLevel":
        """Map any stdlib level integer onto the closest level at or below it.

        Custom levels between the standard ones (e.g. ``25``) are folded down
        so records from third-party libraries are never rejected.
        """
        if level < cls.DEBUG.value:
            return cls.DEBUG
        for candidate in reversed(list(cls)):
            if level >= candidate.value:
                return candidate
        return cls.DEBUG  # pragma: no cover - loop always returns


_ICON_TABLE = {
    LogLevel.DEBUG: "🐞",
    LogLevel.INFO: "ℹ",
    LogLevel.WARNING: "⚠",
    LogLevel.ERROR: "✖",
    LogLevel.CRITICAL: "☠",
}

_CODE_TABLE = {
    LogLevel.DEBUG: "DEBG",
    LogLevel.INFO: "INFO",
    LogLevel.WARNING: "WARN",
    LogLevel.ERROR: "ERRO",
    LogLevel.CRITICAL: "CRIT",
}


__all__ = ["LogLevel"]
