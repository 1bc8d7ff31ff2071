"""Request and service metadata attached to every log event.

Purpose
-------
Carry the ``service`` / ``environment`` identity of the process together with
per-request identifiers, without any request sharing mutable state with
another.

Contents
--------
* :class:`LogContext` – immutable dataclass capturing service/request metadata.
* :class:`ContextBinder` – :mod:`contextvars` backed stack with a process-wide
  base frame.

System Role
-----------
Worker threads started by the WSGI server do not inherit context variables, so
the binder falls back to the base frame captured at startup whenever the
current execution flow has nothing bound.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

_FIELD_NAMES = ("service", "environment", "request_id", "hostname", "process_id", "version")


def _validate_not_blank(name: str, value: str) -> str:
    """Ensure required string fields are present and not whitespace."""
    if value is None or not str(value).strip():
        raise ValueError(f"{name} must not be empty")
    return value


@dataclass(slots=True, frozen=True)
class LogContext:
    """Immutable context propagated alongside each log event.

    Attributes
    ----------
    service, environment:
        Required identifiers; exported as the Datadog ``service`` attribute and
        the ``env:`` tag.
    request_id:
        Correlation identifier of the HTTP request being served, if any.
    hostname, process_id:
        System metadata captured once when the runtime is composed.
    version:
        Package version, exported as the ``version:`` tag.
    extra:
        Copy of caller supplied metadata bound to the frame.
    """

    service: str
    environment: str
    request_id: str | None = None
    hostname: str | None = None
    process_id: int | None = None
    version: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _validate_not_blank("service", self.service)
        _validate_not_blank("environment", self.environment)
        object.__setattr__(self, "extra", dict(self.extra))

    def to_dict(self, *, include_none: bool = False) -> dict[str, Any]:
        """Return the fields as a mapping; empty values are omitted by default."""

        data = {name: getattr(self, name) for name in _FIELD_NAMES}
        data["extra"] = dict(self.extra)
        if include_none:
            return data
        return {key: value for key, value in data.items() if value not in (None, {})}

    def merge(self, **overrides: Any) -> "LogContext":
        """Return a new context with ``overrides`` applied.

        Unknown keys are folded into :attr:`extra` so callers can bind ad-hoc
        metadata without widening the dataclass; ``None`` values are skipped.

        >>> base = LogContext(service='svc', environment='prod')
        >>> merged = base.merge(request_id='r1', route='/')
        >>> merged.request_id, merged.extra
        ('r1', {'route': '/'})
        """

        fields_update: dict[str, Any] = {}
        extra = dict(self.extra)
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "extra":
                extra.update(value)
            elif key in _FIELD_NAMES:
                fields_update[key] = value
            else:
                extra[key] = value
        return replace(self, extra=extra, **fields_update)


class ContextBinder:
    """Manage :class:`LogContext` frames bound to the current execution flow."""

    def __init__(self, base: LogContext) -> None:
        self._base = base
        self._stack_var: contextvars.ContextVar[tuple[LogContext, ...]] = contextvars.ContextVar(
            "greeting_service_context_stack", default=()
        )

    @contextmanager
    def bind(self, **fields: Any) -> Iterator[LogContext]:
        """Push a frame merged from the current one and ``fields``."""

        stack = self._stack_var.get()
        context = self.current().merge(**fields)
        token = self._stack_var.set(stack + (context,))
        try:
            yield context
        finally:
            self._stack_var.reset(token)

    def current(self) -> LogContext:
        """Return the innermost bound frame, or the base frame."""

        stack = self._stack_var.get()
        return stack[-1] if stack else self._base


__all__ = ["ContextBinder", "LogContext"]
