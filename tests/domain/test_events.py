from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from greeting_service.domain.levels import LogLevel
from tests.support import build_event


def test_timestamps_are_normalised_to_utc() -> None:
    local = datetime(2025, 9, 23, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    event = build_event(timestamp=local)

    assert event.timestamp == datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc)
    assert event.timestamp.tzinfo is timezone.utc


def test_naive_timestamps_are_rejected() -> None:
    with pytest.raises(ValueError, match="timezone-aware"):
        build_event(timestamp=datetime(2025, 9, 23, 12, 0))


def test_blank_messages_are_rejected() -> None:
    with pytest.raises(ValueError, match="message"):
        build_event(message="   ")


def test_extra_is_copied_on_construction() -> None:
    payload = {"user": "u1"}
    event = build_event(extra=payload)
    payload["user"] = "mutated"

    assert event.extra == {"user": "u1"}


def test_to_dict_flattens_context_and_extra() -> None:
    context = build_event().context.merge(request_id="req-1", route="/")
    event = build_event(level=LogLevel.ERROR, context=context, extra={"user": "u1"}, exc_info="Traceback ...")

    data = event.to_dict()

    assert data["level"] == "ERROR"
    assert data["timestamp"] == "2025-09-23T12:00:00Z"
    assert data["service"] == "svc"
    assert (data["request_id"], data["route"], data["user"]) == ("req-1", "/", "u1")
    assert data["exc_info"] == "Traceback ..."
    assert event.request_id == "req-1"


def test_replace_returns_a_new_event() -> None:
    event = build_event()

    changed = event.replace(message="other")

    assert changed.message == "other"
    assert event.message == "message-0"
