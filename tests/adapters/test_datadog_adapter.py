from __future__ import annotations

import json
import logging

import pytest
import requests

from greeting_service.adapters.datadog import DatadogAdapter, MAX_BATCH_ENTRIES, intake_url, resolve_site
from greeting_service.domain.levels import LogLevel
from tests.support import FakeSession, build_event


def make_adapter(session: FakeSession, **kwargs: object) -> DatadogAdapter:
    options: dict[str, object] = {
        "api_key": "test-key",
        "service": "greeting-service",
        "tags": ("env:test", "version:0.1.0"),
        "session": session,
    }
    options.update(kwargs)
    return DatadogAdapter(**options)


def test_session_carries_the_api_key_header(fake_session: FakeSession) -> None:
    make_adapter(fake_session)

    assert fake_session.headers["DD-API-KEY"] == "test-key"
    assert fake_session.headers["Content-Type"] == "application/json"


def test_entries_are_posted_to_the_regional_intake(fake_session: FakeSession) -> None:
    adapter = make_adapter(fake_session, site="EU", timeout=3.0)

    adapter.emit(build_event(0))
    adapter.flush()

    assert fake_session.posts[0]["url"] == "https://http-intake.logs.datadoghq.eu/api/v2/logs"
    assert fake_session.posts[0]["timeout"] == 3.0


def test_entry_carries_service_tags_and_status(fake_session: FakeSession) -> None:
    adapter = make_adapter(fake_session)
    event = build_event(
        1,
        level=LogLevel.WARNING,
        context=build_event().context.merge(request_id="req-9", route="/"),
        extra={"user": "u1", "service": "spoofed"},
        exc_info="Traceback ...",
    )

    adapter.emit(event)
    adapter.flush()
    (entry,) = fake_session.entries()

    assert entry["service"] == "greeting-service"
    assert entry["ddtags"] == "env:test,version:0.1.0"
    assert entry["ddsource"] == "python"
    assert entry["status"] == "warning"
    assert entry["message"] == "message-1"
    assert entry["hostname"] == "host"
    assert entry["request_id"] == "req-9"
    assert entry["context"] == {"route": "/"}
    assert entry["user"] == "u1"
    assert entry["logger"] == {"name": "tests"}
    assert entry["error"] == {"stack": "Traceback ..."}
    assert entry["date"].startswith("2025-09-23T12:01:00")


def test_batches_are_sent_when_full(fake_session: FakeSession) -> None:
    adapter = make_adapter(fake_session, batch_size=3)

    for index in range(7):
        adapter.emit(build_event(index))

    assert len(fake_session.posts) == 2
    assert len(fake_session.entries()) == 6
    adapter.flush()
    assert [len(json.loads(post["data"])) for post in fake_session.posts] == [3, 3, 1]
    assert adapter.delivered == 7


def test_flush_without_entries_posts_nothing(fake_session: FakeSession) -> None:
    make_adapter(fake_session).flush()

    assert fake_session.posts == []


def test_transport_errors_are_counted_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    session = FakeSession(error=requests.ConnectionError("intake unreachable"))
    adapter = make_adapter(session)

    with caplog.at_level(logging.WARNING, logger="greeting_service.adapters.datadog"):
        adapter.emit(build_event(0))
        adapter.emit(build_event(1))
        adapter.flush()

    assert adapter.failed == 2
    assert adapter.delivered == 0
    assert "export failed" in caplog.text


def test_rejected_batches_are_counted_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    adapter = make_adapter(FakeSession(status_code=403))

    with caplog.at_level(logging.WARNING, logger="greeting_service.adapters.datadog"):
        adapter.emit(build_event(0))
        adapter.flush()

    assert adapter.failed == 1
    assert "HTTP 403" in caplog.text


def test_oversized_entries_are_dropped(fake_session: FakeSession) -> None:
    adapter = make_adapter(fake_session)

    adapter.emit(build_event(0, extra={"blob": "x" * (1024 * 1024 + 1)}))
    adapter.flush()

    assert fake_session.posts == []
    assert adapter.failed == 1


def test_close_releases_the_session(fake_session: FakeSession) -> None:
    make_adapter(fake_session).close()

    assert fake_session.closed is True


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"api_key": " "}, "api_key"),
        ({"batch_size": 0}, "batch_size"),
        ({"batch_size": MAX_BATCH_ENTRIES + 1}, "batch_size"),
        ({"timeout": 0}, "timeout"),
        ({"site": "mars"}, "Unknown Datadog region"),
    ],
)
def test_invalid_options_are_rejected(fake_session: FakeSession, kwargs: dict[str, object], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        make_adapter(fake_session, **kwargs)


def test_site_resolution() -> None:
    assert resolve_site("US1") == "datadoghq.com"
    assert resolve_site("us1_fed") == "ddog-gov.com"
    assert intake_url("datadoghq.com") == "https://http-intake.logs.datadoghq.com/api/v2/logs"
    with pytest.raises(ValueError):
        resolve_site("")
