from __future__ import annotations

from typing import Iterator

import pytest
from flask import Flask

from greeting_service.config import Settings, load_settings
from greeting_service.runtime import LoggingRuntime, build_runtime
from greeting_service.web import GREETING, create_app, get_runtime
from tests.support import FakeSession, RecordingExporter


@pytest.fixture
def exporter() -> RecordingExporter:
    return RecordingExporter()


@pytest.fixture
def runtime(settings: Settings, exporter: RecordingExporter) -> Iterator[LoggingRuntime]:
    runtime = build_runtime(settings.runtime, console_enabled=False, exporter=exporter, queue_enabled=False)
    yield runtime
    runtime.shutdown()


@pytest.fixture
def app(runtime: LoggingRuntime) -> Flask:
    return create_app(runtime)


def test_root_returns_the_greeting(app: Flask) -> None:
    response = app.test_client().get("/")

    assert response.status_code == 200
    assert response.get_data(as_text=True) == GREETING == "Hello, World!"
    assert response.mimetype == "text/plain"


def test_query_strings_and_headers_do_not_change_the_body(app: Flask) -> None:
    response = app.test_client().get("/?name=bob&x=1", headers={"Accept": "application/json", "X-Custom": "1"})

    assert response.status_code == 200
    assert response.get_data(as_text=True) == "Hello, World!"


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"])
def test_other_methods_never_return_the_greeting(app: Flask, method: str) -> None:
    response = app.test_client().open("/", method=method)

    assert response.status_code == 405
    assert response.get_data(as_text=True) != "Hello, World!"


@pytest.mark.parametrize("path", ["/hello", "/index.html", "/api/"])
def test_unknown_paths_are_not_found(app: Flask, path: str) -> None:
    assert app.test_client().get(path).status_code == 404


def test_greeting_is_logged_with_a_request_id(app: Flask, exporter: RecordingExporter) -> None:
    app.test_client().get("/", headers={"X-Request-ID": "req-42"})

    (event,) = exporter.events
    assert event.message == "Saying hello"
    assert event.logger_name == "greeting_service.web"
    assert event.context.request_id == "req-42"


def test_request_ids_are_generated_per_request(app: Flask, exporter: RecordingExporter) -> None:
    client = app.test_client()
    client.get("/")
    client.get("/")

    first, second = (event.context.request_id for event in exporter.events)
    assert first and second and first != second


def test_debug_record_follows_the_configured_level(environ: dict[str, str]) -> None:
    exporter = RecordingExporter()
    settings = load_settings({**environ, "LOG_LEVEL": "DEBUG"})
    runtime = build_runtime(settings.runtime, console_enabled=False, exporter=exporter, queue_enabled=False)
    try:
        create_app(runtime).test_client().get("/")
    finally:
        runtime.shutdown()

    assert [event.message for event in exporter.events] == ["Saying hello", "Saying hello for debug level only"]


def test_unreachable_log_backend_does_not_affect_responses(settings: Settings, failing_session: FakeSession) -> None:
    runtime = build_runtime(settings.runtime, console_enabled=False, session=failing_session)
    client = create_app(runtime).test_client()
    try:
        responses = [client.get("/") for _ in range(20)]
    finally:
        runtime.shutdown()

    assert {response.status_code for response in responses} == {200}
    assert {response.get_data(as_text=True) for response in responses} == {"Hello, World!"}
    assert runtime.stats()["export_failed"] == 20


def test_runtime_is_reachable_from_the_app(app: Flask, runtime: LoggingRuntime) -> None:
    assert get_runtime(app) is runtime
    with app.app_context():
        assert get_runtime() is runtime
