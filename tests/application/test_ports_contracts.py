from __future__ import annotations

from rich.console import Console

from greeting_service.adapters import DEFAULT_PATTERNS, DatadogAdapter, QueueAdapter, RegexScrubber, RichConsoleAdapter
from greeting_service.application.ports import ClockPort, ConsolePort, ExportPort, IdProvider, QueuePort, ScrubberPort
from greeting_service.runtime._composition import SystemClock, UuidProvider
from tests.support import FakeSession, RecordingExporter


def test_adapters_satisfy_their_ports(record_console: Console, fake_session: FakeSession) -> None:
    assert isinstance(RichConsoleAdapter(console=record_console), ConsolePort)
    assert isinstance(DatadogAdapter(api_key="k", service="svc", session=fake_session), ExportPort)
    assert isinstance(QueueAdapter(), QueuePort)
    assert isinstance(RegexScrubber(patterns=DEFAULT_PATTERNS), ScrubberPort)
    assert isinstance(SystemClock(), ClockPort)
    assert isinstance(UuidProvider(), IdProvider)


def test_test_doubles_satisfy_the_export_port() -> None:
    assert isinstance(RecordingExporter(), ExportPort)


def test_clock_returns_aware_utc_and_ids_are_unique() -> None:
    assert SystemClock().now().utcoffset() is not None
    ids = {UuidProvider()() for _ in range(50)}
    assert len(ids) == 50
