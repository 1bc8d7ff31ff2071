"""Shared fixtures: settings, record consoles, and fake HTTP sessions."""

from __future__ import annotations

import logging
from io import StringIO
from typing import Iterator

import pytest
import requests
from rich.console import Console

from greeting_service.config import Settings, load_settings
from tests.support import FakeSession


@pytest.fixture
def environ() -> dict[str, str]:
    return {"DD_API_KEY": "test-key", "DD_ENV": "test", "DD_FLUSH_INTERVAL": "0.05"}


@pytest.fixture
def settings(environ: dict[str, str]) -> Settings:
    return load_settings(environ)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def failing_session() -> FakeSession:
    return FakeSession(error=requests.ConnectionError("intake unreachable"))


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, width=400, color_system=None)


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """Keep root logger handlers and level untouched between tests."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
