from __future__ import annotations

import logging

import pytest

from greeting_service.domain.levels import LogLevel


def test_levels_map_to_stdlib_constants() -> None:
    assert [level.to_python_level() for level in LogLevel] == [
        logging.DEBUG,
        logging.INFO,
        logging.WARNING,
        logging.ERROR,
        logging.CRITICAL,
    ]


def test_severity_is_the_lowercase_datadog_status() -> None:
    assert LogLevel.WARNING.severity == "warning"
    assert LogLevel.CRITICAL.severity == "critical"


@pytest.mark.parametrize("name", ["warn", "WARNING", " Warning "])
def test_from_name_accepts_aliases_and_whitespace(name: str) -> None:
    assert LogLevel.from_name(name) is LogLevel.WARNING


def test_from_name_rejects_unknown_levels() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        LogLevel.from_name("verbose")


def test_from_python_level_folds_custom_levels_down() -> None:
    assert LogLevel.from_python_level(25) is LogLevel.INFO
    assert LogLevel.from_python_level(5) is LogLevel.DEBUG
    assert LogLevel.from_python_level(99) is LogLevel.CRITICAL


def test_allows_compares_against_threshold() -> None:
    assert LogLevel.INFO.allows(LogLevel.INFO)
    assert LogLevel.ERROR.allows(LogLevel.INFO)
    assert not LogLevel.DEBUG.allows(LogLevel.INFO)


def test_console_codes_are_four_letters() -> None:
    assert {len(level.code) for level in LogLevel} == {4}
    assert all(level.icon for level in LogLevel)
