"""Configuration loading from the environment and optional ``.env`` files.

Purpose
-------
Resolve every recognised option once at startup into frozen settings objects
and fail fast, before any socket is opened, when a mandatory value is missing
or a value cannot be parsed.

Contents
--------
* :func:`enable_dotenv` - load the nearest ``.env`` without overriding the
  real environment.
* :func:`load_settings` - build :class:`Settings` from a mapping of variables.
* :class:`ConfigurationError` - raised for missing or invalid values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

from . import __init__conf__
from .adapters.console.rich_console import CONSOLE_FORMATS
from .adapters.datadog import MAX_BATCH_ENTRIES, resolve_site
from .adapters.queue import DROP_POLICIES
from .domain.levels import LogLevel


DOTENV_ENV_VAR = "GREETING_USE_DOTENV"
DEV_ENV_VAR = "GREETING_DEV"
DEV_SUFFIX = "_DEV"

DEFAULT_SERVICE = "greeting-service"
DEFAULT_ENVIRONMENT = "production"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class ConfigurationError(ValueError):
    """Raised when mandatory configuration is missing or malformed."""


@dataclass(frozen=True, slots=True)
class DatadogSettings:
    """Options of the Datadog export sink. ``api_key`` is kept out of ``repr``."""

    api_key: str = field(repr=False)
    site: str = "datadoghq.com"
    tags: tuple[str, ...] = ()
    source: str = "python"
    batch_size: int = 100
    flush_interval: float = 2.0
    timeout: float = 5.0


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Options of the logging runtime."""

    service: str
    environment: str
    version: str
    datadog: DatadogSettings
    level: LogLevel = LogLevel.INFO
    console_format: str = "text"
    queue_maxsize: int = 2048
    queue_policy: str = "drop"
    force_color: bool = False
    no_color: bool = False
    scrub_patterns: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ServerSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass(frozen=True, slots=True)
class Settings:
    runtime: RuntimeSettings
    server: ServerSettings
    dev: bool = False


def enable_dotenv(path: str | Path | None = None) -> Path | None:
    """Load ``path`` or the nearest ``.env`` above the working directory.

    Variables already present in the environment keep precedence. Returns the
    file that was loaded, or ``None`` when no file was found.
    """

    if path is None:
        located = find_dotenv(usecwd=True)
        if not located:
            return None
        target = Path(located)
    else:
        target = Path(path)
        if not target.is_file():
            return None
    load_dotenv(target, override=False)
    return target.resolve()


def dotenv_requested(environ: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` when :data:`DOTENV_ENV_VAR` asks for ``.env`` loading."""
    env = os.environ if environ is None else environ
    return _parse_bool(DOTENV_ENV_VAR, env.get(DOTENV_ENV_VAR), False)


def build_tags(configured: str | None, *, environment: str, version: str) -> tuple[str, ...]:
    """Combine configured tags with the ``env:`` and ``version:`` tags.

    ``env:`` and ``version:`` always come from the running service; configured
    tags with those keys are dropped so ``ddtags`` matches the log context.

    >>> build_tags("team:web, region:eu", environment="staging", version="0.1.0")
    ('team:web', 'region:eu', 'env:staging', 'version:0.1.0')
    >>> build_tags("env:prod,version:9", environment="staging", version="0.1.0")
    ('env:staging', 'version:0.1.0')
    """
    tags = [tag.strip() for tag in (configured or "").split(",") if tag.strip()]
    tags = [tag for tag in tags if not tag.startswith(("env:", "version:"))]
    tags.extend((f"env:{environment}", f"version:{version}"))
    return tuple(tags)


def load_settings(
    environ: Mapping[str, str] | None = None,
    *,
    dev: bool | None = None,
    host: str | None = None,
    port: int | None = None,
) -> Settings:
    """Resolve :class:`Settings` from ``environ`` (``os.environ`` by default).

    Parameters
    ----------
    environ:
        Mapping of environment variables.
    dev:
        Development mode; ``None`` defers to :data:`DEV_ENV_VAR`. In development
        mode ``DD_TAGS_DEV`` and ``LOG_LEVEL_DEV`` are consulted before their
        production names.
    host, port:
        Explicit listener overrides (CLI options) taking precedence over
        ``HOST`` / ``PORT``.

    Raises
    ------
    ConfigurationError
        When ``DD_API_KEY`` is missing or blank, or any value is invalid.
    """

    env = os.environ if environ is None else environ
    dev_mode = _parse_bool(DEV_ENV_VAR, env.get(DEV_ENV_VAR), False) if dev is None else dev

    def lookup(name: str, default: str | None = None) -> str | None:
        if dev_mode:
            value = env.get(name + DEV_SUFFIX)
            if value is not None and value.strip():
                return value
        value = env.get(name)
        if value is None or not value.strip():
            return default
        return value.strip()

    api_key = (env.get("DD_API_KEY") or "").strip()
    if not api_key:
        raise ConfigurationError("DD_API_KEY is not set; refusing to start without log export")

    service = lookup("DD_SERVICE", DEFAULT_SERVICE) or DEFAULT_SERVICE
    environment = lookup("DD_ENV", DEFAULT_ENVIRONMENT) or DEFAULT_ENVIRONMENT
    version = __init__conf__.version

    try:
        site = resolve_site(lookup("DD_SITE", "US1") or "US1")
    except ValueError as exc:
        raise ConfigurationError(f"DD_SITE: {exc}") from exc

    batch_size = _parse_int("DD_BATCH_SIZE", lookup("DD_BATCH_SIZE"), 100)
    if not 1 <= batch_size <= MAX_BATCH_ENTRIES:
        raise ConfigurationError(f"DD_BATCH_SIZE must be between 1 and {MAX_BATCH_ENTRIES}")

    datadog = DatadogSettings(
        api_key=api_key,
        site=site,
        tags=build_tags(lookup("DD_TAGS"), environment=environment, version=version),
        source=lookup("DD_SOURCE", "python") or "python",
        batch_size=batch_size,
        flush_interval=_parse_positive_float("DD_FLUSH_INTERVAL", lookup("DD_FLUSH_INTERVAL"), 2.0),
        timeout=_parse_positive_float("DD_TIMEOUT", lookup("DD_TIMEOUT"), 5.0),
    )

    try:
        level = LogLevel.from_name(lookup("LOG_LEVEL", "INFO") or "INFO")
    except ValueError as exc:
        raise ConfigurationError(f"LOG_LEVEL: {exc}") from exc

    console_format = (lookup("LOG_CONSOLE_FORMAT", "text") or "text").lower()
    if console_format not in CONSOLE_FORMATS:
        raise ConfigurationError("LOG_CONSOLE_FORMAT must be 'text' or 'json'")

    queue_policy = (lookup("LOG_QUEUE_POLICY", "drop") or "drop").lower()
    if queue_policy not in DROP_POLICIES:
        raise ConfigurationError("LOG_QUEUE_POLICY must be 'drop' or 'drop_oldest'")

    queue_maxsize = _parse_int("LOG_QUEUE_MAXSIZE", lookup("LOG_QUEUE_MAXSIZE"), 2048)
    if queue_maxsize <= 0:
        raise ConfigurationError("LOG_QUEUE_MAXSIZE must be positive")

    runtime = RuntimeSettings(
        service=service,
        environment=environment,
        version=version,
        datadog=datadog,
        level=level,
        console_format=console_format,
        queue_maxsize=queue_maxsize,
        queue_policy=queue_policy,
        force_color=_parse_bool("LOG_FORCE_COLOR", env.get("LOG_FORCE_COLOR"), False),
        no_color=_parse_bool("LOG_NO_COLOR", env.get("LOG_NO_COLOR"), False) or "NO_COLOR" in env,
        scrub_patterns=_parse_scrub_patterns(env.get("LOG_SCRUB_PATTERNS")),
    )

    server = ServerSettings(
        host=host or lookup("HOST", DEFAULT_HOST) or DEFAULT_HOST,
        port=port if port is not None else _parse_int("PORT", lookup("PORT"), DEFAULT_PORT),
    )
    if not 0 <= server.port <= 65535:
        raise ConfigurationError("PORT must be between 0 and 65535")

    return Settings(runtime=runtime, server=server, dev=dev_mode)


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_int(name: str, raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _parse_positive_float(name: str, raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive")
    return value


def _parse_scrub_patterns(raw: str | None) -> dict[str, str]:
    """Parse ``field=regex`` pairs separated by commas."""
    if not raw:
        return {}
    patterns: dict[str, str] = {}
    for chunk in raw.split(","):
        if not chunk.strip():
            continue
        key, sep, pattern = chunk.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError("LOG_SCRUB_PATTERNS entries must look like field=regex")
        patterns[key.strip()] = pattern.strip() or ".+"
    return patterns


__all__ = [
    "ConfigurationError",
    "DEV_ENV_VAR",
    "DOTENV_ENV_VAR",
    "DatadogSettings",
    "RuntimeSettings",
    "ServerSettings",
    "Settings",
    "build_tags",
    "dotenv_requested",
    "enable_dotenv",
    "load_settings",
]
