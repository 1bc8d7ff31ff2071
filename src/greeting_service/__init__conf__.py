"""Static package metadata surfaced by the CLI and the exported ``version`` tag."""

from __future__ import annotations

name = "greeting_service"
title = "Hello-world HTTP service with Datadog log export"
version = "0.1.0"
homepage = "https://github.com/example/greeting-service"
author = "greeting-service maintainers"
shell_command = "greeting-service"


def summary_info() -> str:
    """Return the metadata banner printed by ``greeting-service info``.

    >>> summary_info().splitlines()[0]
    'Info for greeting_service:'
    """

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    return "\n".join(lines) + "\n"


__all__ = ["author", "homepage", "name", "shell_command", "summary_info", "title", "version"]
