"""Click command group for serving, provisioning, and metadata.

Contents
--------
* :func:`cli` - group handling ``--version`` and ``.env`` loading.
* ``serve`` - validate configuration, then run the HTTP service.
* ``provision`` - apply the ``messages`` provisioning script.
* ``info`` - print the metadata banner.

Expected failures (missing ``DD_API_KEY``, invalid values, an address already
in use) are converted to :class:`click.ClickException` so the process exits
non-zero with a one-line diagnostic instead of a traceback.
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __init__conf__
from . import config as config_module
from .provision import provision as provision_database
from . import server as server_module

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(
    __init__conf__.version,
    "--version",
    "-V",
    prog_name=__init__conf__.shell_command,
    message="%(version)s",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before reading configuration (default: ${config_module.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None) -> None:
    """Hello-world HTTP service shipping its logs to Datadog."""

    if use_dotenv is None:
        try:
            use_dotenv = config_module.dotenv_requested()
        except config_module.ConfigurationError as exc:
            raise click.ClickException(str(exc)) from exc
    if use_dotenv:
        config_module.enable_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(__init__conf__.summary_info(), nl=False)


@cli.command()
def info() -> None:
    """Print package metadata."""

    click.echo(__init__conf__.summary_info(), nl=False)


@cli.command()
@click.option("--host", default=None, help="Interface to listen on (default: $HOST or 127.0.0.1).")
@click.option("--port", type=click.IntRange(0, 65535), default=None, help="Port to listen on (default: $PORT or 8000).")
@click.option("--dev/--no-dev", default=None, help="Prefer *_DEV configuration values (default: $GREETING_DEV).")
def serve(host: str | None, port: int | None, dev: bool | None) -> None:
    """Start the HTTP service until interrupted."""

    try:
        settings = config_module.load_settings(dev=dev, host=host, port=port)
    except config_module.ConfigurationError as exc:
        raise click.ClickException(f"configuration error: {exc}") from exc
    try:
        server_module.run(settings)
    except server_module.ServerBindError as exc:
        raise click.ClickException(str(exc.strerror or exc)) from exc


@cli.command()
@click.option(
    "--database",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="GREETING_DATABASE",
    required=True,
    help="SQLite database file to provision (default: $GREETING_DATABASE).",
)
def provision(database: Path) -> None:
    """Create the messages table and seed its first row if absent."""

    rows = provision_database(database)
    click.echo(f"{database}: messages holds {rows} row(s)")


__all__ = ["cli"]
