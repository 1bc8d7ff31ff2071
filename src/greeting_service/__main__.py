"""Console entry point for ``python -m greeting_service`` and ``greeting-service``."""

from __future__ import annotations

from typing import Sequence

import click

from .cli import cli


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Click group and translate expected failures into exit codes.

    Parameters
    ----------
    argv:
        Optional sequence of argument strings (defaults to ``sys.argv[1:]``).

    Returns
    -------
    int
        Zero on success, the exception's exit code for CLI errors.

    Examples
    --------
    >>> main(["--version"])
    0.1.0
    0
    """

    args = list(argv) if argv is not None else None
    try:
        result = cli.main(args=args, prog_name="greeting-service", standalone_mode=False)
    except click.ClickException as error:
        error.show()
        return error.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
