"""Provisioning script for the ``messages`` relation.

The running service never reads this table; deployment tooling applies the
script once (``greeting-service provision``) before or independently of
``serve``. Applying it again is a no-op.
"""

from __future__ import annotations

import sqlite3
from contextlib import closing
from importlib import resources
from pathlib import Path

SCRIPT_NAME = "db.sql"


def load_script() -> str:
    """Return the SQL shipped in ``greeting_service/sql``."""
    return resources.files("greeting_service").joinpath("sql").joinpath(SCRIPT_NAME).read_text(encoding="utf-8")


def provision(database: str | Path) -> int:
    """Apply the provisioning script to the SQLite file ``database``.

    Parent directories are created as needed. Returns the number of rows in
    ``messages`` afterwards, which is ``1`` unless other tooling added rows.
    """

    target = Path(database)
    target.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(target)) as conn:
        conn.executescript(load_script())
        conn.commit()
        (count,) = conn.execute("SELECT COUNT(*) FROM messages").fetchone()
    return int(count)


__all__ = ["load_script", "provision"]
