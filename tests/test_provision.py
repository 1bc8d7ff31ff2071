from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from greeting_service.provision import load_script, provision


def test_script_declares_schema_and_seed() -> None:
    script = load_script()

    assert "CREATE TABLE IF NOT EXISTS messages" in script
    assert "ON CONFLICT (id) DO NOTHING" in script


def test_provision_creates_parent_directories(tmp_path: Path) -> None:
    database = tmp_path / "a" / "b" / "greeting.sqlite3"

    assert provision(database) == 1
    assert database.is_file()


def test_repeated_provisioning_keeps_one_row(tmp_path: Path) -> None:
    database = tmp_path / "greeting.sqlite3"

    counts = [provision(database) for _ in range(3)]

    assert counts == [1, 1, 1]
    with sqlite3.connect(database) as conn:
        assert conn.execute("SELECT id FROM messages").fetchall() == [(1,)]


def test_existing_rows_are_preserved(tmp_path: Path) -> None:
    database = tmp_path / "greeting.sqlite3"
    provision(database)
    with sqlite3.connect(database) as conn:
        conn.execute("UPDATE messages SET message = 'edited' WHERE id = 1")
        conn.execute("INSERT INTO messages (id, message) VALUES (2, 'second')")

    assert provision(database) == 2
    with sqlite3.connect(database) as conn:
        assert conn.execute("SELECT message FROM messages WHERE id = 1").fetchone() == ("edited",)


def test_message_column_rejects_null(tmp_path: Path) -> None:
    database = tmp_path / "greeting.sqlite3"
    provision(database)

    with sqlite3.connect(database) as conn, pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO messages (id, message) VALUES (3, NULL)")
