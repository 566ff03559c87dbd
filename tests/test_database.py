from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from visa_bot.core.database import VisaDatabase
from visa_bot.core.errors import PersistenceError


def _make_db(tmp_path: Path) -> VisaDatabase:
    return VisaDatabase(str(tmp_path / "data" / "visa.db"))


def _application_rows(db: VisaDatabase) -> list[tuple]:
    with sqlite3.connect(db.db_path) as conn:
        return conn.execute("SELECT user_id, status FROM applications").fetchall()


def test_creates_parent_directory(tmp_path: Path) -> None:
    db = _make_db(tmp_path)
    assert Path(db.db_path).exists()


def test_decisions_are_last_write_wins_with_one_record(tmp_path: Path) -> None:
    db = _make_db(tmp_path)

    db.set_application_status(123, "accepted")
    db.set_application_status(123, "rejected")

    assert _application_rows(db) == [("123", "rejected")]
    record = db.get_application(123)
    assert record is not None
    assert record["status"] == "rejected"
    assert record["updated_at"]


def test_reaccepting_is_idempotent(tmp_path: Path) -> None:
    db = _make_db(tmp_path)

    db.set_application_status(7, "accepted")
    db.set_application_status(7, "accepted")

    assert _application_rows(db) == [("7", "accepted")]


def test_unknown_status_is_rejected(tmp_path: Path) -> None:
    db = _make_db(tmp_path)
    with pytest.raises(ValueError):
        db.set_application_status(1, "pending")
    assert db.get_application(1) is None


def test_setting_one_channel_keeps_the_other(tmp_path: Path) -> None:
    db = _make_db(tmp_path)

    db.set_log_channel(500, 9)
    db.set_response_channel(500, 10)
    db.set_log_channel(500, 11)

    assert db.get_settings(500) == {"guild_id": 500, "log_channel_id": 11, "response_channel_id": 10}
    assert db.get_settings(501) is None


def test_get_all_settings_returns_every_guild(tmp_path: Path) -> None:
    db = _make_db(tmp_path)
    db.set_log_channel(1, 100)
    db.set_response_channel(2, 200)

    records = sorted(db.get_all_settings(), key=lambda r: r["guild_id"])

    assert records == [
        {"guild_id": 1, "log_channel_id": 100, "response_channel_id": None},
        {"guild_id": 2, "log_channel_id": None, "response_channel_id": 200},
    ]


def test_unopenable_database_raises_persistence_error(tmp_path: Path) -> None:
    # A directory cannot be opened as a database file
    with pytest.raises(PersistenceError):
        VisaDatabase(str(tmp_path))
