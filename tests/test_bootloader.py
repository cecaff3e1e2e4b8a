import json
import sys
from pathlib import Path

import pytest
from sqlalchemy import func, select

import bootloader
from database import Database
from models.database import Task, User
from services.repository import TaskRepository
from shared.config import AppConfig


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["bootloader.py", *argv])
    return bootloader.main()


def test_show_config_masks_password(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("DB_PASSWORD", "hunter2")
    monkeypatch.setenv("APP_TITLE", "Bootloader Test")

    assert _run(monkeypatch, "show-config") == 0

    shown = json.loads(capsys.readouterr().out)
    assert shown["db.password"] == "***"
    assert shown["app.title"] == "Bootloader Test"


def test_check_db_round_trip_cleans_up(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    db_url = f"sqlite:///{tmp_path / 'smoke.db'}"
    monkeypatch.setenv("DB_URL", db_url)

    assert _run(monkeypatch, "check-db") == 0
    out = capsys.readouterr().out
    assert "[OK] Task created" in out
    assert "=== Test Complete ===" in out

    database = Database(AppConfig(overrides={"db.url": db_url}, load_env_file=False))
    try:
        with database.session() as session:
            assert session.execute(select(func.count()).select_from(User)).scalar_one() == 0
            assert session.execute(select(func.count()).select_from(Task)).scalar_one() == 0
    finally:
        database.dispose()


def test_check_db_ignores_leftover_smoke_users(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    db_url = f"sqlite:///{tmp_path / 'smoke.db'}"
    database = Database(AppConfig(overrides={"db.url": db_url}, load_env_file=False))
    try:
        TaskRepository(database).register("smoke-test@example.com", "changed-password", "Old Smoke")
    finally:
        database.dispose()
    monkeypatch.setenv("DB_URL", db_url)

    assert _run(monkeypatch, "check-db") == 0
    assert _run(monkeypatch, "check-db") == 0
    assert "[FAILED]" not in capsys.readouterr().out


def test_smoke_user_emails_are_unique() -> None:
    first, second = bootloader.smoke_user_email(), bootloader.smoke_user_email()
    assert first != second
    assert first.endswith("@example.com")


def test_check_db_reports_bad_schema_mode(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("DB_URL", "sqlite://")
    monkeypatch.setenv("DB_SCHEMA_MODE", "sometimes")

    assert _run(monkeypatch, "check-db") == 1
    assert "[FAILED] Database setup failed" in capsys.readouterr().out
