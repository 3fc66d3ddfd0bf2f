from __future__ import annotations

import json
from datetime import date

from core.config import ENV_DATA_DIR, ENV_LOG_LEVEL, Settings, load_settings
from core.services.directory_service import ContactDirectory

from conftest import FIXED_TODAY


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(ENV_DATA_DIR, raising=False)
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    s = load_settings(tmp_path)
    assert s.data_path == tmp_path / "contacts.dat"
    assert s.export_file == "contacts_export.csv"
    assert s.backup_enabled is False
    assert s.log_level == "WARNING"


def test_settings_json_overrides(tmp_path, monkeypatch):
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    (tmp_path / "settings.json").write_text(
        json.dumps({"data_file": "mine.dat", "backup_enabled": True, "log_level": "info"}),
        encoding="utf-8",
    )
    s = load_settings(tmp_path)
    assert s.data_file == "mine.dat"
    assert s.backup_enabled is True
    assert s.log_level == "INFO"


def test_env_and_explicit_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_DATA_DIR, str(tmp_path))
    monkeypatch.setenv(ENV_LOG_LEVEL, "debug")
    s = load_settings()
    assert s.data_dir == tmp_path
    assert s.log_level == "DEBUG"
    assert load_settings(log_level="ERROR").log_level == "ERROR"


def test_broken_settings_fall_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    (tmp_path / "settings.json").write_text("{not json", encoding="utf-8")
    assert load_settings(tmp_path).data_file == "contacts.dat"

    (tmp_path / "settings.json").write_text(json.dumps({"log_level": "LOUD"}), encoding="utf-8")
    s = load_settings(tmp_path)
    assert s.log_level == "WARNING"
    assert s.data_dir == tmp_path


def test_directory_from_settings(tmp_path):
    s = Settings(data_dir=tmp_path, backup_enabled=True, backup_keep=1)
    d = ContactDirectory.from_settings(s)
    assert d.repo.filepath == tmp_path / "contacts.dat"
    assert d.repo.backup_enabled is True
    d.create("Alice Johnson", "9876543210")
    assert (tmp_path / "contacts.dat").exists()


def test_reminder_days_drives_statistics_window(tmp_path):
    s = Settings(data_dir=tmp_path, reminder_days=3)
    d = ContactDirectory.from_settings(s, clock=lambda: FIXED_TODAY)
    assert d.reminder_days == 3
    d.create("Alice Johnson", "9876543210", birthday=date(1995, 6, 17))   # dans 2 jours
    d.create("Bob Smith", "8765432109", birthday=date(1990, 6, 25))       # dans 10 jours
    stats = d.statistics()
    assert stats.birthday_window == 3
    assert stats.upcoming_birthdays == 1

    default = ContactDirectory(tmp_path / "contacts.dat", clock=lambda: FIXED_TODAY)
    assert default.statistics().upcoming_birthdays == 2
