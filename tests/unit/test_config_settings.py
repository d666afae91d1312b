import os
from pathlib import Path

import pytest

from iam_import.config import settings

SETTINGS_ENV = (
    "IMPORT_MAX_USERS",
    "IMPORT_VALIDATE_RECORDS",
    "IMPORT_LOG_LEVEL",
    "JSON_MAX_SIZE_BYTES",
    "AUDIT_ENABLED",
    "AUDIT_LOG_DIR",
    "AUDIT_LOG_SIGNING_KEY",
)


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)

    real_path = settings.Path

    # Point /run/secrets at an empty temp directory
    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path / "secrets"
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_defaults(clean_env):
    cfg = settings.load_settings()
    assert cfg.max_users == 1000
    assert cfg.validate_records is True
    assert cfg.json_max_size_bytes == 1024 * 1024
    assert cfg.log_level == "INFO"
    assert cfg.audit_enabled is True
    assert cfg.audit_log_dir == Path(".runtime/audit")
    assert cfg.audit_log_signing_key == ""
    assert cfg.audit_signing_enabled is False


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("IMPORT_MAX_USERS", "25")
    monkeypatch.setenv("IMPORT_VALIDATE_RECORDS", "false")
    monkeypatch.setenv("IMPORT_LOG_LEVEL", "debug")
    monkeypatch.setenv("JSON_MAX_SIZE_BYTES", "2048")
    monkeypatch.setenv("AUDIT_ENABLED", "0")
    monkeypatch.setenv("AUDIT_LOG_DIR", str(clean_env / "trail"))
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "env-key")

    cfg = settings.load_settings()
    assert cfg.max_users == 25
    assert cfg.validate_records is False
    assert cfg.log_level == "DEBUG"
    assert cfg.json_max_size_bytes == 2048
    assert cfg.audit_enabled is False
    assert cfg.audit_log_dir == clean_env / "trail"
    assert cfg.audit_log_signing_key == "env-key"
    assert cfg.audit_signing_enabled is True


@pytest.mark.parametrize("value", ["many", "0", "-3"])
def test_invalid_max_users(clean_env, monkeypatch, value):
    monkeypatch.setenv("IMPORT_MAX_USERS", value)
    with pytest.raises(RuntimeError, match="IMPORT_MAX_USERS"):
        settings.load_settings()


def test_invalid_log_level(clean_env, monkeypatch):
    monkeypatch.setenv("IMPORT_LOG_LEVEL", "chatty")
    with pytest.raises(RuntimeError, match="IMPORT_LOG_LEVEL"):
        settings.load_settings()


def test_signing_key_from_run_secrets(clean_env, monkeypatch):
    secrets_dir = clean_env / "secrets"
    secrets_dir.mkdir()
    (secrets_dir / "audit_log_signing_key").write_text("file-key\n")
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "env-key")

    cfg = settings.load_settings()
    assert cfg.audit_log_signing_key == "file-key"
    assert os.environ["AUDIT_LOG_SIGNING_KEY"] == "file-key"


def test_settings_summary_goes_to_stderr(clean_env, capsys):
    settings.load_settings()
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[settings] max_users=1000" in captured.err
