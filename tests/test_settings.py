"""Tests for reading wizard settings from Streamlit secrets."""

from __future__ import annotations

import importlib
from pathlib import Path


def _settings_module(monkeypatch, secrets):
    settings = importlib.import_module("wizard.settings")
    monkeypatch.setattr(settings.st, "secrets", secrets, raising=False)
    return settings


def test_defaults_without_secrets(monkeypatch) -> None:
    settings = _settings_module(monkeypatch, {})

    resolved = settings.wizard_settings()

    assert resolved.api_configured is False
    assert resolved.timeout == 10
    assert resolved.resume_window_minutes == 30
    assert resolved.debounce_ms == 300
    assert resolved.snapshot_dir == Path(".wizard") / "snapshots"
    assert resolved.log_level == "INFO"


def test_section_values_take_precedence(monkeypatch) -> None:
    secrets = {
        "wizard_api": {
            "base_url": " https://api.example.org ",
            "token": "abc",
            "timeout": "5",
            "resume_window_minutes": 15,
            "log_level": "debug",
        },
        "wizard_base_url": "https://ignored.example.org",
        "wizard_debounce_ms": 150,
        "wizard_snapshot_dir": "/tmp/wizard",
    }
    settings = _settings_module(monkeypatch, secrets)

    resolved = settings.wizard_settings()

    assert resolved.api_configured is True
    assert resolved.base_url == "https://api.example.org"
    assert resolved.token == "abc"
    assert resolved.timeout == 5.0
    assert resolved.resume_window_minutes == 15.0
    assert resolved.debounce_ms == 150
    assert resolved.snapshot_dir == Path("/tmp/wizard")
    assert resolved.log_level == "DEBUG"


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    secrets = {"wizard_api": {"timeout": "soon", "debounce_ms": -5, "log_level": "chatty"}}
    settings = _settings_module(monkeypatch, secrets)

    resolved = settings.wizard_settings()

    assert resolved.timeout == 10
    assert resolved.debounce_ms == 300
    assert resolved.log_level == "INFO"


def test_session_id_is_never_taken_from_secrets(monkeypatch) -> None:
    """Every visitor starts their own session; none is configured globally."""

    secrets = {"wizard_api": {"base_url": "https://api.example.org", "session_id": "shared"}}
    settings = _settings_module(monkeypatch, secrets)

    resolved = settings.wizard_settings()

    assert not hasattr(resolved, "session_id")
