"""Configuration for the wizard read from Streamlit secrets."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

from wizard.defaults import (
    DEFAULT_API_TIMEOUT,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_RESUME_WINDOW_MINUTES,
    DEFAULT_SNAPSHOT_DIR,
)

SECRETS_SECTION = "wizard_api"
FLAT_PREFIX = "wizard_"


@dataclass(frozen=True)
class WizardSettings:
    """Resolved wizard configuration."""

    base_url: Optional[str] = None
    token: Optional[str] = None
    timeout: float = DEFAULT_API_TIMEOUT
    resume_window_minutes: float = DEFAULT_RESUME_WINDOW_MINUTES
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    snapshot_dir: Path = DEFAULT_SNAPSHOT_DIR
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def api_configured(self) -> bool:
        return bool(self.base_url)


def _secrets_dict(name: str) -> Dict[str, Any]:
    """Return a mapping stored under ``name`` in Streamlit secrets."""

    try:
        value = st.secrets.get(name, {})  # type: ignore[arg-type]
    except Exception:  # pragma: no cover - no secrets file configured
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def _flat_secret(name: str) -> Any:
    try:
        return st.secrets.get(f"{FLAT_PREFIX}{name}")
    except Exception:  # pragma: no cover - no secrets file configured
        return None


def _number(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 0 else default


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def wizard_settings() -> WizardSettings:
    """Return wizard configuration from secrets in a normalised structure."""

    secrets = _secrets_dict(SECRETS_SECTION)

    def lookup(name: str) -> Any:
        value = secrets.get(name)
        if value is None:
            value = _flat_secret(name)
        return value

    log_level = (_text(lookup("log_level")) or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = DEFAULT_LOG_LEVEL

    snapshot_dir = _text(lookup("snapshot_dir"))
    return WizardSettings(
        base_url=_text(lookup("base_url")),
        token=_text(lookup("token")),
        timeout=_number(lookup("timeout"), DEFAULT_API_TIMEOUT),
        resume_window_minutes=_number(lookup("resume_window_minutes"), DEFAULT_RESUME_WINDOW_MINUTES),
        debounce_ms=int(_number(lookup("debounce_ms"), DEFAULT_DEBOUNCE_MS)),
        snapshot_dir=Path(snapshot_dir) if snapshot_dir else DEFAULT_SNAPSHOT_DIR,
        log_level=log_level,
    )


def configure_logging(settings: WizardSettings) -> None:
    """Set up root logging once for the Streamlit process."""

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["WizardSettings", "configure_logging", "wizard_settings"]
