"""Shared fixtures for the deactivator test suite."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

import pytest

from deactivator.logging.context import clear_log_context
from deactivator.persistence.database import close_database, init_database

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
FIXED_LABEL = "2026-01-02T03:04:05Z"

ENV_VARS = (
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_USE_SSL",
    "SMTP_REPLY_TO",
    "ADMIN_NOTIFICATION",
    "LOG_LEVEL",
    "DATABASE_URL",
    "ENVIRONMENT",
)


@dataclass
class FakeMailSettings:
    """In-test stand-in for the global mail configuration."""

    smtp_host: Optional[str] = None
    smtp_port: Optional[Union[str, int]] = None
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    use_ssl: bool = False
    reply_to_address: Optional[str] = None


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove deactivator environment variables for every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo configure_logging() side effects and clear logging context."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    clear_log_context()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_log_context()


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def mail_settings():
    """Minimal enabled mail configuration (no auth, no SSL)."""
    return FakeMailSettings(
        smtp_host="smtp.example.com",
        reply_to_address="ops@example.com",
    )


@pytest.fixture
def database(tmp_path):
    """Initialized SQLite job record store in a temporary directory."""
    db_url = f"sqlite:///{tmp_path / 'records.db'}"
    init_database(db_url)
    yield db_url
    close_database()


@pytest.fixture
def fixed_label():
    """FIXED_NOW as rendered in descriptions and log lines."""
    return FIXED_LABEL


@pytest.fixture
def make_mail_settings():
    """Factory for FakeMailSettings with arbitrary fields."""
    return FakeMailSettings
