"""Tests for the command-line entry point."""

from unittest.mock import Mock, patch

import pytest
import yaml
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from deactivator.main import build_parser, load_runtime_config, main
from deactivator.persistence import JobRecordRepository, close_database, get_session, init_database


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Config file, batch file and seeded record store in a temp directory."""
    monkeypatch.chdir(tmp_path)

    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.safe_dump(
            {
                "notifications": {"admin_recipients": ["admin@x.com"]},
                "logging": {"level": "INFO", "format": "json"},
            },
            f,
        )

    batch_path = tmp_path / "batch.yaml"
    batch_path.write_text("- job: nightly\n  action: delete\n  reason: build timeout\n")

    db_url = f"sqlite:///{tmp_path / 'records.db'}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    init_database(db_url)
    with get_session() as session:
        JobRecordRepository(session).add("nightly", description="Nightly")
    close_database()

    return {"config": config_path, "batch": batch_path, "db_url": db_url}


def read_description(db_url, name):
    init_database(db_url)
    try:
        with get_session() as session:
            return JobRecordRepository(session).get(name).get_description()
    finally:
        close_database()


def test_parser_requires_batch():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_defaults(tmp_path):
    args = build_parser().parse_args(["--batch", str(tmp_path / "b.yaml")])

    assert args.config is None
    assert args.log_level is None


def test_log_level_priority(workspace, monkeypatch):
    _, env_config = load_runtime_config(workspace["config"], None)
    assert env_config.log_level == "INFO"

    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    _, env_config = load_runtime_config(workspace["config"], None)
    assert env_config.log_level == "WARNING"

    _, env_config = load_runtime_config(workspace["config"], "DEBUG")
    assert env_config.log_level == "DEBUG"


def test_main_dispatches_batch_without_mail(workspace):
    exit_code = main(["--config", str(workspace["config"]), "--batch", str(workspace["batch"])])

    assert exit_code == 0
    assert "Deleted: build timeout" in read_description(workspace["db_url"], "nightly")


def test_main_sends_mail_when_configured(workspace, monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_REPLY_TO", "ops@example.com")
    smtp_client = Mock()

    with patch("deactivator.notifications.dispatcher.SMTPClient", return_value=smtp_client):
        exit_code = main(
            ["--config", str(workspace["config"]), "--batch", str(workspace["batch"])]
        )

    assert exit_code == 0
    smtp_client.send.assert_called_once()
    assert smtp_client.send.call_args[0][0]["To"] == "admin@x.com"


def test_main_configuration_error(workspace, monkeypatch, capsys):
    monkeypatch.setenv("SMTP_PORT", "not-a-port")

    exit_code = main(["--config", str(workspace["config"]), "--batch", str(workspace["batch"])])

    assert exit_code == 1
    assert "Configuration Error" in capsys.readouterr().err


def test_main_batch_error(workspace, capsys):
    exit_code = main(
        ["--config", str(workspace["config"]), "--batch", str(workspace["batch"].parent / "nope.yaml")]
    )

    assert exit_code == 1
    assert "Batch Error" in capsys.readouterr().err


def test_main_database_error(workspace, monkeypatch, capsys):
    monkeypatch.setenv("DATABASE_URL", "notadialect://nowhere")

    exit_code = main(["--config", str(workspace["config"]), "--batch", str(workspace["batch"])])

    assert exit_code == 1
    assert "Database Error" in capsys.readouterr().err


def test_main_failed_commit_is_database_error(workspace, capsys):
    with patch.object(
        Session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("database is locked"))
    ):
        exit_code = main(
            ["--config", str(workspace["config"]), "--batch", str(workspace["batch"])]
        )

    assert exit_code == 1
    assert "Database Error" in capsys.readouterr().err
    assert read_description(workspace["db_url"], "nightly") == "Nightly"
