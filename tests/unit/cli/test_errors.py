"""Tests for agentlab rich error messages."""

from __future__ import annotations

import pytest
from rich.console import Console

from agentlab.cli.common import report_credentials
from agentlab.cli.errors import (
    err_answer_failed,
    err_config,
    err_missing_setting,
    err_no_api_key,
    err_no_database_url,
    err_no_db,
    err_no_embeddings,
    err_no_projects,
)
from agentlab.config import load_credentials


def _has_action(msg: str) -> bool:
    """Every error must contain an actionable instruction."""
    lower = msg.lower()
    return any(kw in lower for kw in ["run:", "set:", "export ", "agentlab ", "--db", "check "])


@pytest.mark.parametrize(
    "msg",
    [
        err_missing_setting("GEMINI_API_KEY"),
        err_no_database_url(),
        err_no_db("agentlab.db"),
        err_no_api_key("gemini", "GEMINI_API_KEY"),
        err_no_embeddings(),
        err_answer_failed("timeout"),
    ],
)
def test_errors_have_action(msg: str) -> None:
    assert _has_action(msg)


def test_missing_setting_is_configuration_error() -> None:
    msg = err_missing_setting("AGENTLAB_DATABASE_URL")
    assert "Configuration error" in msg
    assert "export AGENTLAB_DATABASE_URL=" in msg


def test_err_no_db_contains_path() -> None:
    assert "kb/agentlab.db" in err_no_db("kb/agentlab.db")


def test_err_no_api_key_contains_env_var() -> None:
    msg = err_no_api_key("gemini", "GEMINI_API_KEY")
    assert "'gemini'" in msg
    assert "GEMINI_API_KEY" in msg


def test_err_no_projects_explains_naming() -> None:
    assert "01_My-Project" in err_no_projects("/data")


def test_err_config_passes_message() -> None:
    assert "bad value" in err_config("bad value")


def test_report_credentials_prints_each_missing_setting() -> None:
    console = Console(record=True, width=120)
    creds = report_credentials(console, load_credentials({"GEMINI_API_KEY": "key"}))
    out = console.export_text()
    assert creds.api_key == "key"
    assert "AGENTLAB_DATABASE_URL is not set" in out
    assert "AGENTLAB_DATABASE_AUTH_TOKEN is not set" in out
    assert "GEMINI_API_KEY is not set" not in out
