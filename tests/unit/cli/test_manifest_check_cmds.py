"""Tests for agentlab manifest and check commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from agentlab.cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _workdir(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def full_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("AGENTLAB_DATABASE_URL", f"file:{tmp_path / 'kb.db'}")
    monkeypatch.setenv("AGENTLAB_DATABASE_AUTH_TOKEN", "token")
    monkeypatch.setenv("GEMINI_API_KEY", "key")


# ------------------------------------------------------------------
# manifest
# ------------------------------------------------------------------


def test_manifest_writes_json(tmp_path: Path) -> None:
    root = tmp_path / "projects"
    project = root / "20_FastAPI-Deploy"
    project.mkdir(parents=True)
    (project / "README.md").write_text("Serve agents with FastAPI.", encoding="utf-8")
    (project / "app.py").write_text("app = FastAPI()", encoding="utf-8")
    (project / "screenshot.png").write_bytes(b"png")
    output = tmp_path / "web" / "generated-projects.json"

    result = runner.invoke(
        app,
        [
            "manifest", "--root", str(root), "--output", str(output),
            "--assets-dir", str(tmp_path / "web" / "assets"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Scan complete" in result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data[0]["id"] == "20"
    assert data[0]["mainCodePath"] == "20_FastAPI-Deploy/app.py"
    assert data[0]["techStack"] == ["FastAPI"]
    assert data[0]["assets"] == ["assets/20_FastAPI-Deploy/screenshot.png"]
    assert (tmp_path / "web" / "assets" / "20_FastAPI-Deploy" / "screenshot.png").exists()


def test_manifest_description_override_from_config(tmp_path: Path) -> None:
    root = tmp_path / "projects"
    (root / "20_Deploy").mkdir(parents=True)
    (tmp_path / "agentlab.yaml").write_text(
        "descriptions:\n  '20': Deployment server\n", encoding="utf-8"
    )
    output = tmp_path / "out.json"
    runner.invoke(app, ["manifest", "--root", str(root), "--output", str(output)])
    assert json.loads(output.read_text(encoding="utf-8"))[0]["description"] == "Deployment server"


def test_manifest_without_projects(tmp_path: Path) -> None:
    result = runner.invoke(app, ["manifest", "--root", str(tmp_path)])
    assert result.exit_code == 0
    assert "No project folders" in result.output
    assert not (tmp_path / "generated-projects.json").exists()


# ------------------------------------------------------------------
# check
# ------------------------------------------------------------------


def test_check_reports_missing_settings() -> None:
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 1
    assert "AGENTLAB_DATABASE_URL MISSING" in result.output
    assert "GEMINI_API_KEY MISSING" in result.output
    assert "No API key for 'gemini'" in result.output


def test_check_ok(full_env) -> None:
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 0, result.output
    assert "Configuration OK" in result.output


def test_check_live_embedding(full_env) -> None:
    with patch("agentlab.rag.llm_client.embed", return_value=[0.5] * 768) as mock_embed:
        result = runner.invoke(app, ["check", "--live"])
    assert result.exit_code == 0, result.output
    assert "768 dims" in result.output
    assert "0.5000" in result.output
    assert mock_embed.call_args.args[1] == "This is a test message for embedding."


def test_check_live_failure(full_env) -> None:
    with patch("agentlab.rag.llm_client.embed", side_effect=RuntimeError("invalid key")):
        result = runner.invoke(app, ["check", "--live"])
    assert result.exit_code == 1
    assert "invalid key" in result.output
