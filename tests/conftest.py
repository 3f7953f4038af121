"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from agentlab.db.connection import Database
from agentlab.db.schema import initialize


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / "agentlab.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path_factory):
    """Keep the developer's shell and ~/.agentlab out of every test."""
    for name in (
        "AGENTLAB_DATABASE_URL",
        "AGENTLAB_DATABASE_AUTH_TOKEN",
        "AGENTLAB_GENERATION_MODEL",
        "AGENTLAB_EMBEDDING_MODEL",
        "GEMINI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "agentlab.config._GLOBAL_CONFIG_PATH",
        tmp_path_factory.mktemp("home") / "config.yaml",
    )
