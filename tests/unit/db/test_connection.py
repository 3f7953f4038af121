"""Tests for the database connection layer."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentlab.config import ConfigError
from agentlab.db.connection import Database, path_from_url


# ------------------------------------------------------------------
# path_from_url
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("agentlab.db", Path("agentlab.db")),
        ("file:data/kb.db", Path("data/kb.db")),
        ("file:kb.db?mode=rwc", Path("kb.db")),
        ("sqlite:///var/kb.db", Path("var/kb.db")),
        ("  file:kb.db  ", Path("kb.db")),
    ],
)
def test_path_from_url(url, expected):
    assert path_from_url(url) == expected


@pytest.mark.parametrize("url", ["libsql://kb.turso.io", "https://kb.example.com"])
def test_path_from_url_rejects_remote(url):
    with pytest.raises(ConfigError, match="Remote database"):
        path_from_url(url)


def test_path_from_url_rejects_empty():
    with pytest.raises(ConfigError, match="empty"):
        path_from_url("   ")


# ------------------------------------------------------------------
# Database
# ------------------------------------------------------------------


def test_connect_creates_parent_directory(tmp_path):
    db = Database(tmp_path / "nested" / "kb.db")
    conn = db.connect()
    try:
        assert (tmp_path / "nested").is_dir()
    finally:
        conn.close()


def test_connect_loads_sqlite_vec(tmp_path):
    conn = Database(tmp_path / "kb.db").connect()
    try:
        (version,) = conn.execute("SELECT vec_version()").fetchone()
        assert version
    finally:
        conn.close()


def test_foreign_keys_enabled(tmp_path):
    conn = Database(tmp_path / "kb.db").connect()
    try:
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    finally:
        conn.close()


def test_context_manager_closes(tmp_path):
    db = Database(tmp_path / "kb.db")
    with db as conn:
        conn.execute("SELECT 1")
    assert db._conn is None


def test_from_url(tmp_path):
    db = Database.from_url(f"file:{tmp_path / 'kb.db'}")
    assert db.db_path == tmp_path / "kb.db"
