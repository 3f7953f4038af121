"""SQLite connection layer with sqlite-vec extension."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import sqlite_vec

from agentlab.config import ConfigError

_REMOTE_SCHEMES = ("libsql://", "http://", "https://", "ws://", "wss://")


def path_from_url(url: str) -> Path:
    """Resolve a database URL to a local file path.

    Accepts a plain path, ``file:<path>`` or ``sqlite:///<path>``.

    Raises:
        ConfigError: If *url* is empty or points at a remote database.
    """
    url = url.strip()
    if not url:
        raise ConfigError("Database URL is empty.")
    if url.startswith(_REMOTE_SCHEMES):
        raise ConfigError(
            f"Remote database URLs are not supported: '{url}'\n"
            "  Point AGENTLAB_DATABASE_URL at a local file, e.g. file:agentlab.db"
        )
    if url.startswith("sqlite:///"):
        return Path(url[len("sqlite:///"):])
    if url.startswith("file:"):
        return Path(url[len("file:"):].split("?", 1)[0])
    return Path(url)


class Database:
    """Knowledge-base SQLite database with sqlite-vec distance functions."""

    def __init__(self, db_path: Path | str) -> None:
        """Store the database path. Call connect() to open the connection.

        Args:
            db_path: Path to the SQLite database file (created if missing).
        """
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @classmethod
    def from_url(cls, url: str) -> Database:
        """Build a Database from a ``AGENTLAB_DATABASE_URL`` style string."""
        return cls(path_from_url(url))

    def connect(self) -> sqlite3.Connection:
        """Open a connection, load sqlite-vec, and return the connection."""
        if self.db_path.parent != Path("."):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.enable_load_extension(True)
        sqlite_vec.load(conn)
        conn.enable_load_extension(False)
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def __enter__(self) -> sqlite3.Connection:
        """Open the database and return the connection (context manager support)."""
        self._conn = self.connect()
        return self._conn

    def __exit__(self, *args: object) -> None:
        """Close the connection when leaving the context manager."""
        if self._conn:
            self._conn.close()
            self._conn = None
