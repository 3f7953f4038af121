"""Helpers shared by the CLI commands: config, credentials, database handle."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import typer
from rich.console import Console

from agentlab.cli.errors import err_config, err_missing_setting, err_no_database_url
from agentlab.config import (
    AgentLabConfig,
    ConfigError,
    Credentials,
    load_config,
    load_credentials,
    missing_credentials,
)
from agentlab.db.connection import Database, path_from_url
from agentlab.db.schema import initialize
from agentlab.ingest.manifest import DEFAULT_DESCRIPTIONS
from agentlab.rag.answer import AnswerConfig
from agentlab.rag.retriever import RetrieverConfig


def load_config_or_exit(console: Console) -> AgentLabConfig:
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)


def report_credentials(console: Console, creds: Credentials | None = None) -> Credentials:
    """Print a configuration error per missing credential. Never exits."""
    creds = creds or load_credentials()
    for name in missing_credentials(creds):
        console.print(err_missing_setting(name))
    return creds


def resolve_db_path(console: Console, db: Path | None, creds: Credentials) -> Path:
    """Return *db* if given, else the path from AGENTLAB_DATABASE_URL."""
    if db is not None:
        return db
    if not creds.database_url:
        console.print(err_no_database_url())
        raise typer.Exit(1)
    try:
        return path_from_url(creds.database_url)
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)


def open_db(db_path: Path) -> sqlite3.Connection:
    """Open (or create) the knowledge base and run migrations."""
    conn = Database(db_path).connect()
    initialize(conn)
    return conn


def answer_config_for(cfg: AgentLabConfig, top_k: int | None = None) -> AnswerConfig:
    return AnswerConfig(
        generation_model=cfg.generation.model,
        language=cfg.generation.language,
        retriever=RetrieverConfig(
            embedding_model=cfg.embedding.model,
            top_k=top_k or cfg.retrieval.top_k,
            citation_k=cfg.retrieval.citation_k,
        ),
    )


def descriptions_for(cfg: AgentLabConfig) -> dict[str, str]:
    """Built-in project descriptions overlaid with agentlab.yaml's table."""
    return {**DEFAULT_DESCRIPTIONS, **cfg.descriptions}
