"""agentlab status command.

Shows the knowledge base overview: database file, schema version,
projects, chunks, embeddings still pending, and the configured models.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel

from agentlab.cli.common import open_db
from agentlab.config import AgentLabConfig, ConfigError, load_config, load_credentials
from agentlab.db.connection import path_from_url
from agentlab.db.migrations import current_version
from agentlab.db.repository import Repository

console = Console()


def status_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (overrides AGENTLAB_DATABASE_URL)."),
    ] = None,
) -> None:
    """Show knowledge base status and configured models."""
    # Status works even with a broken agentlab.yaml
    try:
        cfg = load_config()
    except ConfigError:
        cfg = AgentLabConfig()

    db_path = db or _db_from_env()

    # ---- Panel 1: Database ----
    _show_database_panel(db_path)

    # ---- Panel 2: Knowledge Base ----
    if db_path is not None and db_path.exists():
        conn = open_db(db_path)
        try:
            _show_knowledge_panel(Repository(conn), current_version(conn))
        finally:
            conn.close()
    else:
        console.print(
            Panel(
                "[yellow]No database found.[/]\n"
                "  Run:  agentlab init",
                title="[bold]Knowledge Base[/]",
                expand=False,
            )
        )

    # ---- Panel 3: Models ----
    _show_models_panel(cfg)


# ---------------------------------------------------------------------------
# Panel renderers
# ---------------------------------------------------------------------------


def _show_database_panel(db_path: Path | None) -> None:
    if db_path is None:
        db_info = "[yellow](not configured)[/]"
    elif db_path.exists():
        size_mb = db_path.stat().st_size / (1024 * 1024)
        db_info = f"{db_path} ({size_mb:.1f} MB)"
    else:
        db_info = f"{db_path} [yellow]✗ missing[/]"
    console.print(Panel(f"Database:  {db_info}", title="[bold]Project[/]", expand=False))


def _show_knowledge_panel(repo: Repository, schema_version: int) -> None:
    projects = repo.list_projects()
    documents = repo.count_documents()
    embeddings = repo.count_embeddings()
    dims = repo.embedding_dimensions()

    lines = [
        f"Schema: v{schema_version}",
        f"Projects: [bold]{len(projects)}[/]  |  "
        f"Chunks: [bold]{documents:,}[/]  |  "
        f"Embeddings: [bold]{embeddings:,}[/]",
    ]
    pending = documents - embeddings
    if pending > 0:
        lines.append(f"[yellow]{pending:,} chunks not embedded yet.[/]  Run:  agentlab embed")
    if dims:
        lines.append(f"Vector dimensions: {dims}")
    if not projects:
        lines.append("[dim]No projects ingested yet.[/]")

    console.print(Panel("\n".join(lines), title="[bold]Knowledge Base[/]", expand=False))


def _show_models_panel(cfg: AgentLabConfig) -> None:
    lines = [
        f"Embedding:  {cfg.embedding.model} ({cfg.embedding.dimensions} dims)",
        f"Generation: {cfg.generation.model} (answers in {cfg.generation.language})",
        f"Retrieval:  top {cfg.retrieval.top_k}, cite {cfg.retrieval.citation_k}",
    ]
    console.print(Panel("\n".join(lines), title="[bold]Models[/]", expand=False))


def _db_from_env() -> Path | None:
    url = load_credentials().database_url
    if not url:
        return None
    try:
        return path_from_url(url)
    except ConfigError:
        return None
