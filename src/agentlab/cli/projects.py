"""agentlab projects — list stored projects, optionally filtered."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from agentlab.cli.common import open_db, resolve_db_path
from agentlab.cli.errors import err_no_db
from agentlab.config import load_credentials
from agentlab.db.repository import Repository

console = Console()


def projects_cmd(
    search: Annotated[
        str | None,
        typer.Argument(help="Filter by title text or project id."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (overrides AGENTLAB_DATABASE_URL)."),
    ] = None,
) -> None:
    """List projects in the knowledge base."""
    db_path = resolve_db_path(console, db, load_credentials())
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    conn = open_db(db_path)
    try:
        repo = Repository(conn)
        projects = repo.list_projects(search)
        counts = {p.id: repo.count_documents(p.id) for p in projects}
    finally:
        conn.close()

    if not projects:
        console.print("[yellow]No matching projects.[/]")
        return

    table = Table(title="Projects")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Tech stack")
    table.add_column("Chunks", justify="right")
    for p in projects:
        table.add_row(p.id, p.title, p.category, ", ".join(p.tech_stack), str(counts[p.id]))
    console.print(table)
