"""agentlab search — nearest documents for a query, without generation."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from agentlab.cli.common import (
    answer_config_for,
    load_config_or_exit,
    open_db,
    report_credentials,
    resolve_db_path,
)
from agentlab.cli.errors import err_answer_failed, err_no_db, err_no_embeddings
from agentlab.db.repository import Repository
from agentlab.rag.retriever import retrieve

console = Console()


def search_cmd(
    query: Annotated[str, typer.Argument(help="Question or keywords to search for.")],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (overrides AGENTLAB_DATABASE_URL)."),
    ] = None,
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Number of results (default: citation_k)."),
    ] = None,
) -> None:
    """Show the documents closest to QUERY by cosine distance."""
    cfg = load_config_or_exit(console)
    creds = report_credentials(console)
    db_path = resolve_db_path(console, db, creds)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    config = answer_config_for(cfg).retriever
    conn = open_db(db_path)
    try:
        repo = Repository(conn)
        if repo.count_embeddings() == 0:
            console.print(err_no_embeddings())
            raise typer.Exit(0)
        try:
            results = retrieve(query, repo, config, top_k=top_k or config.citation_k)
        except Exception as exc:
            console.print(err_answer_failed(str(exc)))
            raise typer.Exit(1)
    finally:
        conn.close()

    table = Table(title=f"Results for: {query}")
    table.add_column("#", justify="right")
    table.add_column("Source")
    table.add_column("Distance", justify="right")
    table.add_column("Match", justify="right")
    for i, result in enumerate(results, start=1):
        table.add_row(
            str(i),
            result.label,
            f"{result.distance:.4f}",
            f"{result.match_percentage}%",
        )
    console.print(table)
