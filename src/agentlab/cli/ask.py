"""agentlab ask — answer one question from the knowledge base.

  agentlab ask "How does the news reader collect articles?"
  agentlab ask --stream "..."     (print fragments as they arrive)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markdown import Markdown

from agentlab.cli.common import (
    answer_config_for,
    load_config_or_exit,
    open_db,
    report_credentials,
    resolve_db_path,
)
from agentlab.cli.errors import err_answer_failed, err_no_db
from agentlab.db.models import SearchResult
from agentlab.db.repository import Repository
from agentlab.rag.answer import AnswerError, generate_answer, stream_answer

console = Console()


def ask_cmd(
    query: Annotated[str, typer.Argument(help="Question to answer.")],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (overrides AGENTLAB_DATABASE_URL)."),
    ] = None,
    stream: Annotated[
        bool,
        typer.Option("--stream/--no-stream", help="Print the answer while it is generated."),
    ] = False,
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Number of context chunks (default: top_k)."),
    ] = None,
) -> None:
    """Answer QUERY using retrieved project files as context."""
    cfg = load_config_or_exit(console)
    creds = report_credentials(console)
    db_path = resolve_db_path(console, db, creds)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    config = answer_config_for(cfg, top_k=top_k)
    conn = open_db(db_path)
    try:
        repo = Repository(conn)
        try:
            if stream:
                sources = stream_answer(
                    query, repo, config, lambda text: console.print(text, end="", markup=False)
                )
                console.print()
            else:
                response = generate_answer(query, repo, config)
                sources = response.sources
                console.print(Markdown(response.answer))
        except AnswerError as exc:
            console.print(err_answer_failed(str(exc.__cause__ or exc)))
            raise typer.Exit(1)
    finally:
        conn.close()

    _print_sources(sources[: config.retriever.citation_k])


def _print_sources(sources: list[SearchResult]) -> None:
    if not sources:
        return
    console.print("\n[bold dim]References[/]")
    for source in sources:
        console.print(
            f"  [dim]{source.label}[/]  [green]{source.match_percentage}% match[/]",
            highlight=False,
        )
