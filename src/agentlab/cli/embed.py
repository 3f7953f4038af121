"""agentlab embed — generate embeddings for every unembedded document.

One request at a time with a fixed delay between provider calls (default
4.1 s, below a 15 requests/minute quota). Short or symbol-only chunks are
skipped without a request; provider errors are counted and the batch moves
on. Re-running resumes with the documents that still lack an embedding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from agentlab.cli.common import load_config_or_exit, open_db, report_credentials, resolve_db_path
from agentlab.db.repository import Repository
from agentlab.ingest.embedding_writer import (
    EmbeddingBatch,
    EmbeddingConfig,
    EmbeddingGenerator,
    EmbeddingReport,
)

console = Console()


def embed_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (overrides AGENTLAB_DATABASE_URL)."),
    ] = None,
    delay: Annotated[
        float | None,
        typer.Option("--delay", min=0.0, help="Seconds to wait between embedding requests."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", min=1, help="Embed at most this many documents."),
    ] = None,
) -> None:
    """Generate embeddings for documents that do not have one yet."""
    cfg = load_config_or_exit(console)
    creds = report_credentials(console)
    db_path = resolve_db_path(console, db, creds)

    config = EmbeddingConfig(
        model=cfg.embedding.model,
        dimensions=cfg.embedding.dimensions,
        delay_seconds=cfg.embedding.delay_seconds if delay is None else delay,
    )

    conn = open_db(db_path)
    try:
        batch = EmbeddingBatch(Repository(conn), EmbeddingGenerator(config))
        pending = len(batch.pending(limit))
        if pending == 0:
            console.print("[green]✓[/] All documents already embedded.")
            return

        console.print(
            f"\n[bold]Embedding {pending} documents[/] "
            f"[dim]({config.model}, {config.delay_seconds}s between requests)[/]"
        )
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("[dim]{task.fields[skipped]} skipped · {task.fields[errors]} errors[/dim]"),
            transient=True,
            console=console,
        ) as prog:
            task = prog.add_task("Embedding…", total=pending, skipped=0, errors=0)

            def _on_progress(idx: int, report: EmbeddingReport) -> None:
                prog.update(
                    task, completed=idx + 1, skipped=report.skipped, errors=report.errors
                )

            report = batch.run(limit=limit, on_progress=_on_progress)
    finally:
        conn.close()

    for doc_id, message in report.error_messages:
        console.print(f"  [yellow]⚠ Error on doc {doc_id}:[/] {message}")

    console.print("\n[bold green]✓ Embedding generation complete.[/]")
    console.print(f"  Processed: {report.processed}")
    console.print(f"  Skipped:   {report.skipped}")
    console.print(f"  Errors:    {report.errors}")
    console.print(f"  Success rate: {report.success_rate:.1f}%")
