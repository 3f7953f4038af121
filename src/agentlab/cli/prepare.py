"""agentlab prepare — scan project folders and store chunked documents.

Every ``NN_*`` folder under the root becomes a project row; every allowed
file inside it is split by the line chunker and stored as document rows
(one per chunk). Embeddings are generated separately by ``agentlab embed``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from agentlab.cli.common import (
    descriptions_for,
    load_config_or_exit,
    open_db,
    report_credentials,
    resolve_db_path,
)
from agentlab.cli.errors import err_no_projects
from agentlab.db.models import Project
from agentlab.db.repository import Repository
from agentlab.ingest.chunker import LineChunker
from agentlab.ingest.projects import ProjectIngestor
from agentlab.ingest.scanner import find_project_dirs

console = Console()


def prepare_cmd(
    root: Annotated[
        Path | None,
        typer.Option("--root", "-r", help="Folder holding the NN_ project folders."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (overrides AGENTLAB_DATABASE_URL)."),
    ] = None,
    max_tokens: Annotated[
        int | None,
        typer.Option("--max-tokens", min=1, help="Token budget per chunk."),
    ] = None,
) -> None:
    """Scan project folders, chunk their files, and store the chunks."""
    cfg = load_config_or_exit(console)
    creds = report_credentials(console)
    db_path = resolve_db_path(console, db, creds)
    scan_root = (root or Path(cfg.scan.root)).resolve()

    if not scan_root.is_dir():
        console.print(f"[red]Error:[/] Not a directory: '{scan_root}'")
        raise typer.Exit(1)

    project_dirs = find_project_dirs(scan_root)
    if not project_dirs:
        console.print(err_no_projects(str(scan_root)))
        raise typer.Exit(0)

    console.print(f"\n[bold]Preparing {len(project_dirs)} projects from {scan_root}[/]\n")

    conn = open_db(db_path)
    try:
        ingestor = ProjectIngestor(
            Repository(conn),
            chunker=LineChunker(max_tokens or cfg.chunker.max_tokens),
            descriptions=descriptions_for(cfg),
            allowed_extensions=cfg.scan.allowed_extensions,
            excluded_dirs=cfg.scan.excluded_dirs,
        )

        def _on_project(project: Project, file_count: int) -> None:
            console.print(
                f"  [green]✓[/] {project.id} {project.title} "
                f"[dim]({project.category}, {file_count} files)[/]"
            )

        report = ingestor.ingest(scan_root, on_project=_on_project)
    finally:
        conn.close()

    for path, reason in report.failed_files:
        console.print(f"  [yellow]⚠ {path}:[/] {reason}")

    console.print("\n[bold green]✓ Data preparation complete.[/]")
    console.print(f"  Projects: {report.projects}")
    console.print(f"  Files:    {report.files} ({report.unchanged_files} unchanged)")
    console.print(f"  Chunks:   {report.chunks} written")
