"""agentlab manifest — write the dashboard's project manifest JSON."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from agentlab.cli.common import descriptions_for, load_config_or_exit
from agentlab.cli.errors import err_no_projects
from agentlab.ingest.manifest import build_manifest, write_manifest

console = Console()

_DEFAULT_OUTPUT = Path("generated-projects.json")


def manifest_cmd(
    root: Annotated[
        Path | None,
        typer.Option("--root", "-r", help="Folder holding the NN_ project folders."),
    ] = None,
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Manifest file to write."),
    ] = _DEFAULT_OUTPUT,
    assets_dir: Annotated[
        Path | None,
        typer.Option("--assets-dir", help="Copy discovered images into this directory."),
    ] = None,
) -> None:
    """Scan project folders and write generated-projects.json."""
    cfg = load_config_or_exit(console)
    scan_root = (root or Path(cfg.scan.root)).resolve()
    if not scan_root.is_dir():
        console.print(f"[red]Error:[/] Not a directory: '{scan_root}'")
        raise typer.Exit(1)

    projects = build_manifest(scan_root, descriptions_for(cfg), assets_dir=assets_dir)
    if not projects:
        console.print(err_no_projects(str(scan_root)))
        raise typer.Exit(0)

    for project in projects:
        console.print(
            f"  [green]✓[/] {project.id} {project.title} "
            f"[dim]({len(project.codes)} code files, {len(project.assets)} assets, "
            f"{', '.join(project.tech_stack)})[/]"
        )
    write_manifest(projects, output)
    console.print(f"\n[bold green]✓ Scan complete![/] {len(projects)} projects → {output}")
