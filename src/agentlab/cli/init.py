"""agentlab init — create the knowledge base and a project config.

Creates:
  agentlab.db     — empty knowledge base with schema (or the --db / URL path)
  agentlab.yaml   — project config with model and chunker defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from agentlab.cli.common import open_db
from agentlab.cli.errors import err_config
from agentlab.config import ConfigError, ensure_project_config, load_credentials
from agentlab.db.connection import path_from_url
from agentlab.db.schema import CURRENT_VERSION

console = Console()

_DEFAULT_DB_NAME = "agentlab.db"


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = Path("."),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: AGENTLAB_DATABASE_URL or ./agentlab.db)."),
    ] = None,
) -> None:
    """Create the knowledge-base database and agentlab.yaml."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    if db is None:
        url = load_credentials().database_url
        try:
            db = path_from_url(url) if url else project_dir / _DEFAULT_DB_NAME
        except ConfigError as exc:
            console.print(err_config(str(exc)))
            raise typer.Exit(1)

    existed = db.exists()
    conn = open_db(db)
    conn.close()
    if existed:
        console.print(f"  [dim]↷ {db} already exists — schema up to date (v{CURRENT_VERSION})[/]")
    else:
        console.print(f"  [green]✓[/] {db} (schema v{CURRENT_VERSION})")

    cfg_path = ensure_project_config(project_dir)
    console.print(f"  [green]✓[/] {cfg_path}")

    console.print("\nNext steps:")
    console.print("  1. agentlab prepare --root <folder>   (chunk project files)")
    console.print("  2. agentlab embed                     (generate embeddings)")
    console.print("  3. agentlab chat                      (ask questions)")
