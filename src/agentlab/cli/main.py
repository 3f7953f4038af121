"""AgentLab CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from agentlab.cli.ask import ask_cmd
from agentlab.cli.chat import chat_cmd
from agentlab.cli.check import check_cmd
from agentlab.cli.embed import embed_cmd
from agentlab.cli.init import init_cmd
from agentlab.cli.manifest import manifest_cmd
from agentlab.cli.prepare import prepare_cmd
from agentlab.cli.projects import projects_cmd
from agentlab.cli.search import search_cmd
from agentlab.cli.status import status_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("agentlab")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"agentlab {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="agentlab",
    help=(
        "AgentLab — ask questions about a folder of AI agent projects.\n\n"
        "  agentlab prepare  Scan NN_ project folders into chunks.\n"
        "  agentlab embed    Generate embeddings for new chunks.\n"
        "  agentlab chat     Chat with the knowledge base."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """AgentLab — project showcase knowledge base."""


app.command("init")(init_cmd)
app.command("prepare")(prepare_cmd)
app.command("embed")(embed_cmd)
app.command("search")(search_cmd)
app.command("ask")(ask_cmd)
app.command("chat")(chat_cmd)
app.command("manifest")(manifest_cmd)
app.command("projects")(projects_cmd)
app.command("status")(status_cmd)
app.command("check")(check_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed AgentLab version."""
    typer.echo(f"agentlab {_installed_version()}")


if __name__ == "__main__":
    app()
