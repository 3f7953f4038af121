"""agentlab check — verify credentials and, optionally, the embedding API."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from agentlab.cli.common import load_config_or_exit
from agentlab.cli.errors import err_answer_failed, err_no_api_key
from agentlab.config import (
    ENV_API_KEY,
    ENV_DATABASE_AUTH_TOKEN,
    ENV_DATABASE_URL,
    load_credentials,
)
from agentlab.rag import llm_client

console = Console()

_TEST_TEXT = "This is a test message for embedding."


def check_cmd(
    live: Annotated[
        bool,
        typer.Option("--live", help="Call the embedding API once with a test sentence."),
    ] = False,
) -> None:
    """Report which settings are present and whether the API key resolves."""
    cfg = load_config_or_exit(console)
    creds = load_credentials()

    ok = True
    for name, value in (
        (ENV_DATABASE_URL, creds.database_url),
        (ENV_DATABASE_AUTH_TOKEN, creds.database_auth_token),
        (ENV_API_KEY, creds.api_key),
    ):
        if value:
            console.print(f"  [green]✓[/] {name}")
        else:
            console.print(f"  [red]✗[/] {name} [dim]MISSING[/]")
            ok = False

    for model in dict.fromkeys((cfg.embedding.model, cfg.generation.model)):
        try:
            llm_client.validate_api_key(model)
        except EnvironmentError:
            provider = llm_client.provider_of(model)
            console.print(err_no_api_key(provider, f"{provider.upper()}_API_KEY"))
            ok = False

    if live:
        try:
            vector = llm_client.embed(cfg.embedding.model, _TEST_TEXT)
        except Exception as exc:
            console.print(err_answer_failed(str(exc)))
            raise typer.Exit(1)
        preview = ", ".join(f"{v:.4f}" for v in vector[:5])
        console.print(f"  [green]✓[/] Embedding API: {len(vector)} dims  [dim][{preview}, ...][/]")

    if not ok:
        raise typer.Exit(1)
    console.print("[bold green]✓ Configuration OK[/]")
