"""agentlab chat — interactive RAG chat with a typewriter reveal.

Each turn streams the answer from the chat model; characters are revealed
at a fixed interval (default 30 ms) and the retrieved files are listed
under the answer. Type ``exit`` or press Ctrl-D to leave.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.live import Live

from agentlab.chat.session import ChatSession
from agentlab.chat.view import ChatView
from agentlab.cli.common import (
    answer_config_for,
    load_config_or_exit,
    report_credentials,
    resolve_db_path,
)
from agentlab.cli.errors import err_no_db
from agentlab.db.connection import Database
from agentlab.db.models import SearchResult
from agentlab.db.repository import Repository
from agentlab.rag.answer import AnswerConfig, stream_answer

console = Console()

_EXIT_WORDS = {"exit", "quit", ":q"}


def make_answerer(
    db_path: Path, config: AnswerConfig
) -> Callable[[str, Callable[[str], None]], list[SearchResult]]:
    """Return an answerer that opens its own connection per call.

    The session runs the answerer in a worker thread, and sqlite3
    connections cannot cross threads.
    """

    def _answer(query: str, on_text: Callable[[str], None]) -> list[SearchResult]:
        conn = Database(db_path).connect()
        try:
            return stream_answer(query, Repository(conn), config, on_text)
        finally:
            conn.close()

    return _answer


def chat_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (overrides AGENTLAB_DATABASE_URL)."),
    ] = None,
    query: Annotated[
        str | None,
        typer.Option("--query", "-q", help="Question to submit when the chat opens."),
    ] = None,
    tick_ms: Annotated[
        int | None,
        typer.Option("--tick-ms", min=0, help="Milliseconds per revealed character."),
    ] = None,
) -> None:
    """Chat with the knowledge base."""
    cfg = load_config_or_exit(console)
    creds = report_credentials(console)
    db_path = resolve_db_path(console, db, creds)
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    config = answer_config_for(cfg)
    session = ChatSession(
        make_answerer(db_path, config),
        tick_interval=(cfg.chat.tick_ms if tick_ms is None else tick_ms) / 1000,
        citation_k=config.retriever.citation_k,
    )
    view = ChatView(max_messages=2)
    console.print(view.render(session))

    if query:
        _run_turn(session, view, session.submit_external(query))

    while True:
        try:
            text = console.input("[bold cyan]You ›[/] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if text.strip().lower() in _EXIT_WORDS:
            break
        if not text.strip():
            continue
        _run_turn(session, view, session.submit(text))


def _run_turn(session: ChatSession, view: ChatView, turn) -> None:
    with Live(console=console, refresh_per_second=30) as live:
        view.attach(session, live)
        try:
            asyncio.run(turn)
        finally:
            view.detach()
