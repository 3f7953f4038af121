"""Tests for the rich chat view."""

from __future__ import annotations

from rich.console import Console

from agentlab.chat.session import ChatSession
from agentlab.chat.view import ChatView
from agentlab.db.models import SearchResult


def _render(view: ChatView, session: ChatSession) -> str:
    console = Console(record=True, width=100, force_terminal=False)
    console.print(view.render(session))
    return console.export_text()


def _session() -> ChatSession:
    return ChatSession(lambda q, cb: [], tick_interval=0)


def test_render_welcome():
    assert "AI Agent Lab assistant" in _render(ChatView(), _session())


def test_render_thinking_while_awaiting():
    session = _session()
    session.begin_turn("What is project 05?")
    text = _render(ChatView(), session)
    assert "What is project 05?" in text
    assert "Thinking..." in text


def test_render_references_with_match():
    session = _session()
    session.begin_turn("q")
    session.receive_fragment("Answer")
    session.finish_stream(
        [SearchResult(id=1, project_id="05", file_path="05_Team/main.py", content="code", distance=0.25)]
    )
    while session.tick():
        pass
    text = _render(ChatView(), session)
    assert "References" in text
    assert "05/05_Team/main.py" in text
    assert "75% match" in text
    assert "Thinking..." not in text


def test_render_keeps_only_tail():
    session = _session()
    for i in range(3):
        session.begin_turn(f"question {i}")
        session.finish_stream([])
    text = _render(ChatView(max_messages=2), session)
    assert "question 2" in text
    assert "question 1" not in text
    assert "AI Agent Lab assistant" not in text


class _FakeLive:
    def __init__(self):
        self.updates = 0

    def update(self, renderable, refresh=False):
        self.updates += 1


def test_attach_refreshes_until_detached():
    session = _session()
    view = ChatView()
    live = _FakeLive()
    view.attach(session, live)
    view.attach(session, live)
    assert live.updates == 2

    session.begin_turn("q")
    assert live.updates == 3

    view.detach()
    session.finish_stream([])
    assert live.updates == 3
