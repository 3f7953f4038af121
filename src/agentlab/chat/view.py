"""Rich terminal rendering of a ChatSession transcript."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.spinner import Spinner
from rich.text import Text

from agentlab.chat.session import ChatSession, Message, Role, TurnState

_SNIPPET_CHARS = 160


class ChatView:
    """Render the tail of a transcript so the newest message is always visible.

    Args:
        max_messages: Number of most recent messages kept on screen.
    """

    def __init__(self, max_messages: int = 12) -> None:
        self.max_messages = max_messages
        self._live: Live | None = None
        self._subscribed = False

    def render(self, session: ChatSession) -> RenderableType:
        parts: list[RenderableType] = [
            _render_message(m) for m in session.messages[-self.max_messages:]
        ]
        if session.state is TurnState.AWAITING:
            parts.append(Spinner("dots", text=Text("Thinking...", style="dim")))
        return Group(*parts)

    def attach(self, session: ChatSession, live: Live) -> None:
        """Re-render into *live* on every session change until detach()."""
        self._live = live
        if not self._subscribed:
            session.subscribe(self._refresh)
            self._subscribed = True
        live.update(self.render(session), refresh=True)

    def detach(self) -> None:
        self._live = None

    def _refresh(self, session: ChatSession) -> None:
        if self._live is not None:
            self._live.update(self.render(session), refresh=True)


def _render_message(message: Message) -> RenderableType:
    if message.role is Role.USER:
        return Panel(Text(message.content), title="[bold]You[/]", title_align="right", style="cyan")

    body: list[RenderableType] = [Markdown(message.content or " ")]
    if message.sources:
        refs = Text("References\n", style="bold dim")
        for source in message.sources:
            refs.append(f"  {source.label}", style="dim")
            refs.append(f"  {source.match_percentage}% match\n", style="green")
            snippet = " ".join(source.content.split())[:_SNIPPET_CHARS]
            refs.append(f"    {snippet}\n", style="dim italic")
        body.append(refs)
    return Panel(Group(*body), title="[bold]Assistant[/]", title_align="left")
