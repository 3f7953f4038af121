"""Chat session state machine with a typewriter reveal of streamed answers.

Turn states::

    idle → awaiting → revealing → settled
    idle → awaiting → error

Streamed fragments are split into characters and queued; a fixed-period
ticker moves one character per tick into the assistant placeholder, so the
reveal speed is independent of how bursty the network is. Every mutation
notifies the session's listeners (the terminal view re-renders and keeps the
transcript scrolled to its end).

``ChatSession.submit`` drives one turn on an asyncio loop: the blocking
answerer runs in a worker thread and its fragments are marshalled back onto
the loop in arrival order, where the ticker also runs.
"""

from __future__ import annotations

import asyncio
import itertools
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from agentlab.db.models import SearchResult

WELCOME_MESSAGE = (
    "Hello! I'm your AI Agent Lab assistant. Ask me anything about the agent "
    "projects, implementation details, or code logic."
)
ERROR_MESSAGE = (
    "Sorry, I encountered an error while processing your request. "
    "Please check your API keys or try again later."
)

# (query, on_text) -> sources
Answerer = Callable[[str, Callable[[str], None]], list[SearchResult]]


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TurnState(str, Enum):
    IDLE = "idle"
    AWAITING = "awaiting"
    REVEALING = "revealing"
    SETTLED = "settled"
    ERROR = "error"


@dataclass
class Message:
    id: str
    role: Role
    content: str = ""
    sources: list[SearchResult] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)


class ChatSession:
    """In-memory conversation with one active turn at a time.

    Args:
        answerer: Streams the answer for a query through its callback and
            returns the retrieved sources (see agentlab.rag.stream_answer).
        tick_interval: Seconds between revealed characters.
        citation_k: Number of sources attached to an answer.
        welcome: Opening assistant message; None for an empty transcript.
    """

    def __init__(
        self,
        answerer: Answerer,
        tick_interval: float = 0.03,
        citation_k: int = 3,
        welcome: str | None = WELCOME_MESSAGE,
    ) -> None:
        self._answerer = answerer
        self.tick_interval = tick_interval
        self.citation_k = citation_k
        self.messages: list[Message] = []
        self.state = TurnState.IDLE
        self.last_error: BaseException | None = None
        self._queue: deque[str] = deque()
        self._stream_done = False
        self._placeholder: Message | None = None
        self._last_external_query: str | None = None
        self._ids = itertools.count(1)
        self._listeners: list[Callable[[ChatSession], None]] = []
        if welcome:
            self.messages.append(Message(id="welcome", role=Role.ASSISTANT, content=welcome))

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self.state in (TurnState.AWAITING, TurnState.REVEALING)

    @property
    def pending_characters(self) -> int:
        return len(self._queue)

    def subscribe(self, listener: Callable[[ChatSession], None]) -> None:
        """Call *listener* after every change to the transcript or state."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def begin_turn(self, query: str) -> Message | None:
        """Append the user message and an empty assistant placeholder.

        Returns the placeholder, or None if the query is blank or a turn is
        already in progress.
        """
        if not query.strip() or self.busy:
            return None
        self.messages.append(Message(id=self._next_id(), role=Role.USER, content=query))
        self._placeholder = Message(id=self._next_id(), role=Role.ASSISTANT)
        self.messages.append(self._placeholder)
        self._queue.clear()
        self._stream_done = False
        self.last_error = None
        self.state = TurnState.AWAITING
        self._notify()
        return self._placeholder

    def receive_fragment(self, text: str) -> None:
        """Queue the characters of one streamed fragment for reveal."""
        if not self.busy or not text:
            return
        self._queue.extend(text)
        if self.state is not TurnState.REVEALING:
            self.state = TurnState.REVEALING
            self._notify()

    def finish_stream(self, sources: list[SearchResult]) -> None:
        """Attach citations; the turn settles once the queue has drained."""
        if not self.busy or self._placeholder is None:
            return
        self._placeholder.sources = list(sources[: self.citation_k])
        self._stream_done = True
        if not self._queue:
            self.state = TurnState.SETTLED
        self._notify()

    def fail(self, error: BaseException | None = None) -> None:
        """Drop pending characters and replace the answer with the apology."""
        if not self.busy or self._placeholder is None:
            return
        self._queue.clear()
        self._placeholder.content = ERROR_MESSAGE
        self._placeholder.sources = []
        self.last_error = error
        self.state = TurnState.ERROR
        self._notify()

    def tick(self) -> str | None:
        """Reveal at most one queued character. Returns it, or None if idle."""
        if not self._queue or self._placeholder is None:
            return None
        char = self._queue.popleft()
        self._placeholder.content += char
        if not self._queue and self._stream_done:
            self.state = TurnState.SETTLED
        self._notify()
        return char

    def request_query(self, query: str) -> bool:
        """Begin a turn for an externally triggered query, once per distinct value.

        The value is remembered only after its turn has started, so a query
        refused while another turn is running can be sent again later.
        """
        if query == self._last_external_query or self.begin_turn(query) is None:
            return False
        self._last_external_query = query
        return True

    def _next_id(self) -> str:
        return str(next(self._ids))

    # ------------------------------------------------------------------
    # Async driver
    # ------------------------------------------------------------------

    async def submit(self, query: str) -> TurnState:
        """Run one full turn and return the state it ended in."""
        if self.begin_turn(query) is None:
            return self.state
        return await self._drive(query)

    async def submit_external(self, query: str) -> TurnState | None:
        """Submit a query coming from outside the input box, once per value.

        Returns None when no turn was started for *query*.
        """
        if not self.request_query(query):
            return None
        return await self._drive(query)

    async def _drive(self, query: str) -> TurnState:
        loop = asyncio.get_running_loop()
        ticker = asyncio.create_task(self._run_ticker())

        def on_text(text: str) -> None:
            loop.call_soon_threadsafe(self.receive_fragment, text)

        try:
            sources = await asyncio.to_thread(self._answerer, query, on_text)
        except Exception as exc:
            self.fail(exc)
        else:
            self.finish_stream(sources)
        await ticker
        return self.state

    async def _run_ticker(self) -> None:
        while self.busy:
            await asyncio.sleep(self.tick_interval)
            self.tick()
