"""AgentLab chat — session state machine and terminal view."""

from agentlab.chat.session import (
    ERROR_MESSAGE,
    WELCOME_MESSAGE,
    ChatSession,
    Message,
    Role,
    TurnState,
)
from agentlab.chat.view import ChatView

__all__ = [
    "ERROR_MESSAGE",
    "WELCOME_MESSAGE",
    "ChatSession",
    "ChatView",
    "Message",
    "Role",
    "TurnState",
]
