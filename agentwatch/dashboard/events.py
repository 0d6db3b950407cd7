"""Events consumed by the dashboard loop and commands it emits.

Both are closed sets of frozen dataclasses. ``Event`` and ``Command`` are the
unions the transition function accepts and returns; extend the union and its
handler together.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..models import Agent, Conversation


class Origin(str, Enum):
    """Which operation a result or failure belongs to."""
    LIST_AGENTS = "list_agents"
    GET_AGENT = "get_agent"
    GET_CONVERSATION = "get_conversation"
    SEND_FOLLOWUP = "send_followup"
    LOCAL = "local"


# ── Events ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class KeyPressed:
    key: str
    character: Optional[str] = None

    @property
    def is_printable(self) -> bool:
        return self.character is not None and self.character.isprintable() and len(self.character) == 1


@dataclass(frozen=True)
class Pasted:
    text: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    now: float


@dataclass(frozen=True)
class AgentsFetched:
    agents: tuple[Agent, ...]
    at: float
    next_cursor: str = ""
    # Local wall-clock stamp of ``at``, formatted off the loop.
    at_label: str = ""


@dataclass(frozen=True)
class AgentFetched:
    agent: Agent


@dataclass(frozen=True)
class ConversationFetched:
    agent_id: str
    conversation: Conversation


@dataclass(frozen=True)
class FollowupSent:
    agent_id: str
    ack_id: str
    text: str


@dataclass(frozen=True)
class OperationFailed:
    message: str
    origin: Origin = Origin.LOCAL


@dataclass(frozen=True)
class AgentSelected:
    agent: Agent


Event = Union[
    KeyPressed,
    Pasted,
    Resized,
    Tick,
    AgentsFetched,
    AgentFetched,
    ConversationFetched,
    FollowupSent,
    OperationFailed,
    AgentSelected,
]


# ── Commands ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ListAgents:
    limit: int = 0
    cursor: str = ""


@dataclass(frozen=True)
class GetAgent:
    agent_id: str


@dataclass(frozen=True)
class GetConversation:
    agent_id: str


@dataclass(frozen=True)
class SendFollowup:
    agent_id: str
    text: str


@dataclass(frozen=True)
class ScheduleTick:
    """Re-arm the one-shot ticker."""


@dataclass(frozen=True)
class Post:
    """Re-enqueue an event behind whatever is already queued."""
    event: Event


@dataclass(frozen=True)
class Quit:
    pass


RemoteCommand = Union[ListAgents, GetAgent, GetConversation, SendFollowup]
Command = Union[ListAgents, GetAgent, GetConversation, SendFollowup, ScheduleTick, Post, Quit]

REMOTE_COMMANDS: tuple[type, ...] = (ListAgents, GetAgent, GetConversation, SendFollowup)
