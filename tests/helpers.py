"""Shared test helpers."""

from __future__ import annotations

from agentwatch.dashboard.events import AgentsFetched, KeyPressed, Resized
from agentwatch.dashboard.machine import new_state, transition
from agentwatch.dashboard.state import RootState
from agentwatch.models import Agent, AgentPage, AgentStatus, Conversation, Source
from agentwatch.settings import load_settings

KEYS = load_settings({}).keys


def make_agent(
    agent_id: str,
    status: AgentStatus = AgentStatus.RUNNING,
    *,
    name: str = "",
    repo: str = "github.com/acme/widgets",
    summary: str = "",
) -> Agent:
    return Agent(
        id=agent_id,
        name=name or f"agent {agent_id}",
        status=status,
        source=Source(repository=repo, ref="main"),
        summary=summary,
    )


def press(key: str, character: str | None = None) -> KeyPressed:
    """KeyPressed the way Textual reports it (single chars carry a character)."""
    if character is None:
        if len(key) == 1:
            character = key
        elif key == "space":
            character = " "
        elif key == "question_mark":
            character = "?"
    return KeyPressed(key=key, character=character)


def loaded_state(
    agents: list[Agent],
    *,
    width: int = 100,
    height: int = 40,
    at: float = 1000.0,
) -> RootState:
    """Sized root state with ``agents`` already fetched."""
    state = new_state(
        auto_refresh=True, refresh_interval=30.0, page_size=100, now=0.0,
    )
    transition(state, Resized(width=width, height=height), KEYS)
    transition(state, AgentsFetched(agents=tuple(agents), at=at), KEYS)
    return state


def feed(state: RootState, *events) -> list:
    """Run events through ``transition`` and collect every emitted command."""
    commands: list = []
    for event in events:
        _, out = transition(state, event, KEYS)
        commands.extend(out)
    return commands


class FakeRemote:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple] = []

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    def list_agents(self, limit=0, cursor=""):
        self.calls.append(("list", limit, cursor))
        self._maybe_fail()
        return AgentPage(agents=(make_agent("a1"),), next_cursor="next")

    def get_agent(self, agent_id):
        self.calls.append(("get", agent_id))
        self._maybe_fail()
        return make_agent(agent_id, summary="fresh")

    def get_conversation(self, agent_id):
        self.calls.append(("conversation", agent_id))
        self._maybe_fail()
        return Conversation(id=f"conv-{agent_id}")

    def send_followup(self, agent_id, text):
        self.calls.append(("followup", agent_id, text))
        self._maybe_fail()
        return "ack-1"
