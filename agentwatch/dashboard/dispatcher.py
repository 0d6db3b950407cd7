"""Command dispatcher: runs remote commands and turns outcomes into events."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from ..debuglog import debug_log
from ..errors import AgentwatchError
from ..models import Agent, AgentPage, Conversation
from .events import (
    AgentFetched,
    AgentsFetched,
    ConversationFetched,
    Event,
    FollowupSent,
    GetAgent,
    GetConversation,
    ListAgents,
    OperationFailed,
    Origin,
    RemoteCommand,
    SendFollowup,
)


class RemoteCapability(Protocol):
    def list_agents(self, limit: int = 0, cursor: str = "") -> AgentPage: ...

    def get_agent(self, agent_id: str) -> Agent: ...

    def get_conversation(self, agent_id: str) -> Conversation: ...

    def send_followup(self, agent_id: str, text: str) -> str: ...


def origin_of(command: RemoteCommand) -> Origin:
    if isinstance(command, ListAgents):
        return Origin.LIST_AGENTS
    if isinstance(command, GetAgent):
        return Origin.GET_AGENT
    if isinstance(command, GetConversation):
        return Origin.GET_CONVERSATION
    return Origin.SEND_FOLLOWUP


class CommandDispatcher:
    """Executes one remote command and returns exactly one result event.

    ``execute`` blocks; the app calls it from a worker thread and hands the
    returned event back to the loop. It never raises.
    """

    def __init__(
        self,
        remote: RemoteCapability,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.remote = remote
        self.clock = clock

    def execute(self, command: RemoteCommand) -> Event:
        origin = origin_of(command)
        try:
            return self._run(command)
        except AgentwatchError as e:
            debug_log(f"{origin.value} failed: {type(e).__name__}: {e}")
            return OperationFailed(message=str(e), origin=origin)
        except Exception as e:  # worker boundary: nothing may escape into the loop
            debug_log(f"{origin.value} crashed: {type(e).__name__}: {e}")
            return OperationFailed(
                message=f"unexpected error: {type(e).__name__}: {e}",
                origin=origin,
            )

    def _run(self, command: RemoteCommand) -> Event:
        if isinstance(command, ListAgents):
            page = self.remote.list_agents(command.limit, command.cursor)
            at = self.clock()
            return AgentsFetched(
                agents=page.agents,
                at=at,
                next_cursor=page.next_cursor,
                at_label=time.strftime("%H:%M:%S", time.localtime(at)),
            )
        if isinstance(command, GetAgent):
            return AgentFetched(agent=self.remote.get_agent(command.agent_id))
        if isinstance(command, GetConversation):
            return ConversationFetched(
                agent_id=command.agent_id,
                conversation=self.remote.get_conversation(command.agent_id),
            )
        if isinstance(command, SendFollowup):
            ack = self.remote.send_followup(command.agent_id, command.text)
            return FollowupSent(agent_id=command.agent_id, ack_id=ack, text=command.text)
        raise TypeError(f"not a remote command: {command!r}")
