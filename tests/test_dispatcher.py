"""Tests for remote command execution and failure normalization."""

import time

from agentwatch.dashboard.dispatcher import CommandDispatcher, origin_of
from agentwatch.dashboard.events import (
    AgentFetched,
    AgentsFetched,
    ConversationFetched,
    FollowupSent,
    GetAgent,
    GetConversation,
    ListAgents,
    OperationFailed,
    Origin,
    SendFollowup,
)
from agentwatch.errors import RemoteFailure, TransportFailure, ValidationFailure
from agentwatch.models import Conversation
from tests.helpers import FakeRemote, make_agent


def test_list_agents_result_is_stamped_with_clock() -> None:
    remote = FakeRemote()
    dispatcher = CommandDispatcher(remote, clock=lambda: 123.0)

    event = dispatcher.execute(ListAgents(limit=25, cursor="c"))

    assert remote.calls == [("list", 25, "c")]
    assert event == AgentsFetched(
        agents=(make_agent("a1"),),
        at=123.0,
        next_cursor="next",
        at_label=time.strftime("%H:%M:%S", time.localtime(123.0)),
    )


def test_agent_conversation_and_followup_results() -> None:
    dispatcher = CommandDispatcher(FakeRemote())

    assert dispatcher.execute(GetAgent("a1")) == AgentFetched(make_agent("a1", summary="fresh"))
    assert dispatcher.execute(GetConversation("a1")) == ConversationFetched(
        agent_id="a1", conversation=Conversation(id="conv-a1"),
    )
    assert dispatcher.execute(SendFollowup("a1", "ping")) == FollowupSent(
        agent_id="a1", ack_id="ack-1", text="ping",
    )


def test_known_failures_become_operation_failed_with_origin() -> None:
    cases = [
        (ListAgents(), TransportFailure("error making request: timed out"), Origin.LIST_AGENTS),
        (GetAgent("a1"), RemoteFailure("API request failed with status 404: gone", 404), Origin.GET_AGENT),
        (GetConversation("a1"), ValidationFailure("agent id must not be empty"), Origin.GET_CONVERSATION),
        (SendFollowup("a1", "x"), RemoteFailure("API request failed with status 409: busy", 409), Origin.SEND_FOLLOWUP),
    ]
    for command, error, origin in cases:
        event = CommandDispatcher(FakeRemote(error)).execute(command)
        assert event == OperationFailed(message=str(error), origin=origin)


def test_unexpected_exception_never_escapes() -> None:
    event = CommandDispatcher(FakeRemote(KeyError("boom"))).execute(GetAgent("a1"))

    assert isinstance(event, OperationFailed)
    assert event.origin == Origin.GET_AGENT
    assert "KeyError" in event.message


def test_origin_of_each_remote_command() -> None:
    assert origin_of(ListAgents()) == Origin.LIST_AGENTS
    assert origin_of(GetAgent("x")) == Origin.GET_AGENT
    assert origin_of(GetConversation("x")) == Origin.GET_CONVERSATION
    assert origin_of(SendFollowup("x", "y")) == Origin.SEND_FOLLOWUP
