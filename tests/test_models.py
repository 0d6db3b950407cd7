"""Tests for payload decoding and status normalization."""

from datetime import datetime, timezone

import pytest

from agentwatch.errors import DecodeFailure
from agentwatch.models import (
    AgentStatus,
    MessageType,
    agent_from_dict,
    agent_page_from_dict,
    conversation_from_dict,
    key_info_from_dict,
    parse_timestamp,
)
from tests.helpers import make_agent


def test_status_is_case_insensitive_and_unknown_is_kept_distinct() -> None:
    assert AgentStatus.parse("expired") == AgentStatus.EXPIRED
    assert AgentStatus.parse(" Running ") == AgentStatus.RUNNING
    assert AgentStatus.parse("PAUSED") == AgentStatus.UNKNOWN
    assert AgentStatus.parse(None) == AgentStatus.UNKNOWN


def test_message_type_is_case_insensitive() -> None:
    assert MessageType.parse("USER_MESSAGE") == MessageType.USER_MESSAGE
    assert MessageType.parse("tool_call") == MessageType.UNKNOWN


def test_agent_from_dict_reads_nested_fields() -> None:
    agent = agent_from_dict({
        "id": "bc_1",
        "name": "n",
        "status": "FINISHED",
        "source": {"repository": "github.com/acme/widgets", "ref": "dev"},
        "target": {"branchName": "b", "prUrl": "https://github.com/acme/widgets/pull/1"},
        "summary": "did things",
        "createdAt": "2024-01-15T10:30:00Z",
    })
    assert agent.status == AgentStatus.UNKNOWN
    assert agent.source.ref == "dev"
    assert agent.target.pr_url.endswith("/pull/1")
    assert agent.created_at == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert agent.is_running is False


def test_agent_without_id_is_rejected() -> None:
    with pytest.raises(DecodeFailure):
        agent_from_dict({"name": "nameless"})
    with pytest.raises(DecodeFailure):
        agent_from_dict(["not", "an", "object"])


def test_agent_page_requires_list() -> None:
    with pytest.raises(DecodeFailure):
        agent_page_from_dict({"agents": "nope"})
    assert agent_page_from_dict({}).agents == ()


def test_conversation_keeps_message_order() -> None:
    conversation = conversation_from_dict({
        "id": "c",
        "messages": [
            {"id": "1", "type": "user_message", "text": "first"},
            {"id": "2", "type": "assistant", "text": "second"},
        ],
    })
    assert [m.text for m in conversation.messages] == ["first", "second"]
    assert conversation.messages[1].type == MessageType.UNKNOWN


def test_key_info_and_bad_timestamps() -> None:
    info = key_info_from_dict({"id": "k", "userEmail": "dev@example.com", "createdAt": "soon"})
    assert info.user_email == "dev@example.com"
    assert info.created_at is None
    assert parse_timestamp("") is None


@pytest.mark.parametrize(
    ("repo", "expected"),
    [
        ("https://github.com/acme/widgets", "acme/widgets"),
        ("github.com/acme/widgets/", "acme/widgets"),
        ("widgets", "widgets"),
        ("", ""),
    ],
)
def test_repo_short_name(repo: str, expected: str) -> None:
    assert make_agent("a", repo=repo).repo_short_name == expected
