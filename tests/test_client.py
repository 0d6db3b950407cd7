"""Tests for the HTTP client: requests built, errors mapped."""

import io
import json
import urllib.error

import pytest

from agentwatch.client import AgentClient
from agentwatch.errors import DecodeFailure, RemoteFailure, TransportFailure, ValidationFailure
from agentwatch.models import AgentStatus


AGENT_PAYLOAD = {
    "id": "bc_1",
    "name": "Fix flaky test",
    "status": "running",
    "source": {"repository": "https://github.com/acme/widgets", "ref": "main"},
    "target": {
        "branchName": "cursor/fix",
        "url": "https://cursor.com/agents?id=bc_1",
        "autoCreatePr": True,
    },
    "createdAt": "2024-01-15T10:30:00Z",
}


def _capture(monkeypatch, payload: object = None, raw: bytes | None = None) -> list:
    requests: list = []

    def fake_urlopen(req, timeout=None):
        requests.append((req, timeout))
        body = raw if raw is not None else json.dumps(payload).encode()
        return io.BytesIO(body)

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    return requests


def _client() -> AgentClient:
    return AgentClient("key-123", base_url="https://api.example.test/v0/", timeout=7.0)


def test_list_agents_sends_bearer_and_query(monkeypatch) -> None:
    requests = _capture(monkeypatch, {"agents": [AGENT_PAYLOAD], "nextCursor": "cur-2"})

    page = _client().list_agents(limit=10, cursor="cur-1")

    req, timeout = requests[0]
    assert req.get_method() == "GET"
    assert req.full_url == "https://api.example.test/v0/agents?limit=10&cursor=cur-1"
    assert req.get_header("Authorization") == "Bearer key-123"
    assert timeout == 7.0
    assert page.next_cursor == "cur-2"
    assert page.agents[0].status == AgentStatus.RUNNING
    assert page.agents[0].target.auto_create_pr is True


def test_list_agents_without_paging_params(monkeypatch) -> None:
    requests = _capture(monkeypatch, {"agents": []})
    page = _client().list_agents()
    assert requests[0][0].full_url == "https://api.example.test/v0/agents"
    assert page.agents == ()
    assert page.next_cursor == ""


def test_get_conversation_path(monkeypatch) -> None:
    requests = _capture(monkeypatch, {
        "id": "conv-1",
        "messages": [{"id": "m1", "type": "USER_MESSAGE", "text": "hello"}],
    })
    conversation = _client().get_conversation("bc_1")
    assert requests[0][0].full_url == "https://api.example.test/v0/agents/bc_1/conversation"
    assert conversation.messages[0].text == "hello"


def test_send_followup_posts_prompt_json(monkeypatch) -> None:
    requests = _capture(monkeypatch, {"id": "bc_1"})

    ack = _client().send_followup("bc_1", "also add docs")

    req, _ = requests[0]
    assert req.get_method() == "POST"
    assert req.full_url == "https://api.example.test/v0/agents/bc_1/followup"
    assert json.loads(req.data) == {"prompt": {"text": "also add docs"}}
    assert req.get_header("Content-type") == "application/json"
    assert ack == "bc_1"


def test_local_validation_happens_before_any_request(monkeypatch) -> None:
    requests = _capture(monkeypatch, {})
    with pytest.raises(ValidationFailure):
        _client().send_followup("bc_1", "   ")
    with pytest.raises(ValidationFailure):
        _client().get_agent("")
    assert requests == []


def test_http_error_maps_to_remote_failure(monkeypatch) -> None:
    def fake_urlopen(req, timeout=None):
        raise urllib.error.HTTPError(
            req.full_url, 401, "Unauthorized", {}, io.BytesIO(b"bad key"),
        )

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    with pytest.raises(RemoteFailure) as exc:
        _client().get_key_info()
    assert exc.value.status_code == 401
    assert str(exc.value) == "API request failed with status 401: bad key"


def test_url_error_maps_to_transport_failure(monkeypatch) -> None:
    def fake_urlopen(req, timeout=None):
        raise urllib.error.URLError("name resolution failed")

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    with pytest.raises(TransportFailure) as exc:
        _client().list_agents()
    assert "name resolution failed" in str(exc.value)


def test_undecodable_body_maps_to_decode_failure(monkeypatch) -> None:
    _capture(monkeypatch, raw=b"<html>gateway</html>")
    with pytest.raises(DecodeFailure):
        _client().get_agent("bc_1")
