"""Core data types and their decoding from API payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .errors import DecodeFailure


class AgentStatus(str, Enum):
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: object) -> AgentStatus:
        """Case-insensitive status lookup; unrecognized values are UNKNOWN."""
        if not isinstance(raw, str):
            return cls.UNKNOWN
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.UNKNOWN


class MessageType(str, Enum):
    USER_MESSAGE = "user_message"
    AGENT_MESSAGE = "agent_message"
    SYSTEM_MESSAGE = "system_message"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: object) -> MessageType:
        if not isinstance(raw, str):
            return cls.UNKNOWN
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Source:
    repository: str = ""
    ref: str = ""


@dataclass(frozen=True)
class Target:
    branch_name: str = ""
    url: str = ""
    pr_url: str = ""
    auto_create_pr: bool = False


@dataclass(frozen=True)
class Agent:
    id: str
    name: str = ""
    status: AgentStatus = AgentStatus.UNKNOWN
    source: Source = field(default_factory=Source)
    target: Target = field(default_factory=Target)
    summary: str = ""
    created_at: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self.status == AgentStatus.RUNNING

    @property
    def repo_short_name(self) -> str:
        """Last two path segments of the repository (``owner/repo``)."""
        repo = self.source.repository
        if "/" in repo:
            parts = repo.rstrip("/").split("/")
            if len(parts) >= 2:
                return "/".join(parts[-2:])
        return repo


@dataclass(frozen=True)
class Message:
    id: str
    type: MessageType = MessageType.UNKNOWN
    text: str = ""


@dataclass(frozen=True)
class Conversation:
    id: str
    messages: tuple[Message, ...] = ()


@dataclass(frozen=True)
class AgentPage:
    agents: tuple[Agent, ...] = ()
    next_cursor: str = ""


@dataclass(frozen=True)
class KeyInfo:
    id: str
    name: str = ""
    user_email: str = ""
    created_at: Optional[datetime] = None


# ── Decoding ─────────────────────────────────────────────────────────


def _require_dict(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise DecodeFailure(f"expected {what} object, got {type(data).__name__}")
    return data


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return str(value)


def parse_timestamp(raw: object) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return datetime.fromisoformat(raw.strip())
    except ValueError:
        return None


def agent_from_dict(data: Any) -> Agent:
    obj = _require_dict(data, "agent")
    agent_id = _str(obj, "id")
    if not agent_id:
        raise DecodeFailure("agent object is missing 'id'")
    source = obj.get("source") if isinstance(obj.get("source"), dict) else {}
    target = obj.get("target") if isinstance(obj.get("target"), dict) else {}
    return Agent(
        id=agent_id,
        name=_str(obj, "name"),
        status=AgentStatus.parse(obj.get("status")),
        source=Source(
            repository=_str(source, "repository"),
            ref=_str(source, "ref"),
        ),
        target=Target(
            branch_name=_str(target, "branchName"),
            url=_str(target, "url"),
            pr_url=_str(target, "prUrl"),
            auto_create_pr=bool(target.get("autoCreatePr", False)),
        ),
        summary=_str(obj, "summary"),
        created_at=parse_timestamp(obj.get("createdAt")),
    )


def agent_page_from_dict(data: Any) -> AgentPage:
    obj = _require_dict(data, "agent list")
    raw_agents = obj.get("agents") or []
    if not isinstance(raw_agents, list):
        raise DecodeFailure("'agents' must be a list")
    return AgentPage(
        agents=tuple(agent_from_dict(a) for a in raw_agents),
        next_cursor=_str(obj, "nextCursor"),
    )


def conversation_from_dict(data: Any) -> Conversation:
    obj = _require_dict(data, "conversation")
    raw_messages = obj.get("messages") or []
    if not isinstance(raw_messages, list):
        raise DecodeFailure("'messages' must be a list")
    messages: list[Message] = []
    for raw in raw_messages:
        msg = _require_dict(raw, "message")
        messages.append(Message(
            id=_str(msg, "id"),
            type=MessageType.parse(msg.get("type")),
            text=_str(msg, "text"),
        ))
    return Conversation(id=_str(obj, "id"), messages=tuple(messages))


def key_info_from_dict(data: Any) -> KeyInfo:
    obj = _require_dict(data, "api key info")
    return KeyInfo(
        id=_str(obj, "id"),
        name=_str(obj, "name"),
        user_email=_str(obj, "userEmail"),
        created_at=parse_timestamp(obj.get("createdAt")),
    )
