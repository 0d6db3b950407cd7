"""Plain-text line layout for the scrollable views.

The transition function needs content heights to clamp scroll offsets, and
the renderer needs the same lines to draw them, so both share these pure
builders. Each ``Line`` carries a role name the renderer maps to a style.
"""

from __future__ import annotations

import textwrap
from typing import NamedTuple

from ..models import Agent, Conversation, MessageType
from .theme import message_icon, status_icon

DETAILS_CHROME_LINES = 6
CONVERSATION_CHROME_LINES = 8
FRAME_PADDING_X = 2
SEPARATOR_WIDTH = 50


class Line(NamedTuple):
    role: str
    text: str = ""
    label: str = ""


def content_width(width: int) -> int:
    return max(20, width - 2 * FRAME_PADDING_X)


def details_viewport(height: int) -> int:
    return max(1, height - DETAILS_CHROME_LINES)


def conversation_viewport(height: int) -> int:
    return max(1, height - CONVERSATION_CHROME_LINES)


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap text to ``width``; never returns an empty list."""
    lines = textwrap.wrap(text, width=max(10, width), break_long_words=True)
    return lines or [""]


def format_timestamp(agent: Agent, fmt: str = "%Y-%m-%d %H:%M:%S %Z") -> str:
    if agent.created_at is None:
        return "—"
    return agent.created_at.strftime(fmt).strip()


def details_lines(agent: Agent | None, width: int) -> list[Line]:
    if agent is None:
        return []
    inner = content_width(width)
    lines: list[Line] = [
        Line("title", "📋 Basic Information"),
        Line("field", agent.id, "ID:"),
        Line("field", agent.name, "Name:"),
        Line("status", f"{status_icon(agent.status)} {agent.status.value}", "Status:"),
        Line("field", format_timestamp(agent), "Created:"),
        Line("blank"),
        Line("title", "📂 Source Information"),
        Line("field", agent.source.repository, "Repository:"),
        Line("field", agent.source.ref, "Reference:"),
        Line("blank"),
        Line("title", "🎯 Target Information"),
        Line("field", agent.target.branch_name, "Branch:"),
        Line("field", agent.target.url, "Agent URL:"),
        Line("field", "true" if agent.target.auto_create_pr else "false", "Auto Create PR:"),
    ]
    if agent.target.pr_url:
        lines.append(Line("field", agent.target.pr_url, "Pull Request:"))
    if agent.summary:
        lines.append(Line("blank"))
        lines.append(Line("title", "📄 Summary"))
        for chunk in wrap_text(agent.summary, min(70, inner - 2)):
            lines.append(Line("cell", f"  {chunk}"))
    return lines


def _message_role(kind: MessageType) -> str:
    return f"message:{kind.value}"


def conversation_lines(conversation: Conversation | None, width: int) -> list[Line]:
    if conversation is None or not conversation.messages:
        return []
    inner = content_width(width)
    lines: list[Line] = []
    last = len(conversation.messages) - 1
    for idx, message in enumerate(conversation.messages):
        lines.append(Line("title", f"{message_icon(message.type)} Message {idx + 1}"))
        role = _message_role(message.type)
        for raw in message.text.split("\n"):
            if not raw.strip():
                lines.append(Line("blank"))
                continue
            for chunk in wrap_text(raw, inner - 2):
                lines.append(Line(role, f"  {chunk}"))
        if idx < last:
            lines.append(Line("blank"))
            lines.append(Line("separator", "─" * min(SEPARATOR_WIDTH, inner)))
            lines.append(Line("blank"))
    return lines
