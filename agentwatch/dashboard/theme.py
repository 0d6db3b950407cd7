"""Color theme passed explicitly into the render functions."""

from __future__ import annotations

from dataclasses import dataclass

from rich.style import Style

from ..models import AgentStatus, MessageType
from ..settings import ThemeConfig

_STATUS_ICONS: dict[AgentStatus, str] = {
    AgentStatus.RUNNING: "🏃",
    AgentStatus.COMPLETED: "✅",
    AgentStatus.FAILED: "❌",
    AgentStatus.CANCELLED: "🚫",
    AgentStatus.EXPIRED: "⏰",
    AgentStatus.UNKNOWN: "❓",
}

_MESSAGE_ICONS: dict[MessageType, str] = {
    MessageType.USER_MESSAGE: "👤",
    MessageType.AGENT_MESSAGE: "🤖",
    MessageType.SYSTEM_MESSAGE: "⚙️",
    MessageType.UNKNOWN: "💬",
}


def status_icon(status: AgentStatus) -> str:
    return _STATUS_ICONS.get(status, "❓")


def message_icon(kind: MessageType) -> str:
    return _MESSAGE_ICONS.get(kind, "💬")


@dataclass(frozen=True)
class Theme:
    header: Style
    title: Style
    info: Style
    help: Style
    error: Style
    success: Style
    cell: Style
    label: Style
    selected: Style
    key: Style
    running: Style
    failed: Style
    cancelled: Style
    expired: Style

    @classmethod
    def from_config(cls, cfg: ThemeConfig) -> Theme:
        return cls(
            header=Style(color=cfg.highlight, bgcolor=cfg.primary, bold=True),
            title=Style(color=cfg.primary, bold=True),
            info=Style(color=cfg.secondary, bold=True),
            help=Style(color=cfg.muted),
            error=Style(color=cfg.error, bold=True),
            success=Style(color=cfg.success, bold=True),
            cell=Style(color=cfg.text),
            label=Style(color=cfg.text, bold=True),
            selected=Style(color="#000000", bgcolor=cfg.secondary, bold=True),
            key=Style(color=cfg.text, bgcolor=cfg.primary, bold=True),
            running=Style(color=cfg.success, bold=True),
            failed=Style(color=cfg.error, bold=True),
            cancelled=Style(color=cfg.warning, bold=True),
            expired=Style(color=cfg.muted, bold=True),
        )

    def status_style(self, status: AgentStatus) -> Style:
        if status in (AgentStatus.RUNNING, AgentStatus.COMPLETED):
            return self.running
        if status == AgentStatus.FAILED:
            return self.failed
        if status == AgentStatus.CANCELLED:
            return self.cancelled
        if status == AgentStatus.EXPIRED:
            return self.expired
        return self.cell

    def message_style(self, kind: MessageType) -> Style:
        if kind == MessageType.USER_MESSAGE:
            return self.info
        if kind == MessageType.SYSTEM_MESSAGE:
            return self.help
        return self.cell
