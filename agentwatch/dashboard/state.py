"""Root state of the dashboard and the per-view sub-states."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..models import Agent, AgentStatus, Conversation


class View(Enum):
    DASHBOARD = "dashboard"
    DETAILS = "details"
    CONVERSATION = "conversation"
    FOLLOWUP = "followup"
    SETTINGS = "settings"
    HELP = "help"


class FollowupPhase(Enum):
    IDLE = "idle"
    SENDING = "sending"
    SENT = "sent"
    ERROR = "error"


def filter_agents(agents: list[Agent], show_all: bool) -> list[Agent]:
    """Rows visible on the dashboard: everything but EXPIRED unless show_all."""
    if show_all:
        return list(agents)
    return [a for a in agents if a.status != AgentStatus.EXPIRED]


@dataclass
class DashboardState:
    show_all: bool = False
    rows: list[Agent] = field(default_factory=list)
    cursor_id: Optional[str] = None

    @property
    def cursor_index(self) -> int:
        """Row index of the cursor agent, or 0 when it is not visible."""
        for idx, agent in enumerate(self.rows):
            if agent.id == self.cursor_id:
                return idx
        return 0

    def cursor_agent(self) -> Agent | None:
        for agent in self.rows:
            if agent.id == self.cursor_id:
                return agent
        return None

    def recompute(self, agents: list[Agent]) -> None:
        """Re-derive rows and keep the cursor on a visible agent.

        The cursor stays on the same agent id when it is still visible;
        otherwise its previous position is clamped into the new range.
        """
        previous = self.cursor_index
        self.rows = filter_agents(agents, self.show_all)
        if not self.rows:
            self.cursor_id = None
            return
        if any(a.id == self.cursor_id for a in self.rows):
            return
        idx = min(previous, len(self.rows) - 1)
        self.cursor_id = self.rows[idx].id

    def move(self, delta: int) -> None:
        if not self.rows:
            self.cursor_id = None
            return
        idx = max(0, min(len(self.rows) - 1, self.cursor_index + delta))
        self.cursor_id = self.rows[idx].id


@dataclass
class ScrollState:
    offset: int = 0

    def clamp(self, content_lines: int, viewport: int) -> None:
        upper = max(0, content_lines - max(1, viewport))
        self.offset = max(0, min(self.offset, upper))


@dataclass
class FollowupState:
    buffer: str = ""
    multiline: bool = False
    phase: FollowupPhase = FollowupPhase.IDLE
    error: str = ""
    last_sent: str = ""

    @property
    def capturing(self) -> bool:
        """True while keystrokes belong to the input buffer."""
        return self.phase == FollowupPhase.IDLE

    def reset(self, *, keep_buffer: bool = False) -> None:
        if not keep_buffer:
            self.buffer = ""
        self.phase = FollowupPhase.IDLE
        self.error = ""


@dataclass
class SettingsState:
    selected: int = 0


@dataclass
class RootState:
    view: View = View.DASHBOARD
    width: int = 0
    height: int = 0
    agents: list[Agent] = field(default_factory=list)
    next_cursor: str = ""
    selected_agent: Optional[Agent] = None
    conversation: Optional[Conversation] = None
    error: str = ""
    last_refresh: float = 0.0
    last_refresh_label: str = ""
    last_refresh_attempt: float = 0.0
    auto_refresh: bool = True
    refresh_interval: float = 30.0
    page_size: int = 100
    api_key_label: str = ""
    running: bool = True
    dashboard: DashboardState = field(default_factory=DashboardState)
    details: ScrollState = field(default_factory=ScrollState)
    conversation_view: ScrollState = field(default_factory=ScrollState)
    followup: FollowupState = field(default_factory=FollowupState)
    settings: SettingsState = field(default_factory=SettingsState)
