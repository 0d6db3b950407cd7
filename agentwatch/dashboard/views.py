"""Per-view transition functions.

Each ``update_*`` receives the root state, the event the root did not
consume, and the key map; it mutates only its own sub-state (Settings also
flips root-level preferences) and returns the commands it wants run.
"""

from __future__ import annotations

from ..settings import KeyMap
from .events import (
    AgentSelected,
    Command,
    Event,
    KeyPressed,
    OperationFailed,
    Origin,
    Pasted,
    Post,
    Resized,
    SendFollowup,
)
from .layout import (
    conversation_lines,
    conversation_viewport,
    details_lines,
    details_viewport,
)
from .state import FollowupPhase, RootState, ScrollState, View

FOLLOWUP_CHAR_LIMIT = 200
DASHBOARD_CHROME_LINES = 10

SETTINGS_OPTIONS: tuple[str, ...] = (
    "Auto-refresh agents",
    "Refresh interval",
    "Show expired agents",
    "API key",
)
SETTING_AUTO_REFRESH = 0
SETTING_REFRESH_INTERVAL = 1
SETTING_SHOW_EXPIRED = 2
SETTING_API_KEY = 3


def _scroll(
    scroll: ScrollState,
    event: Event,
    keys: KeyMap,
    content_lines: int,
    viewport: int,
) -> None:
    """Apply a scroll key or resize to ``scroll`` and clamp it."""
    if isinstance(event, KeyPressed):
        key = event.key
        if key in keys.up:
            scroll.offset -= 1
        elif key in keys.down:
            scroll.offset += 1
        elif key in keys.page_up:
            scroll.offset -= viewport
        elif key in keys.page_down:
            scroll.offset += viewport
        elif key in keys.home:
            scroll.offset = 0
        elif key in keys.end:
            scroll.offset = content_lines
    scroll.clamp(content_lines, viewport)


# ── Dashboard ────────────────────────────────────────────────────────


def update_dashboard(state: RootState, event: Event, keys: KeyMap) -> list[Command]:
    dash = state.dashboard
    if not isinstance(event, KeyPressed):
        return []

    key = event.key
    page = max(1, state.height - DASHBOARD_CHROME_LINES)
    if key in keys.toggle:
        dash.show_all = not dash.show_all
        dash.recompute(state.agents)
    elif key in keys.up:
        dash.move(-1)
    elif key in keys.down:
        dash.move(1)
    elif key in keys.page_up:
        dash.move(-page)
    elif key in keys.page_down:
        dash.move(page)
    elif key in keys.home:
        dash.move(-len(dash.rows))
    elif key in keys.end:
        dash.move(len(dash.rows))
    elif key in keys.select:
        agent = dash.cursor_agent()
        if agent is not None:
            return [Post(AgentSelected(agent))]
    return []


# ── Details / Conversation ───────────────────────────────────────────


def update_details(state: RootState, event: Event, keys: KeyMap) -> list[Command]:
    if isinstance(event, (KeyPressed, Resized)):
        _scroll(
            state.details,
            event,
            keys,
            len(details_lines(state.selected_agent, state.width)),
            details_viewport(state.height),
        )
    return []


def update_conversation(state: RootState, event: Event, keys: KeyMap) -> list[Command]:
    if isinstance(event, (KeyPressed, Resized)):
        _scroll(
            state.conversation_view,
            event,
            keys,
            len(conversation_lines(state.conversation, state.width)),
            conversation_viewport(state.height),
        )
    return []


# ── Followup ─────────────────────────────────────────────────────────

_SUBMIT_MULTILINE = ("ctrl+s", "ctrl+enter")
_TOGGLE_MODE = "ctrl+t"
_CLEAR_INPUT = "ctrl+u"
_RESET = "ctrl+r"


def accepts_input(state: RootState) -> bool:
    """True while the follow-up buffer may be edited and submitted."""
    agent = state.selected_agent
    return (
        state.followup.capturing
        and agent is not None
        and agent.is_running
    )


def submit_followup(state: RootState) -> list[Command]:
    """Start a send if the Followup sub-state allows it.

    Only IDLE accepts a submit; a blank buffer, a missing agent or one that
    has stopped running is rejected with an ``OperationFailed`` that leaves
    the phase untouched.
    """
    fu = state.followup
    if fu.phase != FollowupPhase.IDLE:
        return []
    text = fu.buffer.strip()
    if not text:
        return [Post(OperationFailed("follow-up text must not be empty", Origin.LOCAL))]
    agent = state.selected_agent
    if agent is None:
        return [Post(OperationFailed("no agent selected", Origin.LOCAL))]
    if not agent.is_running:
        return [Post(OperationFailed("agent is no longer running", Origin.LOCAL))]
    fu.phase = FollowupPhase.SENDING
    fu.error = ""
    return [SendFollowup(agent_id=agent.id, text=text)]


def _insert(state: RootState, text: str) -> None:
    fu = state.followup
    if not accepts_input(state):
        return
    if not fu.multiline:
        text = " ".join(text.splitlines())
        text = text[: max(0, FOLLOWUP_CHAR_LIMIT - len(fu.buffer))]
    fu.buffer += text


def update_followup(state: RootState, event: Event, keys: KeyMap) -> list[Command]:
    fu = state.followup
    if isinstance(event, Pasted):
        _insert(state, event.text)
        return []
    if not isinstance(event, KeyPressed):
        return []
    key = event.key

    if fu.phase in (FollowupPhase.SENT, FollowupPhase.ERROR):
        if key == _RESET:
            fu.reset(keep_buffer=fu.phase == FollowupPhase.ERROR)
        return []
    if fu.phase == FollowupPhase.SENDING:
        return []

    if key == _TOGGLE_MODE:
        fu.multiline = not fu.multiline
        return []
    if key == _CLEAR_INPUT:
        fu.buffer = ""
        return []
    if key == "backspace":
        fu.buffer = fu.buffer[:-1]
        return []

    if fu.multiline:
        if key in _SUBMIT_MULTILINE:
            return submit_followup(state)
        if key in keys.select:
            _insert(state, "\n")
            return []
    elif key in keys.select:
        return submit_followup(state)

    if event.is_printable:
        _insert(state, event.character or "")
    return []


# ── Settings / Help ──────────────────────────────────────────────────


def update_settings(state: RootState, event: Event, keys: KeyMap) -> list[Command]:
    if not isinstance(event, KeyPressed):
        return []
    st = state.settings
    key = event.key
    if key in keys.up:
        st.selected = max(0, st.selected - 1)
    elif key in keys.down:
        st.selected = min(len(SETTINGS_OPTIONS) - 1, st.selected + 1)
    elif key in keys.select or key == "space":
        if st.selected == SETTING_AUTO_REFRESH:
            state.auto_refresh = not state.auto_refresh
        elif st.selected == SETTING_SHOW_EXPIRED:
            state.dashboard.show_all = not state.dashboard.show_all
            state.dashboard.recompute(state.agents)
    return []


def update_help(state: RootState, event: Event, keys: KeyMap) -> list[Command]:
    return []


VIEW_HANDLERS = {
    View.DASHBOARD: update_dashboard,
    View.DETAILS: update_details,
    View.CONVERSATION: update_conversation,
    View.FOLLOWUP: update_followup,
    View.SETTINGS: update_settings,
    View.HELP: update_help,
}
