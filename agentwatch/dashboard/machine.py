"""Root orchestrator: ``transition(state, event) -> (state, commands)``.

Every event the dashboard sees goes through ``transition`` on the loop
thread, one at a time and in arrival order. It never performs I/O; remote
work is requested by returning commands that the dispatcher runs.
"""

from __future__ import annotations

from ..settings import SETTINGS, KeyMap
from .events import (
    AgentFetched,
    AgentSelected,
    AgentsFetched,
    Command,
    ConversationFetched,
    Event,
    FollowupSent,
    GetAgent,
    GetConversation,
    KeyPressed,
    ListAgents,
    OperationFailed,
    Origin,
    Quit,
    Resized,
    ScheduleTick,
    Tick,
)
from .layout import conversation_lines, conversation_viewport
from .state import FollowupPhase, RootState, View
from .views import VIEW_HANDLERS, accepts_input

# Keys that edit the follow-up buffer instead of acting globally.
_TEXT_KEYS = frozenset({"backspace", "enter", "space", "tab"})


def new_state(
    *,
    auto_refresh: bool | None = None,
    refresh_interval: float | None = None,
    page_size: int | None = None,
    api_key_label: str = "",
    now: float = 0.0,
) -> RootState:
    """Fresh root state: Dashboard view, empty collections."""
    return RootState(
        auto_refresh=(
            SETTINGS.dashboard.auto_refresh if auto_refresh is None else auto_refresh
        ),
        refresh_interval=(
            SETTINGS.dashboard.refresh_interval
            if refresh_interval is None
            else refresh_interval
        ),
        page_size=SETTINGS.api.page_size if page_size is None else page_size,
        api_key_label=api_key_label,
        last_refresh=now,
    )


def initial_commands(state: RootState) -> list[Command]:
    """First fetch plus the first tick."""
    return [ListAgents(limit=state.page_size), ScheduleTick()]


def transition(
    state: RootState,
    event: Event,
    keys: KeyMap | None = None,
) -> tuple[RootState, list[Command]]:
    """Apply one event to ``state`` (in place) and return the commands to run."""
    keys = keys or SETTINGS.keys
    commands: list[Command] = []

    if isinstance(event, KeyPressed):
        if _handle_global_key(state, event, keys, commands):
            return state, commands
    elif isinstance(event, Resized):
        state.width = event.width
        state.height = event.height
    elif isinstance(event, AgentsFetched):
        _apply_agents(state, event)
        return state, commands
    elif isinstance(event, AgentFetched):
        _apply_agent(state, event)
        return state, commands
    elif isinstance(event, ConversationFetched):
        _apply_conversation(state, event)
        return state, commands
    elif isinstance(event, FollowupSent):
        fu = state.followup
        if fu.phase == FollowupPhase.SENDING:
            fu.phase = FollowupPhase.SENT
            fu.last_sent = event.text
            fu.buffer = ""
            fu.error = ""
        return state, commands
    elif isinstance(event, OperationFailed):
        state.error = event.message
        fu = state.followup
        if event.origin == Origin.SEND_FOLLOWUP and fu.phase == FollowupPhase.SENDING:
            fu.phase = FollowupPhase.ERROR
            fu.error = event.message
        return state, commands
    elif isinstance(event, Tick):
        if _refresh_due(state, event.now):
            state.last_refresh_attempt = event.now
            commands.append(ListAgents(limit=state.page_size))
        commands.append(ScheduleTick())
        return state, commands
    elif isinstance(event, AgentSelected):
        _select_agent(state, event)
        commands.extend(enter_view(state, View.DETAILS))
        return state, commands

    handler = VIEW_HANDLERS[state.view]
    commands.extend(handler(state, event, keys))
    return state, commands


# ── Global bindings ──────────────────────────────────────────────────


def _captured_by_input(state: RootState, event: KeyPressed) -> bool:
    if state.view != View.FOLLOWUP or not accepts_input(state):
        return False
    return event.is_printable or event.key in _TEXT_KEYS


def _handle_global_key(
    state: RootState,
    event: KeyPressed,
    keys: KeyMap,
    commands: list[Command],
) -> bool:
    """Run a global binding. Returns True when the key was consumed."""
    if _captured_by_input(state, event):
        return False

    key = event.key
    if key in keys.quit:
        state.running = False
        commands.append(Quit())
    elif key in keys.help:
        state.view = View.HELP
    elif key in keys.back:
        if state.view != View.DASHBOARD:
            state.view = View.DASHBOARD
    elif key in keys.refresh:
        commands.append(ListAgents(limit=state.page_size))
    elif key in keys.details:
        commands.extend(enter_view(state, View.DETAILS))
    elif key in keys.conversation:
        commands.extend(enter_view(state, View.CONVERSATION))
    elif key in keys.followup:
        commands.extend(enter_view(state, View.FOLLOWUP))
    elif key in keys.settings:
        commands.extend(enter_view(state, View.SETTINGS))
    else:
        return False
    return True


def can_enter(state: RootState, view: View) -> bool:
    """Guards for the view-switch shortcuts."""
    agent = state.selected_agent
    if view in (View.DETAILS, View.CONVERSATION):
        return agent is not None
    if view == View.FOLLOWUP:
        return agent is not None and agent.is_running
    return True


def enter_view(state: RootState, view: View) -> list[Command]:
    """Switch to ``view`` if its guard passes; returns the fetches it needs."""
    if not can_enter(state, view):
        return []
    agent = state.selected_agent
    state.view = view

    if view == View.DETAILS and agent is not None:
        state.details.offset = 0
        return [GetAgent(agent_id=agent.id)]
    if view == View.CONVERSATION and agent is not None:
        state.conversation = None
        state.conversation_view.offset = 0
        return [GetConversation(agent_id=agent.id)]
    if view == View.FOLLOWUP:
        fu = state.followup
        if fu.phase in (FollowupPhase.SENT, FollowupPhase.ERROR):
            fu.reset(keep_buffer=fu.phase == FollowupPhase.ERROR)
    return []


# ── Results ──────────────────────────────────────────────────────────


def _apply_agents(state: RootState, event: AgentsFetched) -> None:
    state.agents = list(event.agents)
    state.error = ""
    state.last_refresh = event.at
    state.last_refresh_label = event.at_label
    state.next_cursor = event.next_cursor

    selected = state.selected_agent
    if selected is not None:
        # A vanished agent keeps its stale record.
        for agent in state.agents:
            if agent.id == selected.id:
                state.selected_agent = agent
                break

    state.dashboard.recompute(state.agents)


def _apply_agent(state: RootState, event: AgentFetched) -> None:
    selected = state.selected_agent
    if selected is None or selected.id != event.agent.id:
        return
    state.selected_agent = event.agent
    state.agents = [
        event.agent if a.id == event.agent.id else a for a in state.agents
    ]
    state.dashboard.recompute(state.agents)


def _apply_conversation(state: RootState, event: ConversationFetched) -> None:
    selected = state.selected_agent
    if selected is None or selected.id != event.agent_id:
        return
    state.conversation = event.conversation
    state.conversation_view.clamp(
        len(conversation_lines(state.conversation, state.width)),
        conversation_viewport(state.height),
    )


def _select_agent(state: RootState, event: AgentSelected) -> None:
    previous = state.selected_agent
    state.selected_agent = event.agent
    if previous is not None and previous.id == event.agent.id:
        return
    state.conversation = None
    if state.followup.phase != FollowupPhase.SENDING:
        state.followup.reset()


def _refresh_due(state: RootState, now: float) -> bool:
    if not state.auto_refresh:
        return False
    since = max(state.last_refresh, state.last_refresh_attempt)
    return now - since > state.refresh_interval
