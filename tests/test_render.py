"""Tests for the pure render function."""

import io

from rich.console import Console

from agentwatch.dashboard.events import AgentSelected, AgentsFetched, FollowupSent
from agentwatch.dashboard.render import help_bindings, key_label, render, truncate
from agentwatch.dashboard.state import FollowupPhase, View
from agentwatch.dashboard.theme import Theme
from agentwatch.models import AgentStatus, Conversation, Message, MessageType
from agentwatch.settings import load_settings
from tests.helpers import KEYS, feed, loaded_state, make_agent, press

THEME = Theme.from_config(load_settings({}).theme)


def _text(state) -> str:
    console = Console(width=state.width or 100, file=io.StringIO(), record=True)
    console.print(render(state, THEME, KEYS))
    return console.export_text()


def test_unsized_state_renders_loading() -> None:
    state = loaded_state([], width=0, height=0)
    assert _text(state).strip() == "Loading..."


def test_dashboard_lists_active_rows_only() -> None:
    state = loaded_state([
        make_agent("a1", AgentStatus.RUNNING, name="alpha"),
        make_agent("a2", AgentStatus.EXPIRED, name="omega"),
    ])
    out = _text(state)
    assert "Background Agents Dashboard" in out
    assert "Active Agents (1)" in out
    assert "alpha" in out
    assert "omega" not in out

    feed(state, press("t"))
    out = _text(state)
    assert "All Agents (2)" in out
    assert "omega" in out


def test_dashboard_shows_error_and_more_results_hint() -> None:
    state = loaded_state([make_agent("a1")])
    state.error = "error making request: timed out"
    state.next_cursor = "cur-2"
    out = _text(state)
    assert "Error: error making request: timed out" in out
    assert "More results available" in out


def test_details_without_agent() -> None:
    state = loaded_state([])
    state.view = View.DETAILS
    assert "No agent selected" in _text(state)


def test_details_shows_sections() -> None:
    agent = make_agent("a1", name="alpha", summary="Refactored the parser")
    state = loaded_state([agent])
    feed(state, AgentSelected(agent))
    out = _text(state)
    assert "Agent Details: alpha" in out
    assert "Source Information" in out
    assert "Refactored the parser" in out


def test_conversation_loading_empty_and_messages() -> None:
    agent = make_agent("a1", name="alpha")
    state = loaded_state([agent])
    feed(state, AgentSelected(agent), press("c"))
    assert "Loading conversation..." in _text(state)

    state.conversation = Conversation(id="c")
    assert "No messages in this conversation." in _text(state)

    state.conversation = Conversation(id="c", messages=(
        Message(id="m1", type=MessageType.USER_MESSAGE, text="please fix it"),
        Message(id="m2", type=MessageType.AGENT_MESSAGE, text="done"),
    ))
    out = _text(state)
    assert "Message 1" in out
    assert "please fix it" in out
    assert "Message 2" in out


def test_followup_phases() -> None:
    agent = make_agent("a1", name="alpha")
    state = loaded_state([agent])
    feed(state, AgentSelected(agent), press("f"))
    out = _text(state)
    assert "Send Follow-up: alpha" in out
    assert "Short message" in out

    feed(state, press("ctrl+t"))
    assert "Long message" in _text(state)

    feed(state, press("h"), press("i"), press("ctrl+s"))
    assert state.followup.phase == FollowupPhase.SENDING
    assert "Sending follow-up message" in _text(state)

    feed(state, FollowupSent(agent_id="a1", ack_id="x", text="hi"))
    assert "sent successfully" in _text(state)


def test_settings_marks_selected_option() -> None:
    state = loaded_state([])
    state.api_key_label = "key_…1234"
    feed(state, press("s"))
    out = _text(state)
    assert "▶ Auto-refresh agents: Enabled" in out
    assert "API key: key_…1234" in out

    feed(state, press("enter"))
    assert "Auto-refresh agents: Disabled" in _text(state)


def test_help_is_built_from_key_map() -> None:
    entries = {desc: key for key, desc in help_bindings(KEYS) if key}
    assert entries["Quit application"] == "q, Ctrl+C"
    assert entries["Show this help"] == "?, F1"
    assert entries["Refresh agents"] == "r, F5"

    state = loaded_state([])
    feed(state, press("question_mark"))
    assert "Help & Keyboard Shortcuts" in _text(state)


def test_key_label_and_truncate() -> None:
    assert key_label("escape") == "Esc"
    assert key_label("ctrl+enter") == "Ctrl+Enter"
    assert key_label("j") == "j"
    assert truncate("abcdefghij", 8) == "abcde..."
    assert truncate("short", 8) == "short"


def test_dashboard_refresh_stamp_comes_from_state() -> None:
    state = loaded_state([make_agent("a1", name="alpha")])
    assert "Updated" not in _text(state)

    feed(state, AgentsFetched(agents=(make_agent("a1"),), at=2000.0, at_label="12:34:56"))
    assert state.last_refresh_label == "12:34:56"
    assert "Updated 12:34:56" in _text(state)
