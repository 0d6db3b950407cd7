"""Pure rendering: ``render(state, theme, keys)`` → Rich renderable frame."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import USER_CONFIG_PATH
from ..models import Agent, AgentStatus, MessageType
from ..settings import KeyMap
from .layout import (
    Line,
    content_width,
    conversation_lines,
    conversation_viewport,
    details_lines,
    details_viewport,
    format_timestamp,
)
from .state import FollowupPhase, RootState, View
from .theme import Theme, status_icon
from .views import (
    DASHBOARD_CHROME_LINES,
    SETTING_API_KEY,
    SETTING_AUTO_REFRESH,
    SETTING_REFRESH_INTERVAL,
    SETTING_SHOW_EXPIRED,
    SETTINGS_OPTIONS,
)

_KEY_LABELS: dict[str, str] = {
    "question_mark": "?",
    "escape": "Esc",
    "enter": "Enter",
    "backspace": "Backspace",
    "space": "Space",
    "up": "↑",
    "down": "↓",
    "left": "←",
    "right": "→",
    "pageup": "PgUp",
    "pagedown": "PgDn",
    "home": "Home",
    "end": "End",
}


def key_label(key: str) -> str:
    """Human label for a Textual key name (``ctrl+c`` → ``Ctrl+C``)."""
    if key in _KEY_LABELS:
        return _KEY_LABELS[key]
    if "+" in key:
        mod, _, rest = key.rpartition("+")
        label = key_label(rest)
        if len(label) == 1:
            label = label.upper()
        return "+".join(p.capitalize() for p in mod.split("+")) + "+" + label
    if len(key) > 1 and key[0] == "f" and key[1:].isdigit():
        return key.upper()
    return key


def keys_label(keys: tuple[str, ...]) -> str:
    return ", ".join(key_label(k) for k in keys) or "—"


def _first(keys: tuple[str, ...]) -> str:
    return key_label(keys[0]) if keys else "—"


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    if length <= 3:
        return text[:length]
    return text[: length - 3] + "..."


# ── Shared pieces ────────────────────────────────────────────────────


def _header(text: str, width: int, theme: Theme) -> Text:
    inner = content_width(width)
    return Text(f" {text} ".ljust(inner), style=theme.header)


def _error(message: str, theme: Theme) -> Text:
    return Text(f"Error: {message}", style=theme.error)


def _help(text: str, theme: Theme) -> Text:
    return Text(text, style=theme.help)


def _line_text(line: Line, theme: Theme) -> Text:
    if line.role == "title":
        return Text(line.text, style=theme.title)
    if line.role in ("field", "status"):
        out = Text("  ")
        out.append(line.label, style=theme.label)
        out.append(" ")
        out.append(line.text, style=theme.cell)
        return out
    if line.role == "separator":
        return Text(line.text, style=theme.help)
    if line.role.startswith("message:"):
        kind = MessageType.parse(line.role.partition(":")[2])
        return Text(line.text, style=theme.message_style(kind))
    return Text(line.text, style=theme.cell)


def _window(lines: list[Line], offset: int, viewport: int, theme: Theme) -> Text:
    visible = lines[offset: offset + viewport]
    return Text("\n").join(_line_text(line, theme) for line in visible)


def _frame(parts: list[RenderableType]) -> RenderableType:
    return Padding(Group(*parts), (1, 2))


# ── Views ────────────────────────────────────────────────────────────


def _dashboard_table(state: RootState, theme: Theme) -> Table:
    dash = state.dashboard
    table = Table(
        expand=True,
        box=None,
        header_style=theme.header,
        show_edge=False,
        pad_edge=False,
    )
    table.add_column("ID", width=12, no_wrap=True)
    table.add_column("Name", ratio=2, no_wrap=True)
    table.add_column("Status", width=14, no_wrap=True)
    table.add_column("Repository", ratio=2, no_wrap=True)
    table.add_column("Created", width=16, no_wrap=True)

    visible = max(1, state.height - DASHBOARD_CHROME_LINES)
    cursor = dash.cursor_index
    start = max(0, cursor - visible + 1)
    for agent in dash.rows[start: start + visible]:
        selected = agent.id == dash.cursor_id
        status = Text(
            f"{status_icon(agent.status)} {agent.status.value}",
            style=theme.selected if selected else theme.status_style(agent.status),
        )
        table.add_row(
            agent.id,
            truncate(agent.name, 25),
            status,
            truncate(agent.repo_short_name, 30),
            format_timestamp(agent, "%Y-%m-%d %H:%M"),
            style=theme.selected if selected else theme.cell,
        )
    return table


def render_dashboard(state: RootState, theme: Theme, keys: KeyMap) -> RenderableType:
    dash = state.dashboard
    parts: list[RenderableType] = [
        _header("🚀 Background Agents Dashboard", state.width, theme),
        Text(""),
    ]
    active = sum(1 for a in state.agents if a.status != AgentStatus.EXPIRED)
    label = "● All Agents" if dash.show_all else "● Active Agents"
    count = len(state.agents) if dash.show_all else active
    status = (
        f"{label} ({count}) | Press '{_first(keys.toggle)}' to toggle"
        f" | Press '{_first(keys.help)}' for help"
    )
    if state.last_refresh_label:
        status += f" | Updated {state.last_refresh_label}"
    if not state.auto_refresh:
        status += " | Auto-refresh off"
    parts.append(Text(status, style=theme.info))
    if state.error:
        parts.append(_error(state.error, theme))

    if dash.rows:
        parts.append(_dashboard_table(state, theme))
    elif state.last_refresh:
        parts.append(Text("No agents to show.", style=theme.help))
    else:
        parts.append(Text("Loading agents...", style=theme.info))

    if state.next_cursor:
        parts.append(Text("More results available on the next page.", style=theme.help))
    parts.append(Text(""))
    parts.append(_help(
        f"↑/↓: Navigate | {_first(keys.select)}: View Details"
        f" | {_first(keys.details)}: Details | {_first(keys.conversation)}: Conversation"
        f" | {_first(keys.followup)}: Follow-up | {_first(keys.refresh)}: Refresh"
        f" | {_first(keys.quit)}: Quit",
        theme,
    ))
    return _frame(parts)


def _no_agent(theme: Theme) -> RenderableType:
    return _frame([Text("No agent selected", style=theme.error)])


def render_details(state: RootState, theme: Theme, keys: KeyMap) -> RenderableType:
    agent = state.selected_agent
    if agent is None:
        return _no_agent(theme)
    parts: list[RenderableType] = [
        _header(f"🤖 Agent Details: {agent.name}", state.width, theme),
        Text(""),
    ]
    if state.error:
        parts.append(_error(state.error, theme))
    lines = details_lines(agent, state.width)
    parts.append(_window(lines, state.details.offset, details_viewport(state.height), theme))
    parts.append(Text(""))
    parts.append(_help(
        f"↑/↓: Scroll | {_first(keys.conversation)}: Conversation"
        f" | {_first(keys.followup)}: Follow-up | {_first(keys.back)}: Back"
        f" | {_first(keys.quit)}: Quit",
        theme,
    ))
    return _frame(parts)


def render_conversation(state: RootState, theme: Theme, keys: KeyMap) -> RenderableType:
    agent = state.selected_agent
    if agent is None:
        return _no_agent(theme)
    parts: list[RenderableType] = [
        _header(f"💬 Conversation: {agent.name}", state.width, theme),
        Text(""),
    ]
    if state.error:
        parts.append(_error(state.error, theme))
        parts.append(Text(""))
        parts.append(_help(
            f"{_first(keys.back)}: Back | {_first(keys.quit)}: Quit", theme,
        ))
        return _frame(parts)

    conversation = state.conversation
    if conversation is None:
        parts.append(Text("Loading conversation...", style=theme.info))
    elif not conversation.messages:
        parts.append(Text("No messages in this conversation.", style=theme.info))
    else:
        lines = conversation_lines(conversation, state.width)
        parts.append(_window(
            lines, state.conversation_view.offset,
            conversation_viewport(state.height), theme,
        ))
    parts.append(Text(""))
    parts.append(_help(
        f"↑/↓: Scroll | {_first(keys.followup)}: Follow-up"
        f" | {_first(keys.back)}: Back | {_first(keys.quit)}: Quit",
        theme,
    ))
    return _frame(parts)


def _followup_input(state: RootState, theme: Theme) -> Panel:
    fu = state.followup
    if fu.buffer:
        body = Text(fu.buffer, style=theme.cell)
    else:
        placeholder = (
            "Enter your follow-up message (Ctrl+S to send)..."
            if fu.multiline
            else "Enter your follow-up message..."
        )
        body = Text(placeholder, style=theme.help)
    if fu.phase == FollowupPhase.IDLE:
        body.append("▏", style=theme.info)
    return Panel(
        body,
        border_style=theme.info if fu.phase == FollowupPhase.IDLE else theme.help,
        height=10 if fu.multiline else 3,
        width=min(74, content_width(state.width)),
    )


def render_followup(state: RootState, theme: Theme, keys: KeyMap) -> RenderableType:
    agent: Agent | None = state.selected_agent
    if agent is None:
        return _no_agent(theme)
    if not agent.is_running:
        return _frame([Text(
            "Can only send follow-up messages to running agents", style=theme.error,
        )])

    fu = state.followup
    parts: list[RenderableType] = [
        _header(f"📤 Send Follow-up: {agent.name}", state.width, theme),
        Text(""),
    ]
    if fu.phase == FollowupPhase.SENT:
        parts.append(Text("✅ Follow-up message sent successfully!", style=theme.success))
        parts.append(Text(
            "The agent will process your instruction and continue working.",
            style=theme.info,
        ))
        parts.append(Text(""))
    if fu.error:
        parts.append(_error(fu.error, theme))
    if state.error and state.error != fu.error:
        parts.append(_error(state.error, theme))

    if fu.phase != FollowupPhase.SENT:
        parts.append(Text("Enter additional instructions for the agent:", style=theme.info))
        mode = "Long message" if fu.multiline else "Short message"
        parts.append(_help(f"Mode: {mode} (Ctrl+T to toggle)", theme))
        parts.append(_followup_input(state, theme))
        if fu.phase == FollowupPhase.SENDING:
            parts.append(Text("📤 Sending follow-up message...", style=theme.info))

    back = _first(keys.back)
    quit_key = _first(keys.quit)
    if fu.phase == FollowupPhase.SENT:
        help_text = f"Ctrl+R: New message | {back}: Back | {quit_key}: Quit"
    elif fu.phase == FollowupPhase.ERROR:
        help_text = f"Ctrl+R: Edit and retry | {back}: Back | {quit_key}: Quit"
    elif fu.multiline:
        help_text = f"Ctrl+S: Send | Ctrl+T: Toggle input mode | {back}: Back"
    else:
        help_text = f"Enter: Send | Ctrl+T: Toggle input mode | {back}: Back"
    parts.append(Text(""))
    parts.append(_help(help_text, theme))
    return _frame(parts)


def _settings_value(state: RootState, index: int) -> str:
    option = SETTINGS_OPTIONS[index]
    if index == SETTING_AUTO_REFRESH:
        return f"{option}: {'Enabled' if state.auto_refresh else 'Disabled'}"
    if index == SETTING_REFRESH_INTERVAL:
        return f"{option}: {state.refresh_interval:g} seconds"
    if index == SETTING_SHOW_EXPIRED:
        return f"{option}: {'Yes' if state.dashboard.show_all else 'No'}"
    if index == SETTING_API_KEY:
        return f"{option}: {state.api_key_label or '(not set)'}"
    return option


def render_settings(state: RootState, theme: Theme, keys: KeyMap) -> RenderableType:
    parts: list[RenderableType] = [
        _header("⚙️  Settings", state.width, theme),
        Text(""),
    ]
    if state.error:
        parts.append(_error(state.error, theme))
    parts.append(Text("Configuration", style=theme.title))
    parts.append(Text(""))
    for idx in range(len(SETTINGS_OPTIONS)):
        value = _settings_value(state, idx)
        if idx == state.settings.selected:
            parts.append(Text(f"▶ {value}", style=theme.selected))
        else:
            parts.append(Text(f"  {value}", style=theme.cell))
    parts.append(Text(""))
    parts.append(Text(f"Configuration is stored in {USER_CONFIG_PATH}", style=theme.info))
    parts.append(Text(""))
    parts.append(_help(
        f"↑/↓: Navigate | {_first(keys.select)}/Space: Select"
        f" | {_first(keys.back)}: Back | {_first(keys.quit)}: Quit",
        theme,
    ))
    return _frame(parts)


def help_bindings(keys: KeyMap, refresh_interval: float = 30.0) -> list[tuple[str, str]]:
    """(key, description) rows; an empty key marks a section header."""
    return [
        ("", "🧭 Navigation"),
        (f"{keys_label(keys.up)} / {keys_label(keys.down)}", "Navigate up/down"),
        (keys_label(keys.select), "Select/confirm"),
        (keys_label(keys.back), "Go back"),
        (keys_label(keys.quit), "Quit application"),
        ("", "📋 Dashboard"),
        (keys_label(keys.refresh), "Refresh agents"),
        (keys_label(keys.toggle), "Toggle show all/active agents"),
        (keys_label(keys.details), "View agent details"),
        (keys_label(keys.conversation), "View conversation"),
        (keys_label(keys.followup), "Send follow-up (running agents)"),
        (keys_label(keys.settings), "Open settings"),
        (keys_label(keys.help), "Show this help"),
        ("", "👁️  Views"),
        ("Details", "Scroll with ↑/↓, view agent information"),
        ("Conversation", "Scroll through message history"),
        ("Follow-up", "Ctrl+T toggles input mode, Ctrl+U clears input"),
        ("Settings", "Toggle auto-refresh and expired agents"),
        ("", "💡 Tips"),
        ("", f"• Agents auto-refresh every {refresh_interval:g} seconds"),
        ("", f"• Use '{_first(keys.toggle)}' in dashboard to filter expired agents"),
        ("", "• Follow-up messages can only be sent to running agents"),
        ("", f"• Configuration is saved in {USER_CONFIG_PATH}"),
    ]


def render_help(state: RootState, theme: Theme, keys: KeyMap) -> RenderableType:
    parts: list[RenderableType] = [
        _header("❓ Help & Keyboard Shortcuts", state.width, theme),
    ]
    for key, desc in help_bindings(keys, state.refresh_interval):
        if not key:
            if desc.startswith("•"):
                parts.append(Text(desc, style=theme.cell))
            else:
                parts.append(Text(""))
                parts.append(Text(desc, style=theme.title))
            continue
        row = Text("  ")
        row.append(f" {key} ", style=theme.key)
        row.append(" ")
        row.append(desc, style=theme.cell)
        parts.append(row)
    parts.append(Text(""))
    parts.append(_help(f"Press {_first(keys.back)} to return to the dashboard", theme))
    return _frame(parts)


_RENDERERS = {
    View.DASHBOARD: render_dashboard,
    View.DETAILS: render_details,
    View.CONVERSATION: render_conversation,
    View.FOLLOWUP: render_followup,
    View.SETTINGS: render_settings,
    View.HELP: render_help,
}


def render(state: RootState, theme: Theme, keys: KeyMap) -> RenderableType:
    """Render the active view; depends only on its arguments."""
    if state.width == 0 or state.height == 0:
        return Text("Loading...")
    return _RENDERERS[state.view](state, theme, keys)
