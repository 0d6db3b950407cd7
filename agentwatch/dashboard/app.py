"""agentwatch TUI dashboard: main App class.

The App is the single event loop. Key presses, resizes, ticks and remote
results all become events that go through ``transition`` one at a time;
the commands it returns are executed here.
"""

from __future__ import annotations

import argparse
import sys
import time

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import Label, Static

from ..client import AgentClient
from ..config import get_api_key, mask_api_key
from ..debuglog import debug_log
from ..errors import ConfigError
from ..settings import SETTINGS, Settings
from .css import APP_CSS
from .dispatcher import CommandDispatcher
from .events import (
    REMOTE_COMMANDS,
    Command,
    Event,
    KeyPressed,
    Pasted,
    Post,
    Quit,
    RemoteCommand,
    Resized,
    ScheduleTick,
    Tick,
)
from .machine import initial_commands, new_state, transition
from .render import render
from .theme import Theme

# Title bar and status line.
CHROME_ROWS = 2


class AgentwatchApp(App):
    TITLE = "agentwatch"
    DEFAULT_CSS = APP_CSS
    BINDINGS = [
        # Textual reserves ctrl+c; route it through the state machine.
        Binding("ctrl+c", "quit_key", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        *,
        api_key_label: str = "",
        settings: Settings | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings or SETTINGS
        self.dispatcher = dispatcher
        self.keys = self.settings.keys
        self.render_theme = Theme.from_config(self.settings.theme)
        self.state = new_state(
            auto_refresh=self.settings.dashboard.auto_refresh,
            refresh_interval=self.settings.dashboard.refresh_interval,
            page_size=self.settings.api.page_size,
            api_key_label=api_key_label,
            now=time.time(),
        )
        self._tick_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Horizontal(
            Label("🚀 agentwatch", id="title-text"),
            Static("", id="title-clock"),
            id="title-bar",
        )
        yield Static("", id="frame")
        yield Static("", id="status-line")

    def on_mount(self) -> None:
        debug_log("dashboard started")
        self.update_clock()
        self.set_interval(1.0, self.update_clock)
        self._execute(initial_commands(self.state))
        self._redraw()

    def update_clock(self) -> None:
        try:
            clock = self.query_one("#title-clock", Static)
        except NoMatches:
            return
        clock.update(f"  {time.strftime('%H:%M:%S')}")

    # ── Event intake ─────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.handle_event(KeyPressed(key=event.key, character=event.character))

    def on_paste(self, event: events.Paste) -> None:
        event.stop()
        self.handle_event(Pasted(text=event.text))

    def on_resize(self, event: events.Resize) -> None:
        self.handle_event(Resized(
            width=event.size.width,
            height=max(0, event.size.height - CHROME_ROWS),
        ))

    def action_quit_key(self) -> None:
        self.handle_event(KeyPressed(key="ctrl+c"))

    def handle_event(self, event: Event) -> None:
        """Feed one event through the state machine, then redraw."""
        _, commands = transition(self.state, event, self.keys)
        self._execute(commands)
        self._redraw()

    # ── Command execution ────────────────────────────────────────────

    def _execute(self, commands: list[Command]) -> None:
        for command in commands:
            if isinstance(command, REMOTE_COMMANDS):
                self._run_remote(command)
            elif isinstance(command, ScheduleTick):
                self._schedule_tick()
            elif isinstance(command, Post):
                self.call_later(self.handle_event, command.event)
            elif isinstance(command, Quit):
                debug_log("dashboard quit")
                self.exit()

    def _schedule_tick(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.stop()
        self._tick_timer = self.set_timer(
            self.settings.dashboard.tick_interval, self._tick_fired,
        )

    def _tick_fired(self) -> None:
        self._tick_timer = None
        self.handle_event(Tick(now=time.time()))

    @work(thread=True, group="remote")
    def _run_remote(self, command: RemoteCommand) -> None:
        """Run one remote command off the loop and post its result back."""
        result = self.dispatcher.execute(command)
        self.call_from_thread(self.handle_event, result)

    # ── Rendering ────────────────────────────────────────────────────

    def _status_text(self) -> str:
        state = self.state
        refresh = "auto-refresh on" if state.auto_refresh else "auto-refresh off"
        return (
            f"{len(state.agents)} agents · key {state.api_key_label or '(not set)'}"
            f" · {refresh} ({state.refresh_interval:g}s)"
        )

    def _redraw(self) -> None:
        try:
            frame = self.query_one("#frame", Static)
            status = self.query_one("#status-line", Static)
        except NoMatches:
            return
        frame.update(render(self.state, self.render_theme, self.keys))
        status.update(self._status_text())


def cmd_dashboard(args: argparse.Namespace | None = None) -> None:
    try:
        api_key = get_api_key(getattr(args, "api_key", None))
    except ConfigError as e:
        print(f"✗ {e}")
        sys.exit(1)
    client = AgentClient(api_key)
    app = AgentwatchApp(
        CommandDispatcher(client),
        api_key_label=mask_api_key(api_key),
    )
    app.run()
