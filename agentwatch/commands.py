"""CLI subcommands: list, status, conversation, followup, keyinfo, init."""

from __future__ import annotations

import argparse
import getpass
import sys
from datetime import datetime
from typing import NoReturn

from .client import AgentClient
from .config import get_api_key, mask_api_key, save_api_key
from .dashboard.state import filter_agents
from .dashboard.theme import message_icon, status_icon
from .errors import AgentwatchError, ConfigError
from .models import Agent


def _fail(message: str) -> NoReturn:
    print(f"✗ {message}")
    sys.exit(1)


def _client(args: argparse.Namespace) -> AgentClient:
    try:
        return AgentClient(get_api_key(getattr(args, "api_key", None)))
    except ConfigError as e:
        _fail(str(e))


def _fmt_time(value: datetime | None, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    return value.strftime(fmt) if value is not None else "—"


def _print_table(rows: list[tuple[str, ...]]) -> None:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        print("  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())


def cmd_list(args: argparse.Namespace) -> None:
    client = _client(args)
    try:
        page = client.list_agents(args.limit, args.cursor or "")
    except AgentwatchError as e:
        _fail(f"Error listing agents: {e}")

    agents: list[Agent] = filter_agents(list(page.agents), args.all)
    if not agents:
        if args.all:
            print("No background agents found.")
        else:
            print("No active background agents found.")
            print("Use --all to include expired agents.")
        return

    print(f"Found {len(agents)} {'' if args.all else 'active '}background agents:\n")
    rows: list[tuple[str, ...]] = [
        ("ID", "NAME", "STATUS", "REPOSITORY", "CREATED"),
        ("──", "────", "──────", "──────────", "───────"),
    ]
    for a in agents:
        rows.append((
            a.id,
            a.name,
            a.status.value,
            a.source.repository,
            _fmt_time(a.created_at, "%Y-%m-%d %H:%M"),
        ))
    _print_table(rows)

    if page.next_cursor:
        print(f"\nMore results available. Use --cursor={page.next_cursor} for the next page.")


def cmd_status(args: argparse.Namespace) -> None:
    client = _client(args)
    try:
        agent = client.get_agent(args.id)
    except AgentwatchError as e:
        _fail(f"Error getting agent status: {e}")

    print("🤖 Agent Details")
    print("═══════════════\n")
    print(f"ID:       {agent.id}")
    print(f"Name:     {agent.name}")
    print(f"Status:   {status_icon(agent.status)} {agent.status.value}")
    print(f"Created:  {_fmt_time(agent.created_at)}")

    print("\n📂 Source")
    print(f"Repository: {agent.source.repository}")
    print(f"Reference:  {agent.source.ref}")

    print("\n🎯 Target")
    print(f"Branch:         {agent.target.branch_name}")
    print(f"Agent URL:      {agent.target.url}")
    if agent.target.pr_url:
        print(f"Pull Request:   {agent.target.pr_url}")
    print(f"Auto Create PR: {'yes' if agent.target.auto_create_pr else 'no'}")

    if agent.summary:
        print("\n📄 Summary")
        print(agent.summary)


def cmd_conversation(args: argparse.Namespace) -> None:
    client = _client(args)
    try:
        conversation = client.get_conversation(args.id)
    except AgentwatchError as e:
        _fail(f"Error getting agent conversation: {e}")

    print(f"💬 Conversation for agent {conversation.id or args.id}\n")
    if not conversation.messages:
        print("No messages in this conversation.")
        return

    last = len(conversation.messages) - 1
    for i, message in enumerate(conversation.messages):
        print(f"{message_icon(message.type)} Message {i + 1} (ID: {message.id})")
        print("─" * 33)
        print(message.text)
        if i < last:
            print()


def cmd_followup(args: argparse.Namespace) -> None:
    client = _client(args)
    print(f"Sending follow-up to agent {args.id}...")
    try:
        ack = client.send_followup(args.id, args.text)
    except AgentwatchError as e:
        _fail(f"Error sending follow-up: {e}")

    print(f"✓ Follow-up sent (ack {ack or '—'})")
    print(f"Check progress with: agentwatch status {args.id}")


def cmd_keyinfo(args: argparse.Namespace) -> None:
    client = _client(args)
    try:
        info = client.get_key_info()
    except AgentwatchError as e:
        _fail(f"Error getting API key info: {e}")

    print("🔑 API Key Information\n")
    print(f"ID:         {info.id}")
    print(f"Name:       {info.name}")
    print(f"User Email: {info.user_email}")
    print(f"Created:    {_fmt_time(info.created_at)}")
    print("\n✓ API key is valid and active")


def cmd_init(args: argparse.Namespace) -> None:
    api_key: str = (getattr(args, "api_key", None) or "").strip()
    if not api_key:
        print("Create an API key in your dashboard under Integrations.")
        api_key = getpass.getpass("API key: ").strip()
    if not api_key:
        _fail("API key cannot be empty")

    print("Validating API key...")
    try:
        info = AgentClient(api_key).get_key_info()
    except AgentwatchError as e:
        _fail(f"Invalid API key or network error: {e}")

    try:
        path = save_api_key(api_key)
    except OSError as e:
        _fail(f"Error saving API key: {e}")

    print(f"✓ Saved {mask_api_key(api_key)} to {path}")
    print(f"Authenticated as: {info.user_email}")
    print("Try running: agentwatch list")
