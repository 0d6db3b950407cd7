"""CLI entry point: argument parsing and dispatch."""

import argparse

from .commands import (
    cmd_conversation,
    cmd_followup,
    cmd_init,
    cmd_keyinfo,
    cmd_list,
    cmd_status,
)
from .dashboard.app import cmd_dashboard


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentwatch",
        description="Monitor and steer remote background coding agents",
    )
    parser.add_argument(
        "--api-key", dest="api_key", default=None,
        help="API key (overrides CURSOR_API_KEY and the config file)",
    )
    sub = parser.add_subparsers(dest="cmd")

    p_dash = sub.add_parser("dashboard", aliases=["d"], help="Live dashboard")
    p_dash.set_defaults(func=cmd_dashboard)

    p_list = sub.add_parser("list", aliases=["ls"], help="List background agents")
    p_list.add_argument("-l", "--limit", type=int, default=20,
                        help="Number of agents to return (1-100)")
    p_list.add_argument("-c", "--cursor", default="",
                        help="Pagination cursor from a previous page")
    p_list.add_argument("-a", "--all", action="store_true",
                        help="Include expired agents")
    p_list.set_defaults(func=cmd_list)

    p_status = sub.add_parser("status", help="Show one agent's details")
    p_status.add_argument("id", help="Agent ID")
    p_status.set_defaults(func=cmd_status)

    p_conv = sub.add_parser("conversation", help="Show an agent's conversation")
    p_conv.add_argument("id", help="Agent ID")
    p_conv.set_defaults(func=cmd_conversation)

    p_follow = sub.add_parser("followup", help="Send a follow-up to a running agent")
    p_follow.add_argument("id", help="Agent ID")
    p_follow.add_argument("text", help="Instruction text")
    p_follow.set_defaults(func=cmd_followup)

    p_key = sub.add_parser("keyinfo", help="Show API key information")
    p_key.set_defaults(func=cmd_keyinfo)

    p_init = sub.add_parser("init", help="Validate and store an API key")
    p_init.set_defaults(func=cmd_init)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    if hasattr(args, "func"):
        args.func(args)
    else:
        cmd_dashboard(args)


if __name__ == "__main__":
    main()
