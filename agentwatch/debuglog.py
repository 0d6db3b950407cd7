"""Append-only debug log under AGENTWATCH_HOME."""

from __future__ import annotations

import time

from .config import LOG_FILE


def debug_log(msg: str) -> None:
    try:
        ts: str = time.strftime("%Y-%m-%d %H:%M:%S")
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(f"[{ts}] {msg}\n")
    except OSError:
        pass
