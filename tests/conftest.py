"""Pytest global setup for isolated agentwatch state.

This prevents tests from reading or writing the real ~/.agentwatch and from
picking up an API key or overrides from the developer's environment.
"""

from __future__ import annotations

import atexit
import os
from pathlib import Path
import shutil
import tempfile


_TEST_ROOT = Path(tempfile.mkdtemp(prefix="agentwatch-pytest-"))
_TEST_HOME = _TEST_ROOT / "home"
_TEST_HOME.mkdir(parents=True, exist_ok=True)

# Force test process (and imported agentwatch modules) to use isolated paths.
os.environ["AGENTWATCH_HOME"] = str(_TEST_HOME)
for _var in (
    "CURSOR_API_KEY",
    "AGENTWATCH_BASE_URL",
    "AGENTWATCH_TIMEOUT",
    "AGENTWATCH_REFRESH_INTERVAL",
    "AGENTWATCH_AUTO_REFRESH",
):
    os.environ.pop(_var, None)


@atexit.register
def _cleanup_test_state() -> None:
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)
