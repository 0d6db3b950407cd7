"""Global configuration, paths, and API key resolution."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from .errors import ConfigError


AGENTWATCH_HOME = Path(
    os.environ.get("AGENTWATCH_HOME") or "~/.agentwatch"
).expanduser()

API_KEY_ENV = "CURSOR_API_KEY"


def _resolve_dir(raw: str) -> Path:
    return Path(os.path.expanduser(raw)).expanduser()


def _ensure_writable_dir(path: Path, fallback: Path) -> Path:
    """Ensure directory exists, falling back when creation is denied."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


AGENTWATCH_HOME = _ensure_writable_dir(
    AGENTWATCH_HOME, _resolve_dir("/tmp/agentwatch")
)

USER_CONFIG_PATH = AGENTWATCH_HOME / "config.toml"
LOG_FILE = AGENTWATCH_HOME / "agentwatch.log"


def load_user_config(path: Path | None = None) -> dict:
    """Load the user config TOML, or an empty dict when absent/unreadable."""
    config_path = path or USER_CONFIG_PATH
    if not config_path.is_file():
        return {}
    try:
        parsed = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _stored_api_key(path: Path | None = None) -> str:
    auth = load_user_config(path).get("auth")
    if not isinstance(auth, dict):
        return ""
    key = auth.get("api_key")
    if isinstance(key, str):
        return key.strip()
    return ""


def get_api_key(override: str | None = None, *, path: Path | None = None) -> str:
    """Resolve the API key: explicit override, then env var, then config file."""
    if override and override.strip():
        return override.strip()
    env_key = os.environ.get(API_KEY_ENV, "").strip()
    if env_key:
        return env_key
    stored = _stored_api_key(path)
    if stored:
        return stored
    raise ConfigError(
        "API key not set. Run 'agentwatch init' or set "
        f"{API_KEY_ENV} environment variable"
    )


def _toml_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def save_api_key(api_key: str, *, path: Path | None = None) -> Path:
    """Persist the API key under ``[auth]`` in the user config.

    Other top-level tables in an existing config are preserved line-for-line;
    only a previous ``[auth]`` table is replaced.
    """
    config_path = path or USER_CONFIG_PATH
    kept: list[str] = []
    if config_path.is_file():
        in_auth = False
        for line in config_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped.startswith("[") and stripped.endswith("]"):
                in_auth = stripped == "[auth]"
            if not in_auth:
                kept.append(line)

    while kept and not kept[-1].strip():
        kept.pop()
    if kept:
        kept.append("")
    kept.extend(["[auth]", f"api_key = {_toml_quote(api_key)}"])

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text("\n".join(kept) + "\n", encoding="utf-8")
    try:
        config_path.chmod(0o600)
    except OSError:
        pass
    return config_path


def mask_api_key(api_key: str) -> str:
    """Return a display-safe form of the key: first 4 and last 4 characters."""
    if not api_key:
        return "(not set)"
    if len(api_key) <= 8:
        return "•" * len(api_key)
    return f"{api_key[:4]}…{api_key[-4:]}"
