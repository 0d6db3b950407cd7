"""Typed settings loaded from TOML config with env-var overrides."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from importlib import resources

from .config import load_user_config


def _load_default_toml() -> dict:
    """Load the built-in default_config.toml shipped with the package."""
    ref = resources.files("agentwatch").joinpath("default_config.toml")
    return tomllib.loads(ref.read_text(encoding="utf-8"))


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (override wins)."""
    merged = dict(base)
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


# ── Dataclasses ──────────────────────────────────────────────────────


@dataclass
class ApiConfig:
    base_url: str
    timeout: float
    page_size: int


@dataclass
class DashboardConfig:
    tick_interval: float
    refresh_interval: float
    auto_refresh: bool


@dataclass
class KeyMap:
    quit: tuple[str, ...]
    help: tuple[str, ...]
    back: tuple[str, ...]
    refresh: tuple[str, ...]
    details: tuple[str, ...]
    conversation: tuple[str, ...]
    followup: tuple[str, ...]
    settings: tuple[str, ...]
    toggle: tuple[str, ...]
    up: tuple[str, ...]
    down: tuple[str, ...]
    select: tuple[str, ...]
    home: tuple[str, ...]
    end: tuple[str, ...]
    page_up: tuple[str, ...]
    page_down: tuple[str, ...]


@dataclass
class ThemeConfig:
    primary: str
    secondary: str
    success: str
    warning: str
    error: str
    muted: str
    text: str
    highlight: str


@dataclass
class Settings:
    api: ApiConfig
    dashboard: DashboardConfig
    keys: KeyMap
    theme: ThemeConfig

    # Raw merged config (defaults + user file)
    _raw: dict = field(default_factory=dict, repr=False)


def _key_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return ()


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_keymap(data: dict) -> KeyMap:
    return KeyMap(**{
        name: _key_tuple(data.get(name, ()))
        for name in KeyMap.__dataclass_fields__
    })


def _parse_theme(data: dict) -> ThemeConfig:
    return ThemeConfig(**{
        name: str(data.get(name, "#FFFFFF"))
        for name in ThemeConfig.__dataclass_fields__
    })


def load_settings(user: dict | None = None) -> Settings:
    """Load settings: defaults ← user TOML ← env vars."""
    defaults = _load_default_toml()
    if user is None:
        user = load_user_config()
    raw = _deep_merge(defaults, user)

    api = raw.get("api", {})
    dash = raw.get("dashboard", {})

    api_config = ApiConfig(
        base_url=os.environ.get(
            "AGENTWATCH_BASE_URL", api.get("base_url", "")
        ).rstrip("/"),
        timeout=float(os.environ.get("AGENTWATCH_TIMEOUT", api.get("timeout", 30.0))),
        page_size=int(api.get("page_size", 100)),
    )

    auto_env = os.environ.get("AGENTWATCH_AUTO_REFRESH")
    dashboard = DashboardConfig(
        tick_interval=float(dash.get("tick_interval", 1.0)),
        refresh_interval=float(os.environ.get(
            "AGENTWATCH_REFRESH_INTERVAL",
            dash.get("refresh_interval", 30.0),
        )),
        auto_refresh=(
            _parse_bool(auto_env)
            if auto_env is not None
            else bool(dash.get("auto_refresh", True))
        ),
    )

    return Settings(
        api=api_config,
        dashboard=dashboard,
        keys=_parse_keymap(raw.get("keys", {})),
        theme=_parse_theme(raw.get("theme", {})),
        _raw=raw,
    )


# Module-level singleton, loaded once on import.
SETTINGS = load_settings()
