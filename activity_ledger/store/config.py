from __future__ import annotations

import tomllib
from pathlib import Path

from activity_ledger.engine.types import Config
from activity_ledger.store.paths import get_config_dir


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def default_config_toml(config: Config | None = None) -> str:
    cfg = config or Config()
    # Keep it minimal and editable.
    return (
        "# activity-ledger configuration\n"
        "\n"
        f"poll_seconds = {cfg.poll_seconds}\n"
        "# Trailing days re-checked on each tick\n"
        f"history_days = {cfg.history_days}\n"
        "# Display cache lifetime; must stay below poll_seconds\n"
        f"cache_ttl_seconds = {cfg.cache_ttl_seconds}\n"
        "# Show a boot-time estimate before any transition log exists\n"
        f"uptime_fallback = {str(cfg.uptime_fallback).lower()}\n"
        "\n"
        "[paths]\n"
        '# transition_log = "/path/to/transitions.json"\n'
        '# stats_file = "/path/to/stats.json"\n'
    )


def ensure_default_config_file(path: Path | None = None) -> Path:
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    if not config_path.exists():
        config_path.write_text(default_config_toml(), encoding="utf-8")
    return config_path


def load_config(path: Path | None = None, *, create_if_missing: bool = True) -> tuple[Config, dict]:
    """Load config.toml, returning (Config, meta).

    Meta contains useful diagnostics for the CLI.
    """

    config_path = path or get_config_path()
    meta: dict = {"path": str(config_path), "loaded": False, "created": False}

    if create_if_missing:
        before = config_path.exists()
        ensure_default_config_file(config_path)
        meta["created"] = not before

    if not config_path.exists():
        return Config(), meta

    try:
        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        meta["error"] = f"config_read_error: {e}"
        return Config(), meta

    cfg = Config()

    poll = raw.get("poll_seconds")
    if isinstance(poll, int | float) and not isinstance(poll, bool):
        # Guardrail: sub-second polling only burns CPU on log re-reads.
        cfg.poll_seconds = max(float(poll), 1.0)

    history = raw.get("history_days")
    if isinstance(history, int) and not isinstance(history, bool) and history >= 1:
        cfg.history_days = history

    ttl = raw.get("cache_ttl_seconds")
    if isinstance(ttl, int | float) and not isinstance(ttl, bool) and ttl >= 0:
        cfg.cache_ttl_seconds = float(ttl)

    # The cache must expire before the next tick fires.
    if cfg.cache_ttl_seconds >= cfg.poll_seconds:
        cfg.cache_ttl_seconds = cfg.poll_seconds / 2

    if isinstance(raw.get("uptime_fallback"), bool):
        cfg.uptime_fallback = bool(raw["uptime_fallback"])

    paths = raw.get("paths")
    if isinstance(paths, dict):
        log_path = paths.get("transition_log")
        if isinstance(log_path, str) and log_path.strip():
            cfg.transition_log = Path(log_path).expanduser()

        stats_path = paths.get("stats_file")
        if isinstance(stats_path, str) and stats_path.strip():
            cfg.stats_file = Path(stats_path).expanduser()

    meta["loaded"] = True
    return cfg, meta
