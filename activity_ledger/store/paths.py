from __future__ import annotations

from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

APP_NAME = "activity-ledger"


def get_data_dir() -> Path:
    return Path(user_data_dir(APP_NAME))


def get_config_dir() -> Path:
    return Path(user_config_dir(APP_NAME))


def default_transition_log_path() -> Path:
    return get_data_dir() / "transitions.json"


def default_stats_path() -> Path:
    return get_data_dir() / "stats.json"
