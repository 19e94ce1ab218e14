from .config import ensure_default_config_file, get_config_path, load_config
from .paths import (
    default_stats_path,
    default_transition_log_path,
    get_config_dir,
    get_data_dir,
)
from .stats import StatsStore
from .transition_log import TransitionLogReader, TransitionLogWriter, parse_events

__all__ = [
    "ensure_default_config_file",
    "get_config_path",
    "load_config",
    "default_stats_path",
    "default_transition_log_path",
    "get_config_dir",
    "get_data_dir",
    "StatsStore",
    "TransitionLogReader",
    "TransitionLogWriter",
    "parse_events",
]
