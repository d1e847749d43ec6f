"""Configuration management for browser sessions and persisted state."""

from .environment import get_env_config

from .paths import (
    sanitize_name,
    get_state_dir,
    sessions_root,
    session_file_path,
    lock_file_path,
)

__all__ = [
    "get_env_config",
    "sanitize_name",
    "get_state_dir",
    "sessions_root",
    "session_file_path",
    "lock_file_path",
]
