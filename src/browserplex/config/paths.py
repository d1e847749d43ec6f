"""Path utilities for persisted browser state."""

from pathlib import Path
from typing import Optional

from ..constants import LOCK_FILE_NAME


def sanitize_name(name: str) -> str:
    """
    Make a domain or session name safe to use as a single path segment.

    Path separators and parent-directory sequences are replaced with '_', so
    '../../etc' becomes '____etc' and can never leave the sessions root.
    """
    cleaned = str(name).replace("/", "_").replace("\\", "_").replace("..", "_")
    # "" and "." would resolve to the parent directory itself
    if cleaned in ("", "."):
        return "_"
    return cleaned


def get_state_dir(config: Optional[dict] = None) -> str:
    """Per-user state root; BROWSERPLEX_STATE_DIR overrides ~/.browserplex."""
    if config and config.get("state_dir"):
        return str(config["state_dir"])
    from .environment import get_env_config
    return get_env_config()["state_dir"]


def sessions_root(state_dir: str) -> Path:
    return Path(state_dir) / "sessions"


def session_file_path(root: Path, domain: str, name: str) -> Path:
    """<root>/<sanitized-domain>/<sanitized-name>.json"""
    return root / sanitize_name(domain) / f"{sanitize_name(name)}.json"


def lock_file_path(root: Path, domain: str) -> Path:
    """<root>/<sanitized-domain>/.lock"""
    return root / sanitize_name(domain) / LOCK_FILE_NAME
