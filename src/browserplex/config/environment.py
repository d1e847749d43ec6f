"""Environment configuration and validation."""

import os
from pathlib import Path
from typing import Optional

import logging
logger = logging.getLogger(__name__)

from ..constants import BROWSER_TYPES, DEFAULT_TIMEOUT_MS, LOCK_TIMEOUT_SECS


_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _parse_bool(var: str) -> Optional[bool]:
    raw = (os.getenv(var) or "").strip().lower()
    if not raw:
        return None
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise EnvironmentError(f"{var} must be a boolean (got {raw!r}).")


def _parse_int(var: str, default: int) -> int:
    raw = (os.getenv(var) or "").strip()
    if not raw:
        return default
    if not raw.isdigit():
        raise EnvironmentError(f"{var} must be a non-negative integer (got {raw!r}).")
    return int(raw)


def get_env_config() -> dict:
    """
    Read environment variables and validate them.

    Optional:   BROWSERPLEX_STATE_DIR (default ~/.browserplex)
                BROWSERPLEX_DEFAULT_BROWSER (default 'chromium')
                BROWSERPLEX_HEADLESS (unset: headless for everything except camoufox)
                BROWSERPLEX_LOCK_TIMEOUT_SECS (default 300)
                BROWSERPLEX_DEFAULT_TIMEOUT_MS (default 5000)
    """
    state_dir = (os.getenv("BROWSERPLEX_STATE_DIR") or "").strip()
    if state_dir:
        state_dir = str(Path(state_dir).expanduser())
    else:
        state_dir = str(Path.home() / ".browserplex")

    default_browser = (os.getenv("BROWSERPLEX_DEFAULT_BROWSER") or "chromium").strip().lower()
    if default_browser not in BROWSER_TYPES:
        raise EnvironmentError(
            f"BROWSERPLEX_DEFAULT_BROWSER must be one of {', '.join(BROWSER_TYPES)} (got {default_browser!r})."
        )

    return {
        "state_dir": state_dir,
        "default_browser": default_browser,
        "headless": _parse_bool("BROWSERPLEX_HEADLESS"),
        "lock_timeout_secs": _parse_int("BROWSERPLEX_LOCK_TIMEOUT_SECS", LOCK_TIMEOUT_SECS),
        "default_timeout_ms": _parse_int("BROWSERPLEX_DEFAULT_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
    }
