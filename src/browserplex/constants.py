"""
Global constants and configuration defaults.
No dependencies - safe to import from anywhere.
"""

import os

# ============================================================================
# Browser Types
# ============================================================================

BROWSER_TYPES = ("chromium", "firefox", "webkit", "camoufox")
"""Closed set of engine variants a session can be created with."""

HEADED_BY_DEFAULT = frozenset({"camoufox"})
"""Engine variants that open a visible window unless told otherwise."""


# ============================================================================
# Lock Configuration
# ============================================================================

LOCK_TIMEOUT_SECS = int(os.getenv("BROWSERPLEX_LOCK_TIMEOUT_SECS", "300"))
"""A domain lock older than this is stale."""

LOCK_FILE_NAME = ".lock"


# ============================================================================
# Interaction Defaults
# ============================================================================

DEFAULT_TIMEOUT_MS = int(os.getenv("BROWSERPLEX_DEFAULT_TIMEOUT_MS", "5000"))
"""Timeout for element interactions."""

DEFAULT_WAIT_TIMEOUT_MS = 30_000
"""Timeout for browser_wait_for."""

MAX_SCREENSHOT_DIMENSION = 1280
"""Longest side of a returned screenshot, sized to fit LLM image limits."""


# ============================================================================
# Snapshot Sentinels
# ============================================================================

EMPTY_TREE = "(empty)"
NO_INTERACTIVE_ELEMENTS = "(no interactive elements)"


__all__ = [
    "BROWSER_TYPES",
    "HEADED_BY_DEFAULT",
    "LOCK_TIMEOUT_SECS",
    "LOCK_FILE_NAME",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_WAIT_TIMEOUT_MS",
    "MAX_SCREENSHOT_DIMENSION",
    "EMPTY_TREE",
    "NO_INTERACTIVE_ELEMENTS",
]
