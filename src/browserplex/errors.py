"""
Error taxonomy shared by the registry, the snapshot engine and the storage layer.

Every failure a tool can report is a subclass of BrowserplexError. The tool
envelope converts them into ``ok: false`` payloads; anything else is treated
as a programming error and allowed to propagate.
"""

import re
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class BrowserplexError(Exception):
    """Base class for failures reported back to the caller."""

    category = "error"


class DuplicateSession(BrowserplexError):
    category = "duplicate_session"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Session '{name}' already exists")


class SessionNotFound(BrowserplexError):
    category = "session_not_found"

    def __init__(self, name: str, hint: bool = True):
        self.name = name
        msg = f"Session '{name}' not found"
        if hint:
            msg += ". Create it first with session_create."
        super().__init__(msg)


class RefNotFound(BrowserplexError):
    category = "ref_not_found"

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(
            f"Ref '{ref}' not found in the current snapshot. "
            "Refs expire on every new snapshot; call browser_snapshot again to get fresh refs."
        )


class StoredSessionNotFound(BrowserplexError):
    category = "stored_session_not_found"

    def __init__(self, domain: str, name: str):
        self.domain = domain
        self.name = name
        super().__init__(f"Session '{name}' not found for domain '{domain}'")


class LockConflict(BrowserplexError):
    category = "lock_conflict"

    def __init__(self, domain: str, owner_pid: Optional[int] = None):
        self.domain = domain
        self.owner_pid = owner_pid
        owner = f" by process {owner_pid}" if owner_pid is not None else ""
        super().__init__(f"Domain '{domain}' is locked{owner}. Retry after it is released.")


class InvalidArgument(BrowserplexError):
    category = "invalid_argument"


class FilesystemFailure(BrowserplexError):
    category = "filesystem_failure"


class ElementInteractionFailure(BrowserplexError):
    category = "interaction_failed"


class AmbiguousMatch(ElementInteractionFailure):
    category = "ambiguous_match"


class ObscuredByOverlay(ElementInteractionFailure):
    category = "obscured_by_overlay"


class ElementNotVisible(ElementInteractionFailure):
    category = "not_visible"


class InteractionTimeout(ElementInteractionFailure):
    category = "timed_out"


_MULTIPLE_PAT = re.compile(r"strict mode violation|resolved to \d+ elements", re.I)
_OVERLAY_PAT = re.compile(r"intercepts pointer events", re.I)
_NOT_VISIBLE_PAT = re.compile(r"not visible|outside of the viewport", re.I)
_TIMEOUT_PAT = re.compile(r"timeout \d+\s*ms exceeded", re.I)


def _first_line(text: str) -> str:
    return (text or "").strip().splitlines()[0] if (text or "").strip() else ""


def translate_engine_error(exc: BaseException, target: Optional[str] = None) -> ElementInteractionFailure:
    """
    Rewrite a raw engine error into an actionable interaction failure.

    Args:
        exc: The exception raised by the automation engine
        target: Selector or ref the action was aimed at, used in the message

    Returns:
        An ElementInteractionFailure subclass instance (not raised)
    """
    raw = str(exc)
    where = f" '{target}'" if target else ""

    if _MULTIPLE_PAT.search(raw):
        return AmbiguousMatch(
            f"Selector{where} matched multiple elements. "
            "Use a snapshot ref (@eN) or a more specific selector."
        )
    if _OVERLAY_PAT.search(raw):
        return ObscuredByOverlay(
            f"Element{where} is covered by another element (overlay, modal or cookie banner). "
            "Close or dismiss the overlay first, then retry."
        )
    if _NOT_VISIBLE_PAT.search(raw):
        return ElementNotVisible(
            f"Element{where} is not visible. Scroll it into view or wait for it to appear."
        )
    if isinstance(exc, PlaywrightTimeoutError) or _TIMEOUT_PAT.search(raw):
        return InteractionTimeout(
            f"Timed out waiting for{where or ' the element'}. "
            "Check the selector with browser_snapshot or increase the timeout."
        )
    return ElementInteractionFailure(_first_line(raw) or exc.__class__.__name__)


__all__ = [
    "BrowserplexError",
    "DuplicateSession",
    "SessionNotFound",
    "RefNotFound",
    "StoredSessionNotFound",
    "LockConflict",
    "InvalidArgument",
    "FilesystemFailure",
    "ElementInteractionFailure",
    "AmbiguousMatch",
    "ObscuredByOverlay",
    "ElementNotVisible",
    "InteractionTimeout",
    "translate_engine_error",
]
