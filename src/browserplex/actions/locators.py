"""Resolve refs from the last snapshot (or raw selectors) into live locators."""

import re
from typing import Dict, Optional

from ..errors import RefNotFound
from ..snapshot import RefEntry


_REF_PAT = re.compile(r"^(?:@|ref=)?(e\d+)$")


def parse_ref(arg: str) -> Optional[str]:
    """
    Extract a ref id from '@e1', 'ref=e1' or 'e1'.

    Returns:
        The bare ref ('e1'), or None if `arg` is a plain selector.
    """
    m = _REF_PAT.match((arg or "").strip())
    return m.group(1) if m else None


def is_ref(selector: str) -> bool:
    return parse_ref(selector) is not None


def locator_from_ref(page, entry: RefEntry):
    """Role-based locator for a ref entry, narrowed to its occurrence when duplicated."""
    if entry.name:
        locator = page.get_by_role(entry.role, name=entry.name, exact=True)
    else:
        locator = page.get_by_role(entry.role)
    if entry.nth is not None:
        locator = locator.nth(entry.nth)
    return locator


def resolve_locator(page, refs: Dict[str, RefEntry], selector: str):
    """
    Turn a tool's selector argument into a locator.

    Refs are looked up in the session's current ref map only; a ref that is
    not there raises RefNotFound and is never retried as a CSS selector.
    Anything that is not a ref token is used as a selector unchanged.
    """
    ref = parse_ref(selector)
    if ref is None:
        return page.locator(selector)
    entry = refs.get(ref)
    if entry is None:
        raise RefNotFound(ref)
    return locator_from_ref(page, entry)


__all__ = [
    "parse_ref",
    "is_ref",
    "locator_from_ref",
    "resolve_locator",
]
