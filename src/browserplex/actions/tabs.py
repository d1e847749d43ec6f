"""Tabs (pages) within a session's browsing context."""

from typing import List, Optional

from ..browser.registry import Session
from ..errors import InvalidArgument
from .elements import interaction_errors


TAB_ACTIONS = ("list", "new", "switch", "close")


def _check_index(index: Optional[int], count: int) -> int:
    if index is None or index < 0 or index >= count:
        raise InvalidArgument(f"Invalid tab index. Valid range: 0-{count - 1}")
    return index


def list_tabs(session: Session) -> List[str]:
    """'<index>: <url>' per page, the active one marked with '*'."""
    return [
        f"{i}: {p.url}{' *' if p is session.page else ''}"
        for i, p in enumerate(session.pages())
    ]


async def new_tab(session: Session, url: Optional[str] = None) -> None:
    """Open a page, optionally load `url`, and make it active."""
    page = await session.engine.new_page(session.context)
    session.page = page
    if url:
        with interaction_errors(url):
            await page.goto(url)


def switch_tab(session: Session, index: Optional[int]) -> str:
    pages = session.pages()
    session.page = pages[_check_index(index, len(pages))]
    return session.page.url


async def close_tab(session: Session, index: Optional[int] = None) -> int:
    """
    Close a tab (the active one by default). The last tab cannot be closed.

    Returns:
        Index of the closed tab
    """
    pages = session.pages()
    if len(pages) == 1:
        raise InvalidArgument("Cannot close the last tab")
    if index is None:
        index = pages.index(session.page)
    target = pages[_check_index(index, len(pages))]
    await target.close()
    if session.page is target:
        session.page = session.pages()[0]
    return index


__all__ = [
    "TAB_ACTIONS",
    "list_tabs",
    "new_tab",
    "switch_tab",
    "close_tab",
]
