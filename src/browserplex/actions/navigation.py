"""Navigation and waiting."""

from typing import Optional

from ..browser.registry import Session
from ..errors import InvalidArgument
from .elements import interaction_errors, locate


WAIT_STATES = ("attached", "detached", "visible", "hidden")


async def navigate(session: Session, url: str, timeout: Optional[float] = None) -> None:
    """Load `url` in the active page and wait for DOMContentLoaded."""
    with interaction_errors(url):
        if timeout is None:
            await session.page.goto(url, wait_until="domcontentloaded")
        else:
            await session.page.goto(url, wait_until="domcontentloaded", timeout=timeout)


async def go_back(session: Session) -> str:
    """Go back one history entry; returns the URL the page ends up on."""
    with interaction_errors():
        await session.page.go_back()
    return session.page.url


async def wait_for(session: Session, selector: Optional[str], state: str, timeout: float) -> None:
    """
    Wait for an element to reach `state`, or for the network to go idle when
    no selector is given.
    """
    if state not in WAIT_STATES:
        raise InvalidArgument(f"state must be one of {', '.join(WAIT_STATES)}")
    if selector:
        locator = locate(session, selector)
        with interaction_errors(selector):
            await locator.wait_for(state=state, timeout=timeout)
    else:
        with interaction_errors():
            await session.page.wait_for_load_state("networkidle", timeout=timeout)


__all__ = [
    "WAIT_STATES",
    "navigate",
    "go_back",
    "wait_for",
]
