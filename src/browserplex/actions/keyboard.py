"""Keyboard input."""

from ..browser.registry import Session
from .elements import interaction_errors


async def press_key(session: Session, key: str) -> None:
    """Press a key on the active page (e.g. Enter, Escape, ArrowDown, Control+A)."""
    with interaction_errors():
        await session.page.keyboard.press(key)


__all__ = [
    "press_key",
]
