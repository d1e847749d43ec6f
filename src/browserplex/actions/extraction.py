"""Text extraction from the active page."""

from ..browser.registry import Session
from ..cleaners import page_outline
from .elements import interaction_errors


async def page_text(session: Session, max_chars: int = 0) -> dict:
    """
    Title, URL and a cleaned text outline of the active page.

    Returns:
        {"title": str, "url": str, "text": str, "truncated": bool}
    """
    page = session.page
    with interaction_errors():
        title = await page.title()
        html = await page.content()
    text, truncated = page_outline(html, max_chars=max_chars)
    return {"title": title, "url": page.url, "text": text, "truncated": truncated}


__all__ = [
    "page_text",
]
