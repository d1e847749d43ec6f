"""Page observation tool implementations: ref snapshots, text outline, screenshots."""

from typing import Optional

from mcp.server.fastmcp import Image

from .. import actions
from ..constants import MAX_SCREENSHOT_DIMENSION
from ..context import AppContext
from ..errors import InvalidArgument
from ..snapshot import SnapshotOptions, snapshot_stats, take_snapshot


async def browser_snapshot(
    app: AppContext,
    session: str,
    interactive: bool = False,
    compact: bool = False,
    max_depth: Optional[int] = None,
    selector: Optional[str] = None,
) -> str:
    """
    Accessibility snapshot of the active page with [ref=eN] markers.

    The ref map on the session is replaced wholesale; refs from earlier
    snapshots stop resolving.
    """
    if max_depth is not None and max_depth < 0:
        raise InvalidArgument("max_depth must be >= 0")
    s = app.registry.get_or_raise(session)
    options = SnapshotOptions(
        interactive=interactive, compact=compact, max_depth=max_depth, selector=selector
    )
    with actions.interaction_errors(selector):
        snap = await take_snapshot(s.page, options)
    s.refs = snap.refs

    stats = snapshot_stats(snap.tree, snap.refs)
    footer = (
        f"[{stats['refs']} refs, {stats['interactive']} interactive, "
        f"{stats['lines']} lines, ~{stats['tokens']} tokens]"
    )
    return f"{snap.tree}\n\n{footer}"


async def browser_page_text(app: AppContext, session: str, max_chars: int = 0) -> str:
    s = app.registry.get_or_raise(session)
    result = await actions.page_text(s, max_chars=max_chars)
    text = f"Title: {result['title']}\nURL: {result['url']}\n\n{result['text']}"
    if result["truncated"]:
        text += "\n\n[truncated]"
    return text


async def browser_take_screenshot(
    app: AppContext,
    session: str,
    full_page: bool = False,
    max_dimension: int = MAX_SCREENSHOT_DIMENSION,
):
    """
    Returns:
        [Image, str]: PNG image content plus a one-line size description
    """
    s = app.registry.get_or_raise(session)
    shot = await actions.take_screenshot(s, full_page=full_page, max_dimension=max_dimension)
    caption = f"Screenshot {shot.width}x{shot.height}"
    if shot.resized:
        caption += f" (resized from {shot.original_width}x{shot.original_height})"
    return [Image(data=shot.png, format="png"), caption]


__all__ = [
    "browser_snapshot",
    "browser_page_text",
    "browser_take_screenshot",
]
