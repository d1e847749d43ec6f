"""Session lifecycle tool implementations."""

from typing import Optional

from ..constants import BROWSER_TYPES
from ..context import AppContext
from ..errors import InvalidArgument


async def session_create(
    app: AppContext,
    name: str,
    browser_type: Optional[str] = None,
    headless: Optional[bool] = None,
    domain: Optional[str] = None,
    stored_name: Optional[str] = None,
) -> str:
    """
    Create a named browser session, optionally seeded with a stored storage state.

    Returns:
        Confirmation text
    """
    browser_type = browser_type or app.default_browser
    if browser_type not in BROWSER_TYPES:
        raise InvalidArgument(
            f"Unknown browser type '{browser_type}'. Use one of: {', '.join(BROWSER_TYPES)}"
        )
    if (domain is None) != (stored_name is None):
        raise InvalidArgument("domain and stored_name must be given together")

    storage_state = None
    if domain is not None:
        storage_state = await app.storage.load(domain, stored_name)

    session = await app.registry.create(
        name, browser_type=browser_type, headless=headless, storage_state=storage_state
    )
    msg = f"Created {browser_type} session '{name}'"
    if not session.headless:
        msg += " (headed)"
    if storage_state is not None:
        msg += f" with stored session '{stored_name}' for '{domain}'"
    return msg


async def session_list(app: AppContext) -> str:
    sessions = app.registry.list()
    if not sessions:
        return "No active sessions"
    lines = [f"- {s.name} ({s.type}): {s.url}" for s in sessions]
    return "Active sessions:\n" + "\n".join(lines)


async def session_destroy(app: AppContext, name: str) -> str:
    await app.registry.destroy(name)
    return f"Destroyed session '{name}'"


__all__ = [
    "session_create",
    "session_list",
    "session_destroy",
]
