"""Navigation, waiting and tab tool implementations."""

from typing import Optional

from .. import actions
from ..actions.tabs import TAB_ACTIONS
from ..constants import DEFAULT_WAIT_TIMEOUT_MS
from ..context import AppContext
from ..errors import InvalidArgument


async def browser_navigate(app: AppContext, session: str, url: str) -> str:
    s = app.registry.get_or_raise(session)
    await actions.navigate(s, url)
    return f"Navigated to {url}"


async def browser_navigate_back(app: AppContext, session: str) -> str:
    s = app.registry.get_or_raise(session)
    url = await actions.go_back(s)
    return f"Navigated back to {url}"


async def browser_wait_for(
    app: AppContext,
    session: str,
    selector: Optional[str] = None,
    state: str = "visible",
    timeout: int = DEFAULT_WAIT_TIMEOUT_MS,
) -> str:
    s = app.registry.get_or_raise(session)
    await actions.wait_for(s, selector, state, timeout)
    if selector:
        return f"Element '{selector}' is {state}"
    return "Page load complete"


async def browser_tabs(
    app: AppContext,
    session: str,
    action: str = "list",
    index: Optional[int] = None,
    url: Optional[str] = None,
) -> str:
    s = app.registry.get_or_raise(session)

    if action == "list":
        tabs = actions.list_tabs(s)
        return f"Tabs ({len(tabs)}):\n" + "\n".join(tabs)
    if action == "new":
        await actions.new_tab(s, url)
        return "Created new tab" + (f" at {url}" if url else "")
    if action == "switch":
        current = actions.switch_tab(s, index)
        return f"Switched to tab {index}: {current}"
    if action == "close":
        closed = await actions.close_tab(s, index)
        return f"Closed tab {closed}"
    raise InvalidArgument(f"action must be one of {', '.join(TAB_ACTIONS)}")


__all__ = [
    "browser_navigate",
    "browser_navigate_back",
    "browser_wait_for",
    "browser_tabs",
]
