#region Overview
"""
## Sessions

Every browser tool takes a `session` name. Create sessions with
`session_create` and address them by name in later calls; several sessions
(different browsers, different logins) can be open at once and never share
cookies or pages.

## Refs

`browser_snapshot` returns the page's accessibility tree with `[ref=eN]`
markers. Any `selector` argument accepts those refs (`e3`, `@e3`, `ref=e3`)
as well as Playwright selectors. Each snapshot replaces the previous refs of
that session; after navigating, take a new snapshot.

## Stored sessions and domain locks

`session_save` writes a session's cookies and local storage to
`<state dir>/sessions/<domain>/<name>.json`; `session_create(domain=...,
stored_name=...)` starts a new session from it. While logging in, hold the
domain lock (`domain_lock_acquire` / `domain_lock_release`) so that other
processes do not overwrite the stored state halfway through. Locks expire
after BROWSERPLEX_LOCK_TIMEOUT_SECS.
"""
#endregion

#region Imports
import os
import sys
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import Context, FastMCP
#endregion

#region Import from your package
from browserplex.context import AppContext, build_app_context
from browserplex.decorators import tool_envelope
from browserplex.tools import sessions, persistence, navigation, interaction, snapshots, debugging
#endregion

#region Logger
logger = logging.getLogger(__name__)
#endregion


#region Lifespan
@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Build the shared registry and storage; close every session on shutdown."""
    app = build_app_context()
    logger.info(f"browserplex state dir: {app.config['state_dir']}")
    try:
        yield app
    finally:
        logger.info(f"Shutting down, closing {len(app.registry)} session(s)")
        await app.registry.destroy_all()


def _app(ctx: Context) -> AppContext:
    return ctx.request_context.lifespan_context
#endregion

#region FastMCP Initialization
mcp = FastMCP("browserplex", lifespan=app_lifespan)
#endregion


#region Tools -- Session management
@mcp.tool()
@tool_envelope
async def session_create(
    ctx: Context,
    name: str,
    type: Optional[str] = None,
    headless: Optional[bool] = None,
    domain: Optional[str] = None,
    stored_name: Optional[str] = None,
) -> str:
    """
    Create a named browser session.

    Args:
        name: Unique name used to address the session in other tools
        type: 'chromium', 'firefox', 'webkit' or 'camoufox' (default from BROWSERPLEX_DEFAULT_BROWSER)
        headless: Run without a visible window (default: headless, camoufox headed)
        domain: Domain of a stored session to start from (requires stored_name)
        stored_name: Name of the stored session saved with session_save
    """
    return await sessions.session_create(_app(ctx), name, type, headless, domain, stored_name)


@mcp.tool()
@tool_envelope
async def session_list(ctx: Context) -> str:
    """List live sessions with their type and current URL."""
    return await sessions.session_list(_app(ctx))


@mcp.tool()
@tool_envelope
async def session_destroy(ctx: Context, name: str) -> str:
    """Close a session and its browser."""
    return await sessions.session_destroy(_app(ctx), name)
#endregion


#region Tools -- Stored sessions and domain locks
@mcp.tool()
@tool_envelope
async def session_save(ctx: Context, session: str, domain: str, name: str) -> str:
    """
    Save cookies and local storage of a live session for later reuse.

    Args:
        session: Live session to save
        domain: Domain the storage state belongs to (e.g. 'github.com')
        name: Name for the stored record (e.g. an account name)
    """
    return await persistence.session_save(_app(ctx), session, domain, name)


@mcp.tool()
@tool_envelope
async def stored_sessions_list(ctx: Context, domain: Optional[str] = None) -> str:
    """List stored sessions, optionally for one domain only."""
    return await persistence.stored_sessions_list(_app(ctx), domain)


@mcp.tool()
@tool_envelope
async def stored_session_delete(ctx: Context, domain: str, name: str) -> str:
    """Delete a stored session record."""
    return await persistence.stored_session_delete(_app(ctx), domain, name)


@mcp.tool()
@tool_envelope
async def domain_lock_acquire(ctx: Context, domain: str) -> str:
    """Acquire the advisory lock for a domain (e.g. while logging in). Fails if another process holds it."""
    return await persistence.domain_lock_acquire(_app(ctx), domain)


@mcp.tool()
@tool_envelope
async def domain_lock_release(ctx: Context, domain: str) -> str:
    """Release the domain lock held by this process."""
    return await persistence.domain_lock_release(_app(ctx), domain)


@mcp.tool()
@tool_envelope
async def domain_lock_status(ctx: Context, domain: str) -> str:
    """Report whether a domain is locked, by which process and for how long."""
    return await persistence.domain_lock_status(_app(ctx), domain)
#endregion


#region Tools -- Navigation
@mcp.tool()
@tool_envelope
async def browser_navigate(ctx: Context, session: str, url: str) -> str:
    """Navigate the session's active tab to a URL."""
    return await navigation.browser_navigate(_app(ctx), session, url)


@mcp.tool()
@tool_envelope
async def browser_navigate_back(ctx: Context, session: str) -> str:
    """Go back to the previous page."""
    return await navigation.browser_navigate_back(_app(ctx), session)


@mcp.tool()
@tool_envelope
async def browser_wait_for(
    ctx: Context,
    session: str,
    selector: Optional[str] = None,
    state: str = "visible",
    timeout: int = 30000,
) -> str:
    """
    Wait for an element to reach a state, or for the network to go idle.

    Args:
        selector: Ref or selector; omit to wait for network idle
        state: 'attached', 'detached', 'visible' or 'hidden'
        timeout: Milliseconds
    """
    return await navigation.browser_wait_for(_app(ctx), session, selector, state, timeout)


@mcp.tool()
@tool_envelope
async def browser_tabs(
    ctx: Context,
    session: str,
    action: str = "list",
    index: Optional[int] = None,
    url: Optional[str] = None,
) -> str:
    """
    Manage tabs of a session.

    Args:
        action: 'list', 'new', 'switch' or 'close'
        index: Tab index for switch/close (close defaults to the active tab)
        url: URL to open for 'new'
    """
    return await navigation.browser_tabs(_app(ctx), session, action, index, url)
#endregion


#region Tools -- Observation
@mcp.tool()
@tool_envelope
async def browser_snapshot(
    ctx: Context,
    session: str,
    interactive: bool = False,
    compact: bool = False,
    max_depth: Optional[int] = None,
    selector: Optional[str] = None,
) -> str:
    """
    Accessibility snapshot of the page with refs ([ref=eN]) usable as selectors.

    Args:
        interactive: Only list interactive elements (buttons, links, inputs, ...)
        compact: Drop structural containers that hold nothing addressable
        max_depth: Maximum nesting depth (0 = top level only)
        selector: CSS selector to scope the snapshot
    """
    return await snapshots.browser_snapshot(_app(ctx), session, interactive, compact, max_depth, selector)


@mcp.tool()
@tool_envelope
async def browser_page_text(ctx: Context, session: str, max_chars: int = 0) -> str:
    """Title, URL and a cleaned text outline of the page (0 = no truncation)."""
    return await snapshots.browser_page_text(_app(ctx), session, max_chars)


@mcp.tool()
@tool_envelope
async def browser_take_screenshot(
    ctx: Context,
    session: str,
    full_page: bool = False,
    max_dimension: int = 1280,
):
    """PNG screenshot of the page, scaled down so its longest side fits max_dimension."""
    return await snapshots.browser_take_screenshot(_app(ctx), session, full_page, max_dimension)
#endregion


#region Tools -- Interaction
@mcp.tool()
@tool_envelope
async def browser_click(ctx: Context, session: str, selector: str, timeout: Optional[int] = None) -> str:
    """Click an element by ref or selector."""
    return await interaction.browser_click(_app(ctx), session, selector, timeout)


@mcp.tool()
@tool_envelope
async def browser_hover(ctx: Context, session: str, selector: str, timeout: Optional[int] = None) -> str:
    """Hover over an element by ref or selector."""
    return await interaction.browser_hover(_app(ctx), session, selector, timeout)


@mcp.tool()
@tool_envelope
async def browser_type(
    ctx: Context,
    session: str,
    selector: str,
    text: str,
    submit: bool = False,
    timeout: Optional[int] = None,
) -> str:
    """Fill an input with text; press Enter afterwards when submit is true."""
    return await interaction.browser_type(_app(ctx), session, selector, text, submit, timeout)


@mcp.tool()
@tool_envelope
async def browser_press_key(ctx: Context, session: str, key: str) -> str:
    """Press a key on the page (e.g. 'Enter', 'ArrowDown', 'Control+A')."""
    return await interaction.browser_press_key(_app(ctx), session, key)


@mcp.tool()
@tool_envelope
async def browser_drag(ctx: Context, session: str, source: str, target: str) -> str:
    """Drag one element onto another."""
    return await interaction.browser_drag(_app(ctx), session, source, target)


@mcp.tool()
@tool_envelope
async def browser_select_option(
    ctx: Context,
    session: str,
    selector: str,
    value: Optional[str] = None,
    label: Optional[str] = None,
    index: Optional[int] = None,
) -> str:
    """Select an option of a <select> by value, label or index."""
    return await interaction.browser_select_option(_app(ctx), session, selector, value, label, index)


@mcp.tool()
@tool_envelope
async def browser_file_upload(ctx: Context, session: str, selector: str, files: List[str]) -> str:
    """Set the files of a file input (absolute paths)."""
    return await interaction.browser_file_upload(_app(ctx), session, selector, files)


@mcp.tool()
@tool_envelope
async def browser_fill_form(ctx: Context, session: str, fields: List[Dict[str, str]]) -> str:
    """Fill several fields; each entry is {"selector": ..., "value": ...}."""
    return await interaction.browser_fill_form(_app(ctx), session, fields)


@mcp.tool()
@tool_envelope
async def browser_handle_dialog(
    ctx: Context,
    session: str,
    action: str = "accept",
    prompt_text: Optional[str] = None,
) -> str:
    """Accept or dismiss the next JavaScript dialog (alert, confirm, prompt)."""
    return await interaction.browser_handle_dialog(_app(ctx), session, action, prompt_text)
#endregion


#region Tools -- Debugging
@mcp.tool()
@tool_envelope
async def browser_evaluate(ctx: Context, session: str, script: str) -> str:
    """Evaluate JavaScript in the page and return the JSON-formatted result."""
    return await debugging.browser_evaluate(_app(ctx), session, script)


@mcp.tool()
@tool_envelope
async def browser_resize(ctx: Context, session: str, width: int, height: int) -> str:
    """Resize the viewport."""
    return await debugging.browser_resize(_app(ctx), session, width, height)


@mcp.tool()
@tool_envelope
async def browser_console_messages(ctx: Context, session: str, clear: bool = False) -> str:
    """Console messages collected since the session started (or the last clear)."""
    return await debugging.browser_console_messages(_app(ctx), session, clear)


@mcp.tool()
@tool_envelope
async def browser_network_requests(ctx: Context, session: str, clear: bool = False) -> str:
    """Network requests collected since the session started (or the last clear)."""
    return await debugging.browser_network_requests(_app(ctx), session, clear)


@mcp.tool()
@tool_envelope
async def get_debug_info(ctx: Context) -> str:
    """Environment, live sessions, stored sessions and lock owners."""
    return await debugging.get_debug_info(_app(ctx))
#endregion


def main():
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("BROWSERPLEX_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    mcp.run()


if __name__ == "__main__":
    main()
