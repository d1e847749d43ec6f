"""Element interaction tool implementations.

Selectors accept refs from the last browser_snapshot ('e3', '@e3', 'ref=e3')
or any Playwright selector.
"""

from typing import Dict, List, Optional

from .. import actions
from ..context import AppContext


async def browser_click(app: AppContext, session: str, selector: str, timeout: Optional[int] = None) -> str:
    s = app.registry.get_or_raise(session)
    await actions.click(s, selector, timeout or app.default_timeout_ms)
    return f"Clicked '{selector}'"


async def browser_hover(app: AppContext, session: str, selector: str, timeout: Optional[int] = None) -> str:
    s = app.registry.get_or_raise(session)
    await actions.hover(s, selector, timeout or app.default_timeout_ms)
    return f"Hovering over '{selector}'"


async def browser_type(
    app: AppContext,
    session: str,
    selector: str,
    text: str,
    submit: bool = False,
    timeout: Optional[int] = None,
) -> str:
    s = app.registry.get_or_raise(session)
    await actions.type_text(s, selector, text, submit, timeout or app.default_timeout_ms)
    return f"Typed into '{selector}'" + (" and submitted" if submit else "")


async def browser_press_key(app: AppContext, session: str, key: str) -> str:
    s = app.registry.get_or_raise(session)
    await actions.press_key(s, key)
    return f"Pressed '{key}'"


async def browser_drag(app: AppContext, session: str, source: str, target: str) -> str:
    s = app.registry.get_or_raise(session)
    await actions.drag(s, source, target, app.default_timeout_ms)
    return f"Dragged '{source}' to '{target}'"


async def browser_select_option(
    app: AppContext,
    session: str,
    selector: str,
    value: Optional[str] = None,
    label: Optional[str] = None,
    index: Optional[int] = None,
) -> str:
    s = app.registry.get_or_raise(session)
    selected = await actions.select_option(
        s, selector, value=value, label=label, index=index, timeout=app.default_timeout_ms
    )
    return "Selected option(s): " + ", ".join(selected)


async def browser_file_upload(app: AppContext, session: str, selector: str, files: List[str]) -> str:
    s = app.registry.get_or_raise(session)
    await actions.upload_files(s, selector, files, app.default_timeout_ms)
    return f"Uploaded {len(files)} file(s) to '{selector}'"


async def browser_fill_form(app: AppContext, session: str, fields: List[Dict[str, str]]) -> str:
    s = app.registry.get_or_raise(session)
    count = await actions.fill_form(s, fields, app.default_timeout_ms)
    return f"Filled {count} form field(s)"


async def browser_handle_dialog(
    app: AppContext,
    session: str,
    action: str = "accept",
    prompt_text: Optional[str] = None,
) -> str:
    s = app.registry.get_or_raise(session)
    actions.handle_next_dialog(s, action, prompt_text)
    return f"Dialog handler set to {action}" + (f" with text '{prompt_text}'" if prompt_text else "")


__all__ = [
    "browser_click",
    "browser_hover",
    "browser_type",
    "browser_press_key",
    "browser_drag",
    "browser_select_option",
    "browser_file_upload",
    "browser_fill_form",
    "browser_handle_dialog",
]
