"""Page-level actions against a session's active page.

Every action takes a Session, resolves refs through the session's current ref
map, and raises typed errors (engine errors are translated on the way out).
"""

from .locators import parse_ref, is_ref, resolve_locator
from .elements import (
    interaction_errors,
    click,
    hover,
    type_text,
    drag,
    select_option,
    upload_files,
    fill_form,
)
from .navigation import navigate, go_back, wait_for
from .keyboard import press_key
from .page import evaluate, format_result, resize, handle_next_dialog
from .tabs import list_tabs, new_tab, switch_tab, close_tab
from .screenshots import Screenshot, fit_png, take_screenshot
from .extraction import page_text

__all__ = [
    "parse_ref",
    "is_ref",
    "resolve_locator",
    "interaction_errors",
    "click",
    "hover",
    "type_text",
    "drag",
    "select_option",
    "upload_files",
    "fill_form",
    "navigate",
    "go_back",
    "wait_for",
    "press_key",
    "evaluate",
    "format_result",
    "resize",
    "handle_next_dialog",
    "list_tabs",
    "new_tab",
    "switch_tab",
    "close_tab",
    "Screenshot",
    "fit_png",
    "take_screenshot",
    "page_text",
]
