# browserplex/tools/__init__.py
"""
MCP tool implementations.

Each function takes the AppContext explicitly as its first argument, looks
up the target session by name, delegates to the actions layer and returns
a short text result. Failures are raised as BrowserplexError subclasses and
turned into error payloads by the tool envelope in __main__.
"""

from .sessions import (
    session_create,
    session_list,
    session_destroy,
)

from .persistence import (
    session_save,
    stored_sessions_list,
    stored_session_delete,
    domain_lock_acquire,
    domain_lock_release,
    domain_lock_status,
)

from .navigation import (
    browser_navigate,
    browser_navigate_back,
    browser_wait_for,
    browser_tabs,
)

from .interaction import (
    browser_click,
    browser_hover,
    browser_type,
    browser_press_key,
    browser_drag,
    browser_select_option,
    browser_file_upload,
    browser_fill_form,
    browser_handle_dialog,
)

from .snapshots import (
    browser_snapshot,
    browser_page_text,
    browser_take_screenshot,
)

from .debugging import (
    browser_evaluate,
    browser_resize,
    browser_console_messages,
    browser_network_requests,
    get_debug_info,
)

__all__ = [
    "session_create",
    "session_list",
    "session_destroy",
    "session_save",
    "stored_sessions_list",
    "stored_session_delete",
    "domain_lock_acquire",
    "domain_lock_release",
    "domain_lock_status",
    "browser_navigate",
    "browser_navigate_back",
    "browser_wait_for",
    "browser_tabs",
    "browser_click",
    "browser_hover",
    "browser_type",
    "browser_press_key",
    "browser_drag",
    "browser_select_option",
    "browser_file_upload",
    "browser_fill_form",
    "browser_handle_dialog",
    "browser_snapshot",
    "browser_page_text",
    "browser_take_screenshot",
    "browser_evaluate",
    "browser_resize",
    "browser_console_messages",
    "browser_network_requests",
    "get_debug_info",
]
