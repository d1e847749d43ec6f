"""Debugging tool implementations."""

import datetime

from .. import actions
from ..context import AppContext
from ..utils.diagnostics import collect_diagnostics


def _clock(ts: float) -> str:
    return datetime.datetime.fromtimestamp(ts).strftime("%H:%M:%S")


async def browser_evaluate(app: AppContext, session: str, script: str) -> str:
    s = app.registry.get_or_raise(session)
    result = await actions.evaluate(s, script)
    return actions.format_result(result)


async def browser_resize(app: AppContext, session: str, width: int, height: int) -> str:
    s = app.registry.get_or_raise(session)
    await actions.resize(s, width, height)
    return f"Resized viewport to {width}x{height}"


async def browser_console_messages(app: AppContext, session: str, clear: bool = False) -> str:
    s = app.registry.get_or_raise(session)
    messages = list(s.console_messages)
    if clear:
        s.console_messages.clear()
    if not messages:
        return "No console messages"
    lines = [f"[{_clock(m.timestamp)}] [{m.type}] {m.text}" for m in messages]
    return f"Console messages ({len(messages)}):\n" + "\n".join(lines)


def _outcome(request) -> str:
    if request.status is not None:
        return f" -> {request.status}"
    if request.failure:
        return f" -> failed ({request.failure})"
    return ""


async def browser_network_requests(app: AppContext, session: str, clear: bool = False) -> str:
    s = app.registry.get_or_raise(session)
    requests = list(s.network_requests)
    if clear:
        s.network_requests.clear()
    if not requests:
        return "No network requests"
    lines = [f"[{_clock(r.timestamp)}] {r.method} {r.url}" + _outcome(r) for r in requests]
    return f"Network requests ({len(requests)}):\n" + "\n".join(lines)


async def get_debug_info(app: AppContext) -> str:
    return await collect_diagnostics(app)


__all__ = [
    "browser_evaluate",
    "browser_resize",
    "browser_console_messages",
    "browser_network_requests",
    "get_debug_info",
]
