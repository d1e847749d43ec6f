# browserplex/decorators/envelope.py

import os
import json
import asyncio
import inspect
import datetime
import functools
import traceback
from typing import Any, Callable

from mcp.server.fastmcp import Image
from mcp.types import ImageContent, TextContent
from playwright.async_api import Error as PlaywrightError

import logging
logger = logging.getLogger(__name__)

from ..errors import BrowserplexError, FilesystemFailure, translate_engine_error


__all__ = [
    "tool_envelope",
    "error_payload",
]

_CONTENT_TYPES = (Image, ImageContent, TextContent)


def _traceback_enabled() -> bool:
    return os.getenv("BROWSERPLEX_TOOL_ERRORS_TRACEBACK", "1") not in ("0", "false", "False")


def _as_reportable(err: Exception) -> BrowserplexError:
    """Map an exception onto the failure taxonomy; re-raise anything unexpected."""
    if isinstance(err, BrowserplexError):
        return err
    if isinstance(err, PlaywrightError):
        return translate_engine_error(err)
    if isinstance(err, OSError):
        return FilesystemFailure(f"{err.__class__.__name__}: {err}")
    raise err


def error_payload(err: BrowserplexError, include_tb: bool = False) -> str:
    payload = {
        "ok": False,
        "summary": f"Error: {err}",
        "error": {
            "type": err.__class__.__name__,
            "category": err.category,
            "message": str(err),
        },
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }
    if include_tb:
        payload["error"]["traceback"] = traceback.format_exc()
    return json.dumps(payload, ensure_ascii=False)


def _normalize(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, _CONTENT_TYPES):
        return value
    if isinstance(value, (list, tuple)) and any(isinstance(v, _CONTENT_TYPES) for v in value):
        return list(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    try:
        return json.dumps(value, ensure_ascii=False, default=lambda o: getattr(o, "__dict__", repr(o)))
    except (TypeError, ValueError):
        return str(value)


def tool_envelope(func: Callable):
    """
    Decorator for MCP tool functions:
      - Works with both async and sync callables.
      - On success: strings pass through, MCP content (images) passes through,
        everything else is JSON-encoded.
      - On a reportable failure (BrowserplexError, engine errors, OSError):
        returns a uniform JSON string with ok=false and an error category.
      - Anything else (programming errors) propagates, as does cancellation.
    Environment:
      - Set BROWSERPLEX_TOOL_ERRORS_TRACEBACK=0 to suppress tracebacks in error payloads.
    """

    def _handle(err: Exception) -> str:
        reportable = _as_reportable(err)
        logger.info(f"{func.__name__} failed: {reportable.__class__.__name__}: {reportable}")
        return error_payload(reportable, include_tb=_traceback_enabled())

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                result = await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                return _handle(e)
            return _normalize(result)
        return wrapper
    else:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                return _handle(e)
            return _normalize(result)
        return wrapper
