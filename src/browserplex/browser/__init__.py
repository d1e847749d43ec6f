"""Browser engines and the session registry."""

from .engines import BrowserEngine, PlaywrightEngine, CamoufoxEngine, get_engine
from .registry import (
    ConsoleMessage,
    NetworkRequest,
    SessionInfo,
    Session,
    SessionRegistry,
)

__all__ = [
    "BrowserEngine",
    "PlaywrightEngine",
    "CamoufoxEngine",
    "get_engine",
    "ConsoleMessage",
    "NetworkRequest",
    "SessionInfo",
    "Session",
    "SessionRegistry",
]
