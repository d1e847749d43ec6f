"""
Registry of named, concurrently open browser sessions.

Callers address sessions by name across independent tool calls; the registry
is the state that makes those calls behave like one continuous browsing
session. It is not thread-safe and does not need to be: everything runs on
one event loop. The only suspension-sensitive step is create(), which
reserves the name before its first await.
"""

import time
import datetime
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from playwright.async_api import BrowserContext, Page

import logging
logger = logging.getLogger(__name__)

from ..constants import HEADED_BY_DEFAULT
from ..errors import DuplicateSession, SessionNotFound
from .engines import BrowserEngine, get_engine


@dataclass
class ConsoleMessage:
    type: str
    text: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class NetworkRequest:
    url: str
    method: str
    status: Optional[int] = None
    failure: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class SessionInfo:
    name: str
    type: str
    url: str
    created_at: str


@dataclass
class Session:
    """
    One named browser session.

    Attributes:
        name: Registry key, unique among live sessions
        type: Engine variant tag ('chromium', 'firefox', 'webkit', 'camoufox')
        engine: Engine owning the browser instance
        context: Browsing context all of the session's pages live in
        page: Active page, always one of context.pages
        created_at: Creation time (UTC)
        refs: Ref map from the most recent snapshot; replaced on every snapshot
    """

    name: str
    type: str
    engine: BrowserEngine
    context: BrowserContext
    page: Page
    headless: bool = True
    created_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
    console_messages: List[ConsoleMessage] = field(default_factory=list)
    network_requests: List[NetworkRequest] = field(default_factory=list)
    refs: Dict[str, Any] = field(default_factory=dict)

    def pages(self) -> List[Page]:
        return list(self.context.pages)

    def url(self) -> str:
        return self.page.url

    def info(self) -> SessionInfo:
        return SessionInfo(
            name=self.name,
            type=self.type,
            url=self.url(),
            created_at=self.created_at.isoformat(),
        )


def _track_page(session: Session, page: Page) -> None:
    """Attach console and network listeners to one page of the session."""
    requests: Dict[int, NetworkRequest] = {}

    def _on_console(msg):
        session.console_messages.append(ConsoleMessage(type=msg.type, text=msg.text))

    def _on_request(request):
        entry = NetworkRequest(url=request.url, method=request.method)
        requests[id(request)] = entry
        session.network_requests.append(entry)

    def _on_response(response):
        entry = requests.pop(id(response.request), None)
        if entry is not None:
            entry.status = response.status

    def _on_request_failed(request):
        entry = requests.pop(id(request), None)
        if entry is not None:
            entry.failure = request.failure or "failed"

    def _on_close(closed_page):
        # Keep the active page inside the context
        if session.page is closed_page:
            remaining = [p for p in session.context.pages if p is not closed_page]
            if remaining:
                session.page = remaining[0]

    page.on("console", _on_console)
    page.on("request", _on_request)
    page.on("response", _on_response)
    page.on("requestfailed", _on_request_failed)
    page.on("close", _on_close)


class SessionRegistry:
    """
    Lifecycle and identity management for live browser sessions.

    Args:
        engine_factory: Maps a type tag to a fresh BrowserEngine
        headless: Process-wide headless override (None: per-type default)
    """

    def __init__(
        self,
        engine_factory: Callable[[str], BrowserEngine] = get_engine,
        headless: Optional[bool] = None,
    ):
        self._sessions: Dict[str, Session] = {}
        self._pending: Set[str] = set()
        self._engine_factory = engine_factory
        self._headless = headless

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, name: str) -> bool:
        return name in self._sessions

    def _default_headless(self, browser_type: str) -> bool:
        if self._headless is not None:
            return self._headless
        return browser_type not in HEADED_BY_DEFAULT

    async def create(
        self,
        name: str,
        browser_type: str = "chromium",
        headless: Optional[bool] = None,
        storage_state: Optional[Dict[str, Any]] = None,
    ) -> Session:
        """
        Open a new browser instance with one page and register it under `name`.

        Raises:
            DuplicateSession: if `name` is live or being created
            InvalidArgument: for an unknown browser type
        """
        # Check and reserve with no await in between
        if name in self._sessions or name in self._pending:
            raise DuplicateSession(name)
        engine = self._engine_factory(browser_type)
        self._pending.add(name)

        if headless is None:
            headless = self._default_headless(browser_type)

        try:
            await engine.launch(headless=headless)
            try:
                context = await engine.new_context(storage_state=storage_state)
                page = await engine.new_page(context)
            except BaseException:
                await engine.close()
                raise

            session = Session(
                name=name,
                type=browser_type,
                engine=engine,
                context=context,
                page=page,
                headless=headless,
            )
            _track_page(session, page)
            context.on("page", lambda p: _track_page(session, p))
            self._sessions[name] = session
        finally:
            self._pending.discard(name)

        logger.info(f"Created {browser_type} session '{name}' (headless={headless})")
        return session

    def get(self, name: str) -> Optional[Session]:
        return self._sessions.get(name)

    def get_or_raise(self, name: str) -> Session:
        session = self._sessions.get(name)
        if session is None:
            raise SessionNotFound(name)
        return session

    async def destroy(self, name: str) -> None:
        """
        Remove the session, then close its resources.

        The entry is removed first so a failing close cannot leave a zombie
        entry behind; close errors (browser already gone) are swallowed.
        """
        session = self._sessions.pop(name, None)
        if session is None:
            raise SessionNotFound(name, hint=False)

        try:
            await session.context.close()
        except Exception as e:
            logger.debug(f"Closing context of '{name}' failed: {e}")
        try:
            await session.engine.close()
        except Exception as e:
            logger.debug(f"Closing engine of '{name}' failed: {e}")
        logger.info(f"Destroyed session '{name}'")

    def list(self) -> List[SessionInfo]:
        return [s.info() for s in self._sessions.values()]

    async def destroy_all(self) -> None:
        """Best-effort destroy of every live session."""
        for name in list(self._sessions.keys()):
            try:
                await self.destroy(name)
            except Exception as e:
                logger.debug(f"Ignoring error while destroying '{name}': {e}")


__all__ = [
    "ConsoleMessage",
    "NetworkRequest",
    "SessionInfo",
    "Session",
    "SessionRegistry",
]
