"""
Browser engine capability interface and one implementation per engine variant.

The session registry only talks to BrowserEngine; get_engine() maps the
session's type tag onto a concrete engine.
"""

from typing import Any, Dict, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

import logging
logger = logging.getLogger(__name__)

from ..constants import BROWSER_TYPES
from ..errors import InvalidArgument


class BrowserEngine:
    """
    Capability interface: launch an instance, open contexts and pages, close.

    An engine object owns exactly one browser instance; close() releases it
    together with any driver process the engine started.
    """

    browser_type: str = ""

    async def launch(self, headless: bool) -> None:
        raise NotImplementedError

    async def new_context(self, storage_state: Optional[Dict[str, Any]] = None) -> BrowserContext:
        raise NotImplementedError

    async def new_page(self, context: BrowserContext) -> Page:
        return await context.new_page()

    async def close(self) -> None:
        raise NotImplementedError

    def version(self) -> Optional[str]:
        return None


class PlaywrightEngine(BrowserEngine):
    """chromium, firefox and webkit through Playwright's bundled browsers."""

    def __init__(self, browser_type: str):
        if browser_type not in ("chromium", "firefox", "webkit"):
            raise InvalidArgument(f"Playwright does not provide a '{browser_type}' browser")
        self.browser_type = browser_type
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def launch(self, headless: bool) -> None:
        self._playwright = await async_playwright().start()
        try:
            launcher = getattr(self._playwright, self.browser_type)
            self._browser = await launcher.launch(headless=headless)
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(f"Launched {self.browser_type} (headless={headless}, version={self.version()})")

    async def new_context(self, storage_state: Optional[Dict[str, Any]] = None) -> BrowserContext:
        if self._browser is None:
            raise RuntimeError("Engine not launched")
        if storage_state is not None:
            return await self._browser.new_context(storage_state=storage_state)
        return await self._browser.new_context()

    async def close(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    def version(self) -> Optional[str]:
        return self._browser.version if self._browser is not None else None


class CamoufoxEngine(BrowserEngine):
    """Stealth Firefox build driven through the camoufox package."""

    browser_type = "camoufox"

    def __init__(self):
        self._manager = None
        self._browser: Optional[Browser] = None

    async def launch(self, headless: bool) -> None:
        from camoufox.async_api import AsyncCamoufox

        self._manager = AsyncCamoufox(headless=headless)
        self._browser = await self._manager.__aenter__()

    async def new_context(self, storage_state: Optional[Dict[str, Any]] = None) -> BrowserContext:
        if self._browser is None:
            raise RuntimeError("Engine not launched")
        # Persistent-context launches hand back a context rather than a browser
        if isinstance(self._browser, BrowserContext):
            return self._browser
        if storage_state is not None:
            return await self._browser.new_context(storage_state=storage_state)
        return await self._browser.new_context()

    async def close(self) -> None:
        manager, self._manager, self._browser = self._manager, None, None
        if manager is not None:
            await manager.__aexit__(None, None, None)


def get_engine(browser_type: str) -> BrowserEngine:
    """Factory keyed on the session type tag."""
    if browser_type not in BROWSER_TYPES:
        raise InvalidArgument(
            f"Unknown browser type '{browser_type}'. Use one of: {', '.join(BROWSER_TYPES)}"
        )
    if browser_type == "camoufox":
        return CamoufoxEngine()
    return PlaywrightEngine(browser_type)


__all__ = [
    "BrowserEngine",
    "PlaywrightEngine",
    "CamoufoxEngine",
    "get_engine",
]
