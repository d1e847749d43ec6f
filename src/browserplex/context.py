"""
Process-wide application state.

One AppContext is built when the server starts (see the lifespan hook in
__main__) and handed by reference to every tool implementation. Tests build
their own instances, so nothing here is a module-level singleton.

Thread Safety:
    Not thread-safe. Everything runs on the server's event loop.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from .browser.engines import BrowserEngine, get_engine
from .browser.registry import SessionRegistry
from .config import get_env_config, get_state_dir
from .storage import StorageManager


@dataclass
class AppContext:
    """
    Attributes:
        registry: Live browser sessions, keyed by name
        storage: Persisted storage state and domain locks
        config: Environment configuration dictionary (see get_env_config)
    """

    registry: SessionRegistry
    storage: StorageManager
    config: dict = field(default_factory=dict)

    @property
    def default_browser(self) -> str:
        return self.config.get("default_browser") or "chromium"

    @property
    def default_timeout_ms(self) -> int:
        return int(self.config.get("default_timeout_ms") or 5000)


def build_app_context(
    config: Optional[dict] = None,
    engine_factory: Callable[[str], BrowserEngine] = get_engine,
) -> AppContext:
    """Construct the registry and storage manager from configuration."""
    if config is None:
        config = get_env_config()
    return AppContext(
        registry=SessionRegistry(engine_factory=engine_factory, headless=config.get("headless")),
        storage=StorageManager(get_state_dir(config), lock_timeout_secs=config["lock_timeout_secs"]),
        config=config,
    )


__all__ = [
    "AppContext",
    "build_app_context",
]
