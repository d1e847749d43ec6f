"""Diagnostics and debugging information utility functions."""

import os
import sys
import platform
from importlib import metadata

import psutil

from ..config import get_state_dir
from ..context import AppContext


def _package_version(dist: str) -> str:
    try:
        return metadata.version(dist)
    except metadata.PackageNotFoundError:
        return "<not installed>"


async def collect_diagnostics(app: AppContext) -> str:
    """
    Collect diagnostic information about the environment, live sessions and locks.

    Args:
        app: Application context

    Returns:
        str: Formatted diagnostic information
    """
    config = app.config
    proc = psutil.Process(os.getpid())

    parts = [
        f"OS                : {platform.system()} {platform.release()}",
        f"Python            : {sys.version.split()[0]}",
        f"Playwright        : {_package_version('playwright')}",
        f"MCP               : {_package_version('mcp')}",
        f"PID               : {proc.pid}",
        f"Memory (RSS)      : {proc.memory_info().rss // (1024 * 1024)} MiB",
        f"State dir         : {get_state_dir(config)}",
        f"Default browser   : {app.default_browser}",
        f"Headless override : {config.get('headless')}",
        f"Lock timeout      : {app.storage.lock_timeout_secs}s",
        f"Live sessions     : {len(app.registry)}",
    ]

    for info in app.registry.list():
        parts.append(f"  - {info.name} ({info.type}) {info.url} since {info.created_at}")

    stored = await app.storage.list()
    domains = sorted({s.domain for s in stored})
    parts.append(f"Stored sessions   : {len(stored)} across {len(domains)} domain(s)")
    for domain in domains:
        lock = await app.storage.lock_info(domain)
        if lock is None:
            continue
        stale = lock.is_stale(app.storage.lock_timeout_secs)
        parts.append(
            f"  - lock {domain}: pid={lock.pid} alive={lock.owner_alive()} "
            f"age={int(lock.age_secs())}s stale={stale}"
        )

    return "\n".join(parts)


__all__ = ['collect_diagnostics']
