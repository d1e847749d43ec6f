"""Stored storage-state records and per-domain lock tool implementations."""

import json
from typing import Optional

from ..context import AppContext
from ..errors import LockConflict


async def session_save(app: AppContext, session: str, domain: str, name: str) -> str:
    """Persist cookies and local storage of a live session under (domain, name)."""
    live = app.registry.get_or_raise(session)
    path = await app.storage.save(live.context, domain, name)
    return f"Saved session '{session}' as '{name}' for '{domain}' -> {path}"


async def stored_sessions_list(app: AppContext, domain: Optional[str] = None) -> str:
    records = await app.storage.list(domain)
    if not records:
        return "No stored sessions" + (f" for '{domain}'" if domain else "")
    lines = [f"- {r.domain}/{r.name} (modified {r.modified_at})" for r in records]
    return f"Stored sessions ({len(records)}):\n" + "\n".join(lines)


async def stored_session_delete(app: AppContext, domain: str, name: str) -> str:
    await app.storage.delete(domain, name)
    return f"Deleted stored session '{name}' for '{domain}'"


async def domain_lock_acquire(app: AppContext, domain: str) -> str:
    """
    Take the advisory lock for `domain`.

    Raises:
        LockConflict: another holder owns a fresh lock
    """
    if not await app.storage.acquire_lock(domain):
        info = await app.storage.lock_info(domain)
        raise LockConflict(domain, info.pid if info else None)
    return f"Acquired lock for '{domain}'"


async def domain_lock_release(app: AppContext, domain: str) -> str:
    if not await app.storage.release_lock(domain):
        return f"No lock held by this process for '{domain}'"
    return f"Released lock for '{domain}'"


async def domain_lock_status(app: AppContext, domain: str) -> str:
    locked = await app.storage.is_locked(domain)
    status = {"domain": domain, "locked": locked}
    info = await app.storage.lock_info(domain)
    if locked and info is not None:
        status.update(
            pid=info.pid,
            owner_alive=info.owner_alive(),
            age_secs=round(info.age_secs(), 1),
        )
    return json.dumps(status)


__all__ = [
    "session_save",
    "stored_sessions_list",
    "stored_session_delete",
    "domain_lock_acquire",
    "domain_lock_release",
    "domain_lock_status",
]
