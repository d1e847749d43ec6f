"""
Persistent storage state (cookies, local storage) keyed by domain and name.

Layout under the state root:

    sessions/<domain>/<name>.json    storage state written by save()
    sessions/<domain>/.lock          advisory lock held during auth flows

Domain and name are sanitized before touching the filesystem. Blocking file
I/O runs in a worker thread so the event loop keeps serving other sessions.
"""

import os
import json
import asyncio
import datetime
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import logging
logger = logging.getLogger(__name__)

from .config import sanitize_name, sessions_root, session_file_path, lock_file_path
from .constants import LOCK_TIMEOUT_SECS
from .errors import FilesystemFailure, StoredSessionNotFound
from .locking import domain_lock
from .locking.domain_lock import LockInfo


@dataclass
class StoredSession:
    domain: str
    name: str
    path: str
    modified_at: str


def _write_private_json(path: Path, data: Any) -> None:
    """Write JSON with user-only permissions, atomically via temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    tmp = path.with_name(f".{path.name}.tmp")
    fd = os.open(str(tmp), os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.chmod(tmp, 0o600)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _iso_mtime(path: Path) -> str:
    ts = path.stat().st_mtime
    return datetime.datetime.fromtimestamp(ts, tz=datetime.timezone.utc).isoformat()


class StorageManager:
    """
    Saves, restores and enumerates storage-state records, and manages the
    per-domain advisory lock.

    One instance is created at process start and shared by reference.
    """

    def __init__(self, state_dir: str, lock_timeout_secs: float = LOCK_TIMEOUT_SECS):
        self.root = sessions_root(state_dir)
        self.lock_timeout_secs = lock_timeout_secs

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def session_path(self, domain: str, name: str) -> Path:
        return session_file_path(self.root, domain, name)

    def lock_path(self, domain: str) -> Path:
        return lock_file_path(self.root, domain)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def save(self, context, domain: str, name: str) -> str:
        """
        Persist the storage state of a live browsing context.

        Returns:
            Path of the written file
        """
        path = self.session_path(domain, name)
        state = await context.storage_state()
        await asyncio.to_thread(_write_private_json, path, state)
        logger.info(f"Saved storage state for domain '{domain}' as '{name}' -> {path}")
        return str(path)

    async def load(self, domain: str, name: str) -> dict:
        """
        Read a stored record.

        Raises:
            StoredSessionNotFound: no record under that domain and name
            FilesystemFailure: the record is not valid JSON
        """
        path = self.session_path(domain, name)
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            raise StoredSessionNotFound(domain, name) from None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise FilesystemFailure(f"Stored session '{name}' for '{domain}' is not valid JSON: {e}") from e

    async def exists(self, domain: str, name: str) -> bool:
        path = self.session_path(domain, name)
        try:
            return await asyncio.to_thread(path.is_file)
        except OSError:
            return False

    async def list(self, domain: Optional[str] = None) -> List[StoredSession]:
        return await asyncio.to_thread(self._list_sync, domain)

    def _list_sync(self, domain: Optional[str]) -> List[StoredSession]:
        sessions: List[StoredSession] = []
        if not self.root.is_dir():
            return sessions

        if domain is not None:
            domains = [sanitize_name(domain)]
        else:
            domains = sorted(p.name for p in self.root.iterdir())

        for d in domains:
            domain_dir = self.root / d
            try:
                if not domain_dir.is_dir():
                    continue
                for file in sorted(domain_dir.iterdir()):
                    if file.name.startswith(".") or file.suffix != ".json":
                        continue
                    sessions.append(StoredSession(
                        domain=d,
                        name=file.stem,
                        path=str(file),
                        modified_at=_iso_mtime(file),
                    ))
            except OSError as e:
                logger.debug(f"Skipping unreadable domain directory {domain_dir}: {e}")
                continue
        return sessions

    async def delete(self, domain: str, name: str) -> None:
        """Remove a record, then prune the domain directory if nothing else is left."""
        path = self.session_path(domain, name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            raise StoredSessionNotFound(domain, name) from None
        await asyncio.to_thread(self._prune_domain_dir, path.parent)
        logger.info(f"Deleted stored session '{name}' for domain '{domain}'")

    def _prune_domain_dir(self, domain_dir: Path) -> None:
        try:
            remaining = [p for p in domain_dir.iterdir() if not p.name.startswith(".")]
            if remaining:
                return
            (domain_dir / ".lock").unlink(missing_ok=True)
            domain_dir.rmdir()
        except OSError as e:
            logger.debug(f"Could not prune {domain_dir}: {e}")

    # ------------------------------------------------------------------
    # Domain lock
    # ------------------------------------------------------------------

    async def acquire_lock(self, domain: str) -> bool:
        return await asyncio.to_thread(
            domain_lock.acquire, self.lock_path(domain), domain, self.lock_timeout_secs
        )

    async def release_lock(self, domain: str) -> bool:
        """Remove the lock if this process owns it; True if something was removed."""
        return await asyncio.to_thread(domain_lock.release, self.lock_path(domain))

    async def is_locked(self, domain: str) -> bool:
        return await asyncio.to_thread(
            domain_lock.is_locked, self.lock_path(domain), self.lock_timeout_secs
        )

    async def lock_info(self, domain: str) -> Optional[LockInfo]:
        """The current lock record (stale or not), or None."""
        return await asyncio.to_thread(domain_lock.read_lock, self.lock_path(domain))


__all__ = [
    "StoredSession",
    "StorageManager",
]
