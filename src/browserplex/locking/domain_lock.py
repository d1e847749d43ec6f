"""File-based advisory lock scoping sensitive per-domain flows (e.g. login) to one process."""

import os
import json
import time
import psutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import logging
logger = logging.getLogger(__name__)


@dataclass
class LockInfo:
    """Lock record as stored on disk: {domain, acquiredAt (epoch millis), pid}."""

    domain: str
    acquired_at: int
    pid: int

    def to_json(self) -> str:
        return json.dumps({"domain": self.domain, "acquiredAt": self.acquired_at, "pid": self.pid})

    @classmethod
    def from_json(cls, raw: str) -> "LockInfo":
        data = json.loads(raw)
        return cls(domain=str(data["domain"]), acquired_at=int(data["acquiredAt"]), pid=int(data["pid"]))

    def age_secs(self, now: Optional[float] = None) -> float:
        now = time.time() if now is None else now
        return now - self.acquired_at / 1000.0

    def is_stale(self, timeout_secs: float, now: Optional[float] = None) -> bool:
        return self.age_secs(now) > timeout_secs

    def owner_alive(self) -> bool:
        try:
            return psutil.pid_exists(self.pid)
        except (ValueError, OSError):
            return False


def _now_millis() -> int:
    return int(time.time() * 1000)


def read_lock(path: Path) -> Optional[LockInfo]:
    """
    Read a lock record.

    Returns:
        The parsed LockInfo, or None when the file is missing or unparseable.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    try:
        return LockInfo.from_json(raw)
    except (ValueError, KeyError, TypeError):
        logger.debug(f"Unparseable lock record at {path}; judging by mtime")
        return None


def _is_fresh(path: Path, info: Optional[LockInfo], timeout_secs: float) -> bool:
    """
    Whether an existing lock file still counts as held.

    An unparseable record may be a competitor that has created the file but
    not yet written it, so its age comes from the file mtime instead.
    """
    if info is not None:
        return not info.is_stale(timeout_secs)
    try:
        age = time.time() - path.stat().st_mtime
    except FileNotFoundError:
        return False
    return age <= timeout_secs


def acquire(path: Path, domain: str, timeout_secs: float) -> bool:
    """
    Try to take the lock at `path` for this process.

    A fresh lock held by anyone (this process included) means "not acquired".
    A stale record is removed first; an unparseable one is stale only once its
    mtime is older than the timeout. The record itself is created with
    O_CREAT | O_EXCL, so a racing writer that gets there first makes this call
    report False.
    """
    path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

    if path.exists():
        info = read_lock(path)
        if _is_fresh(path, info, timeout_secs):
            return False
        logger.info(f"Removing stale lock for domain '{domain}' (owner pid={getattr(info, 'pid', None)})")
        path.unlink(missing_ok=True)

    info = LockInfo(domain=domain, acquired_at=_now_millis(), pid=os.getpid())
    try:
        fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
    except FileExistsError:
        return False
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(info.to_json())
    logger.info(f"Acquired lock for domain '{domain}' (pid={info.pid})")
    return True


def release(path: Path) -> bool:
    """
    Delete the lock only if this process owns it.

    Returns:
        True if a lock owned by this process was removed.
    """
    try:
        info = read_lock(path)
        if info is None or info.pid != os.getpid():
            return False
        path.unlink()
    except OSError as e:
        logger.debug(f"Could not release lock {path}: {e}")
        return False
    logger.info(f"Released lock for domain '{info.domain}'")
    return True


def is_locked(path: Path, timeout_secs: float) -> bool:
    """True for a present, fresh lock. Never modifies the file."""
    try:
        if not path.exists():
            return False
        return _is_fresh(path, read_lock(path), timeout_secs)
    except OSError:
        return False


__all__ = [
    "LockInfo",
    "read_lock",
    "acquire",
    "release",
    "is_locked",
]
