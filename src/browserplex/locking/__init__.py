"""Cross-process locking primitives."""

from .domain_lock import LockInfo, read_lock, acquire, release, is_locked

__all__ = [
    "LockInfo",
    "read_lock",
    "acquire",
    "release",
    "is_locked",
]
