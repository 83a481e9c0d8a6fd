"""Storage layer: in-process caches and durable session state."""

from .cache import MemoCache, with_cache
from .session import SessionState, SessionStore

__all__ = [
    "MemoCache",
    "with_cache",
    "SessionState",
    "SessionStore",
]
