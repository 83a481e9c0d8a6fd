"""In-process memoization for async fetches.

Optimization Strategy:
- Share in-flight work: the pending task is cached, not just its value,
  so concurrent callers with the same key await a single invocation
- Evict on failure: errors and cancellations are never cached
- Settle to plain values: once a task succeeds its entry is replaced by the
  result, which keeps injected stores serializable (e.g. session state)

Stores are any ``MutableMapping``; the default is an unbounded ``dict`` with
no invalidation beyond eviction on failure.
"""

import asyncio
from functools import partial, wraps
from typing import Any, Awaitable, Callable, Hashable, MutableMapping, Optional, TypeVar

from cognate_finder.observ import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

KeyGetter = Callable[..., Hashable]


def _default_key(fn: Callable, args: tuple, kwargs: dict) -> Hashable:
    if len(args) == 1 and not kwargs:
        return args[0]
    raise TypeError(
        f"{fn.__qualname__} takes more than a single argument; "
        "pass a key_getter to with_cache()"
    )


def _settle(store: MutableMapping, key: Hashable, task: asyncio.Future) -> None:
    """Replace a finished task by its value, or evict it if it failed."""
    if store.get(key) is not task:
        return  # cleared or replaced meanwhile

    if task.cancelled() or task.exception() is not None:
        del store[key]
        logger.debug("cache_evicted", key=repr(key), cancelled=task.cancelled())
    else:
        store[key] = task.result()


def with_cache(
    cache: Optional[MutableMapping[Hashable, Any]] = None,
    key_getter: Optional[KeyGetter] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Memoize an async function with at most one in-flight call per key.

    Args:
        cache: Backing store; a fresh dict when omitted. May be pre-seeded
            with plain values.
        key_getter: Maps call arguments to a hashable key. Without it the
            wrapped function must be called with exactly one positional
            argument, which is the key.

    Example:
        @with_cache(key_getter=lambda word, lang: (word, lang))
        async def fetch_definition(word: str, lang: str) -> str:
            ...
    """
    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        store = cache if cache is not None else {}

        @wraps(fn)
        async def wrapper(*args, **kwargs) -> T:
            key = key_getter(*args, **kwargs) if key_getter else _default_key(fn, args, kwargs)

            if key in store:
                cached = store[key]
                if isinstance(cached, asyncio.Future):
                    return await asyncio.shield(cached)
                return cached

            task = asyncio.ensure_future(fn(*args, **kwargs))
            store[key] = task
            task.add_done_callback(partial(_settle, store, key))

            # A cancelled caller must not cancel the work others are awaiting
            return await asyncio.shield(task)

        wrapper.cache = store
        return wrapper

    return decorator


class MemoCache:
    """Explicit cache service owning a backing store.

    Example:
        definitions = MemoCache(seed)
        fetch = definitions.wrap(_fetch_definition, key_getter=definition_key)
    """

    def __init__(self, store: Optional[MutableMapping[Hashable, Any]] = None):
        self._store: MutableMapping[Hashable, Any] = store if store is not None else {}

    def wrap(
        self,
        fn: Callable[..., Awaitable[T]],
        key_getter: Optional[KeyGetter] = None,
    ) -> Callable[..., Awaitable[T]]:
        """Memoize ``fn`` against this cache's store."""
        return with_cache(cache=self._store, key_getter=key_getter)(fn)

    def seed(self, values: dict[Hashable, Any]) -> None:
        """Pre-populate settled values, e.g. from persisted session state."""
        self._store.update(values)

    def clear(self) -> None:
        """Drop every entry. In-flight tasks keep running but are forgotten."""
        self._store.clear()

    def settled(self) -> dict[Hashable, Any]:
        """Snapshot of entries whose value is known."""
        return {
            key: value
            for key, value in self._store.items()
            if not isinstance(value, asyncio.Future)
        }

    def __contains__(self, key: Hashable) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
