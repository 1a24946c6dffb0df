"""Keyed query cache with prefix invalidation.

Views share cached task and status collections. Nothing mutates cached
values in place: after a successful mutation the affected keys are
invalidated and the next read fetches from the backend again.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

CacheKey = tuple[Any, ...]

TASKS_KEY: CacheKey = ("tasks",)
TASK_STATUSES_KEY: CacheKey = ("setup", "task-statuses")
INVOICES_KEY: CacheKey = ("finance", "invoices")


def task_key(task_id: int) -> CacheKey:
    return ("tasks", task_id)


def time_entries_key(task_id: int) -> CacheKey:
    return ("tasks", task_id, "time-entries")


class QueryCache:
    """In-memory cache of backend reads, keyed by tuples."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}
        self._logger = logger.bind(component="query_cache")

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def get(self, key: CacheKey, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value

    async def get_or_fetch(self, key: CacheKey, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for key, fetching it on a miss.

        Fetch errors propagate and leave the cache untouched.
        """
        if key in self._entries:
            return self._entries[key]
        value = await fetch()
        self._entries[key] = value
        self._logger.debug("cache_filled", key=key)
        return value

    def invalidate(self, prefix: CacheKey) -> int:
        """Drop the key and every key it prefixes. Returns the number dropped."""
        stale = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        if stale:
            self._logger.debug("cache_invalidated", prefix=prefix, dropped=len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
