"""Snapshot cache with a staleness window and explicit invalidation.

Shared read-only inputs (interviews, jobs, activity log, attempt cache) are
loaded once per window and reused across interviews. Invalidation drops a
snapshot so the next read reloads it. Time is always passed in by the caller.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

from src.core.schemas import as_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SnapshotCache:
    """Keyed snapshots, each reloaded after ``stale_seconds`` or on invalidation.

    Usage::

        cache = SnapshotCache(stale_seconds=3600)
        jobs = await cache.get("jobs", sources.list_jobs, now)
        cache.invalidate("jobs")
    """

    def __init__(self, stale_seconds: float = 3600.0) -> None:
        self._stale_seconds = stale_seconds
        self._entries: dict[str, tuple[Any, datetime]] = {}

    async def get(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        now: datetime,
    ) -> T:
        """Return the cached snapshot for ``key``, loading it if absent or stale."""
        now = as_utc(now)
        entry = self._entries.get(key)
        if entry is not None:
            value, fetched_at = entry
            age = (now - fetched_at).total_seconds()
            if 0 <= age <= self._stale_seconds:
                return value  # type: ignore[no-any-return]
            logger.debug("Snapshot '%s' is stale (%.0fs old)", key, age)

        value = await loader()
        self._entries[key] = (value, now)
        logger.debug("Loaded snapshot '%s'", key)
        return value

    def invalidate(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            logger.debug("Invalidated snapshot '%s'", key)

    def invalidate_all(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries
