"""Keyed read cache with explicit invalidation.

Keys are tuples built by ``query_keys``; invalidating a key also drops every
key that starts with it, so ``("programs",)`` clears all program entries while
``("programs", "detail", 3)`` clears a single program.
"""

import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from fastapi import Request

Key = Tuple[Hashable, ...]

_MISSING = object()


class QueryCache:
    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Dict[Key, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Key, default: Any = None) -> Any:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return default
            expires_at, value = item
            if expires_at <= self._clock():
                del self._items[key]
                return default
            return value

    def set(self, key: Key, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._items[key] = (self._clock() + ttl, value)

    def get_or_load(self, key: Key, loader: Callable[[], Any]) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = loader()
            self.set(key, value)
        return value

    def invalidate(self, prefix: Key) -> int:
        size = len(prefix)
        with self._lock:
            stale = [key for key in self._items if key[:size] == prefix]
            for key in stale:
                del self._items[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, key: Key) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._items)


class QueryKeys:
    """Key factories shared by readers and the writes that invalidate them."""

    @staticmethod
    def activities() -> Key:
        return ("activities",)

    @staticmethod
    def activity_detail(activity_id: int) -> Key:
        return ("activities", "detail", activity_id)

    @staticmethod
    def programs() -> Key:
        return ("programs",)

    @staticmethod
    def program_detail(program_id: int) -> Key:
        return ("programs", "detail", program_id)

    @staticmethod
    def program_entries(program_id: int) -> Key:
        return ("programs", "detail", program_id, "entries")

    @staticmethod
    def taxonomies() -> Key:
        return ("taxonomies",)

    @staticmethod
    def activity_types() -> Key:
        return ("taxonomies", "activity-types")

    @staticmethod
    def educational_goals() -> Key:
        return ("taxonomies", "educational-goals")

    @staticmethod
    def sdgs() -> Key:
        return ("taxonomies", "sdgs")


query_keys = QueryKeys()


def get_query_cache(request: Request) -> QueryCache:
    return request.app.state.query_cache
