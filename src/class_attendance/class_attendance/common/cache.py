from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from ..core.constants import DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

_MISSING = object()


class ReadCache(Protocol):
    """Time-boxed memoization of fact-store reads.

    Writers of closures, overrides, makeups or timetables must call
    invalidate_prefix for the affected key family.
    """

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        raise NotImplementedError

    def invalidate_prefix(self, prefix: str) -> int:
        raise NotImplementedError


@dataclass
class _Entry:
    value: Any
    expires_at: float


class MemoryTTLCache:
    """In-process ReadCache with per-entry expiry."""

    def __init__(
        self,
        *,
        default_ttl: int = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._default_ttl = int(default_ttl)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if entry.expires_at <= self._clock():
                # stale: drop and recompute upstream
                del self._entries[key]
                return default
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else int(ttl_seconds)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def invalidate_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for k in keys:
                del self._entries[k]
        logger.info("Cache invalidate: %s keys for prefix '%s'", len(keys), prefix)
        return len(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def get_or_load(cache: ReadCache, key: str, loader: Callable[[], Any]) -> Any:
    cached = cache.get(key, _MISSING)
    if cached is not _MISSING:
        return cached
    value = loader()
    cache.set(key, value)
    return value
