"""Read-through cache for winner ledger queries."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict

from cachetools import TTLCache

from core.constants import CacheDefaults

class LedgerCache:
    """TTL cache keyed by query, with per-key locks against duplicate loads.

    Keys are plain strings such as ``winners:discovery-70``; writes to the
    ledger invalidate by prefix. Every invalidation bumps ``generation``, and
    a load that started under an older generation is returned to its caller
    but never stored.
    """

    def __init__(self, ttl: int = CacheDefaults.LEDGER_TTL, maxsize: int = CacheDefaults.LEDGER_SIZE) -> None:
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._locks: Dict[str, asyncio.Lock] = {}
        self.generation = 0
        self.hits = 0
        self.misses = 0

    def _key_lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def get_or_set(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Get value from cache or load and cache it.

        Args:
            key: Cache key
            loader: Async function producing the value on a miss

        Returns:
            Cached or loaded value
        """
        if key in self._cache:
            self.hits += 1
            return self._cache[key]

        async with self._key_lock(key):
            # Another waiter may have filled it
            if key in self._cache:
                self.hits += 1
                return self._cache[key]

            self.misses += 1
            started = self.generation
            value = await loader()
            if started == self.generation:
                self._cache[key] = value
            return value

    def invalidate_pattern(self, prefix: str) -> int:
        """Drop every key starting with ``prefix``; returns how many were dropped."""
        self.generation += 1
        keys = [k for k in list(self._cache) if k.startswith(prefix)]
        for key in keys:
            self._cache.pop(key, None)
        return len(keys)

    def stats(self) -> Dict[str, Any]:
        return {
            "size": len(self._cache),
            "maxsize": self._cache.maxsize,
            "ttl": self._cache.ttl,
            "generation": self.generation,
            "hits": self.hits,
            "misses": self.misses,
        }
