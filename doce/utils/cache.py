"""In-memory TTL cache with per-key single-flight locking."""

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from loguru import logger


class TTLCache:
    """
    Memory cache whose entries expire after a freshness window.

    ``lock(key)`` is an async context manager holding one ``asyncio.Lock`` per
    key so callers can make "check freshness, then fetch and insert" a single
    critical section and avoid racing duplicate fetches for the same key.
    A key's lock lives only while someone holds or waits on it, and expired
    entries are swept on every insert, so neither map outgrows the live set.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            ttl_seconds: Default freshness window, five minutes.
            clock: Monotonic time source (injectable for tests).
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # {key: (value, expire_at)}
        self._mem: dict[str, tuple[Any, float]] = {}
        # {key: (lock, holders + waiters)}
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` when absent or expired."""
        entry = self._mem.get(key)
        if entry is None:
            return None
        value, expire_at = entry
        if self._clock() < expire_at:
            return value
        del self._mem[key]
        logger.debug(f"Cache entry expired: {key[:80]}")
        return None

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        now = self._clock()
        self._purge_expired(now)
        self._mem[key] = (value, now + ttl)

    def invalidate(self, key: str) -> None:
        self._mem.pop(key, None)

    def clear(self) -> None:
        self._mem.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (_, expire_at) in self._mem.items() if now >= expire_at]
        for k in expired:
            del self._mem[k]
        if expired:
            logger.debug(f"Cache swept {len(expired)} expired entries")

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        """Per-key lock guarding the check-then-insert sequence."""
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    @property
    def size(self) -> int:
        """Number of stored entries (expired ones included until swept)."""
        return len(self._mem)

    @property
    def lock_count(self) -> int:
        """Keys that currently have a holder or waiter."""
        return len(self._locks)
