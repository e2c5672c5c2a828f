from __future__ import annotations

import threading
import time
from typing import Callable, Protocol

from redis import asyncio as redis_asyncio
from redis.exceptions import RedisError

from resume_analyzer.core.config import Settings
from resume_analyzer.core.errors import StoreFailure


class CounterStore(Protocol):
    async def incr(self, key: str, ttl_seconds: int) -> int:
        """Increment ``key`` and make sure it expires; returns the new count."""
        ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...


def _split_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep:
        return addr, 6379
    try:
        return host or "localhost", int(port)
    except ValueError as exc:
        raise RuntimeError(f"REDIS_ADDR must look like host:port, got '{addr}'.") from exc


class RedisCounterStore:
    """Counters kept in Redis; INCR is atomic across every server process."""

    def __init__(self, client: redis_asyncio.Redis, key_prefix: str = "usage:"):
        self._client = client
        self._prefix = key_prefix

    @classmethod
    def from_settings(cls, config: Settings) -> "RedisCounterStore":
        host, port = _split_addr(config.redis_addr)
        client = redis_asyncio.Redis(
            host=host,
            port=port,
            password=config.redis_password,
            db=config.redis_db,
            decode_responses=True,
        )
        return cls(client, key_prefix=config.rate_limit_key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def incr(self, key: str, ttl_seconds: int) -> int:
        name = self._key(key)
        try:
            # MULTI/EXEC: the count never lands without its TTL. NX keeps the
            # window anchored at the first hit and needs Redis 7.0+.
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(name)
                pipe.expire(name, ttl_seconds, nx=True)
                count, _ = await pipe.execute()
        except RedisError as exc:
            raise StoreFailure(detail=f"INCR/EXPIRE {name} failed: {exc}") from exc
        return int(count)

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except RedisError as exc:
            raise StoreFailure(detail=f"PING failed: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()


class MemoryCounterStore:
    """Single-process counters with Redis-like expiry semantics."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[int, float | None]] = {}

    def _live_entry(self, key: str, now: float) -> tuple[int, float | None] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= now:
            del self._entries[key]
            return None
        return entry

    async def incr(self, key: str, ttl_seconds: int) -> int:
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            count, expires_at = entry if entry is not None else (0, None)
            if expires_at is None:
                expires_at = now + ttl_seconds
            self._entries[key] = (count + 1, expires_at)
            return count + 1

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        with self._lock:
            self._entries.clear()


def build_counter_store(config: Settings) -> CounterStore:
    if config.rate_limit_backend == "memory":
        return MemoryCounterStore()
    return RedisCounterStore.from_settings(config)
