from __future__ import annotations

import json
import logging

from fastapi import Request

from resume_analyzer.core.counter_store import CounterStore
from resume_analyzer.core.errors import RateLimited, StoreFailure

logger = logging.getLogger("resume_analyzer.rate_limit")


def client_key(request: Request, trust_proxy_headers: bool = True) -> str:
    if trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for", "").strip()
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimiter:
    """Fixed-window usage limit per client key.

    The window starts at the first request from a key and the counter
    disappears with it, so the next request starts a fresh window.
    """

    def __init__(self, store: CounterStore, max_requests: int = 3, window_seconds: int = 24 * 60 * 60):
        self._store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def hit(self, key: str) -> int:
        try:
            count = await self._store.incr(key, self.window_seconds)
        except StoreFailure as exc:
            logger.error(
                json.dumps(
                    {
                        "event": "counter_store_error",
                        "client_key": key,
                        "error": exc.detail,
                    }
                )
            )
            raise

        if count > self.max_requests:
            logger.info(
                json.dumps(
                    {
                        "event": "analysis_rate_limited",
                        "client_key": key,
                        "usage": count,
                        "limit": self.max_requests,
                    }
                )
            )
            raise RateLimited(self.max_requests, self.window_seconds)
        return count
