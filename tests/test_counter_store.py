import sys
import unittest
from dataclasses import replace
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_analyzer.core.config import settings  # noqa: E402
from resume_analyzer.core.counter_store import (  # noqa: E402
    MemoryCounterStore,
    RedisCounterStore,
    _split_addr,
    build_counter_store,
)
from resume_analyzer.core.errors import StoreFailure  # noqa: E402


class RedisCounterStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.pipe = MagicMock()
        self.pipe.__aenter__.return_value = self.pipe
        self.pipe.execute = AsyncMock(return_value=[2, False])
        self.client = AsyncMock()
        self.client.pipeline = MagicMock(return_value=self.pipe)
        self.store = RedisCounterStore(self.client, key_prefix="usage:")

    async def test_incr_and_expiry_go_out_in_one_transaction(self):
        self.assertEqual(await self.store.incr("203.0.113.7", 86400), 2)

        self.client.pipeline.assert_called_once_with(transaction=True)
        self.pipe.incr.assert_called_once_with("usage:203.0.113.7")
        self.pipe.expire.assert_called_once_with("usage:203.0.113.7", 86400, nx=True)
        self.pipe.execute.assert_awaited_once()

    async def test_redis_errors_become_store_failures(self):
        self.pipe.execute.side_effect = RedisConnectionError("Connection refused")

        with self.assertRaises(StoreFailure) as ctx:
            await self.store.incr("k", 86400)
        self.assertIn("Connection refused", ctx.exception.detail)

    async def test_ping_failure_is_store_failure(self):
        self.client.ping.side_effect = RedisConnectionError("down")
        with self.assertRaises(StoreFailure):
            await self.store.ping()

    async def test_close_closes_client(self):
        await self.store.close()
        self.client.aclose.assert_awaited_once()


class CounterStoreConfigTests(unittest.TestCase):
    def test_split_addr(self):
        self.assertEqual(_split_addr("redis.internal:6380"), ("redis.internal", 6380))
        self.assertEqual(_split_addr("localhost"), ("localhost", 6379))

    def test_split_addr_rejects_bad_port(self):
        with self.assertRaises(RuntimeError):
            _split_addr("localhost:abc")

    def test_backend_selection(self):
        self.assertIsInstance(build_counter_store(replace(settings, rate_limit_backend="memory")), MemoryCounterStore)
        store = build_counter_store(replace(settings, rate_limit_backend="redis", redis_addr="localhost:6379"))
        self.assertIsInstance(store, RedisCounterStore)


if __name__ == "__main__":
    unittest.main()
