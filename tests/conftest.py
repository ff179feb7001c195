"""Shared fixtures for cache tests.

Redis is replaced by fakeredis; time is replaced by a manual clock so TTL
expiry and reconnect throttling are deterministic.
"""

import fakeredis
import pytest
import pytest_asyncio

from core.cache import CacheService
from core.config import Settings


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_settings():
    return Settings(redis_url=None, upstash_redis_url=None)


@pytest.fixture
def redis_settings():
    return Settings(redis_url="redis://localhost:6379/0", redis_reconnect_interval=5)


@pytest_asyncio.fixture
async def memory_cache(memory_settings, clock):
    cache = CacheService(memory_settings, clock=clock)
    await cache.startup()
    yield cache
    await cache.shutdown()


@pytest.fixture
def redis_client():
    server = fakeredis.FakeServer()
    return fakeredis.FakeAsyncRedis(server=server, decode_responses=True)


@pytest_asyncio.fixture
async def redis_cache(redis_settings, redis_client, clock):
    cache = CacheService(redis_settings, redis_client=redis_client, clock=clock)
    await cache.startup()
    yield cache
    await cache.shutdown()
