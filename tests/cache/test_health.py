"""Tests for cache health reporting."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from core.cache import CacheService
from core.health import HEALTH_CHECK_KEY, check_cache, get_health_status


@pytest.mark.asyncio
async def test_memory_cache_is_healthy(memory_cache):
    assert await check_cache(memory_cache) is True
    assert await memory_cache.get(HEALTH_CHECK_KEY) is None

    status = await get_health_status(memory_cache)
    assert status["status"] == "healthy"
    assert status["checks"] == {"cache": True}
    assert status["cache"] == {"backend": "memory", "state": "enabled", "enabled": False}


@pytest.mark.asyncio
async def test_redis_cache_is_healthy(redis_cache):
    status = await get_health_status(redis_cache)
    assert status["status"] == "healthy"
    assert status["cache"]["enabled"] is True
    assert status["cache"]["key_count"] == 0


@pytest.mark.asyncio
async def test_unreachable_redis_is_degraded(redis_settings, clock):
    client = AsyncMock()
    client.ping.side_effect = RedisConnectionError("Connection refused")
    cache = CacheService(redis_settings, redis_client=client, clock=clock)
    await cache.startup()

    status = await get_health_status(cache)

    assert status["status"] == "degraded"
    assert status["checks"] == {"cache": False}
    assert status["cache"] == {"backend": "redis", "state": "disabled", "enabled": False}
