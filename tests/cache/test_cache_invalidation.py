"""Tests for resource invalidation helpers."""

from unittest.mock import AsyncMock

import pytest

from core.cache import CacheService
from core.cache_keys import CacheKeys
from services.cache_invalidation import CacheInvalidator, CacheResource


STATIC_KEYS = {
    CacheResource.CONDOMINIUMS: CacheKeys.condominiums_approved(),
    CacheResource.COLONIES: CacheKeys.colonies_approved(),
    CacheResource.AMENITIES: CacheKeys.amenities(),
    CacheResource.PROPERTY_FEATURES: CacheKeys.property_features(),
}


async def _seed(cache, keys):
    for key in keys:
        await cache.set(key, ["seed"], 3600)


@pytest.mark.asyncio
async def test_condominium_write_invalidates_approved_list(memory_cache):
    await _seed(memory_cache, STATIC_KEYS.values())
    invalidator = CacheInvalidator(memory_cache)

    await invalidator.invalidate_condominium_cache()

    assert await memory_cache.get("condominiums:approved") is None
    assert await memory_cache.get("colonies:approved") == ["seed"]


@pytest.mark.asyncio
@pytest.mark.parametrize("method, resource", [
    ("invalidate_colony_cache", CacheResource.COLONIES),
    ("invalidate_amenity_cache", CacheResource.AMENITIES),
    ("invalidate_property_feature_cache", CacheResource.PROPERTY_FEATURES),
])
async def test_single_resource_helpers(memory_cache, method, resource):
    await _seed(memory_cache, STATIC_KEYS.values())

    await getattr(CacheInvalidator(memory_cache), method)()

    for tag, key in STATIC_KEYS.items():
        expected = None if tag is resource else ["seed"]
        assert await memory_cache.get(key) == expected


@pytest.mark.asyncio
async def test_invalidate_multiple_accepts_tags_and_strings(memory_cache):
    await _seed(memory_cache, STATIC_KEYS.values())
    invalidator = CacheInvalidator(memory_cache)

    await invalidator.invalidate_multiple("condominiums", CacheResource.AMENITIES, "not-a-resource")

    assert await memory_cache.get("condominiums:approved") is None
    assert await memory_cache.get("amenities:all") is None
    assert await memory_cache.get("colonies:approved") == ["seed"]
    assert await memory_cache.get("property-features:all") == ["seed"]


@pytest.mark.asyncio
async def test_invalidate_multiple_continues_past_failures():
    cache = AsyncMock(spec=CacheService)

    async def invalidate(pattern):
        if pattern == "colonies:approved":
            raise RuntimeError("boom")
        return 1

    cache.invalidate.side_effect = invalidate
    invalidator = CacheInvalidator(cache)

    await invalidator.invalidate_multiple(*CacheResource)

    called = sorted(call.args[0] for call in cache.invalidate.await_args_list)
    assert called == sorted(STATIC_KEYS.values())


@pytest.mark.asyncio
async def test_invalidate_multiple_with_no_tags(memory_cache):
    await CacheInvalidator(memory_cache).invalidate_multiple()


@pytest.mark.asyncio
async def test_invalidate_user_cache(memory_cache):
    await _seed(memory_cache, [
        CacheKeys.user_profile("1"),
        CacheKeys.user_favorites("1"),
        CacheKeys.user_notifications_unread("1"),
        CacheKeys.user_profile("12"),
    ])

    await CacheInvalidator(memory_cache).invalidate_user_cache("1")

    assert await memory_cache.get("user:1:profile") is None
    assert await memory_cache.get("user:1:favorites") is None
    assert await memory_cache.get("user:1:notifications:unread") is None
    assert await memory_cache.get("user:12:profile") == ["seed"]


@pytest.mark.asyncio
async def test_invalidate_property_search_cache(redis_cache):
    await _seed(redis_cache, [
        CacheKeys.property_search("abc"),
        CacheKeys.property_search("def"),
        CacheKeys.properties_featured(),
        CacheKeys.amenities(),
    ])

    await CacheInvalidator(redis_cache).invalidate_property_search_cache()

    assert await redis_cache.get("properties:search:abc") is None
    assert await redis_cache.get("properties:search:def") is None
    assert await redis_cache.get("properties:featured") is None
    assert await redis_cache.get("amenities:all") == ["seed"]


@pytest.mark.asyncio
async def test_invalidate_external_dashboard_cache(memory_cache):
    await _seed(memory_cache, [
        CacheKeys.external_dashboard_summary("ag1"),
        CacheKeys.external_seller_summary("u1", "ag1"),
        CacheKeys.external_seller_metrics("u2", "ag1"),
        CacheKeys.external_seller_metrics("u1", "ag2"),
        CacheKeys.external_dashboard_summary("ag2"),
    ])

    await CacheInvalidator(memory_cache).invalidate_external_dashboard_cache("ag1")

    assert await memory_cache.get("external:dashboard:summary:ag1") is None
    assert await memory_cache.get("external:seller:summary:u1:ag1") is None
    assert await memory_cache.get("external:seller:metrics:u2:ag1") is None
    assert await memory_cache.get("external:seller:metrics:u1:ag2") == ["seed"]
    assert await memory_cache.get("external:dashboard:summary:ag2") == ["seed"]
