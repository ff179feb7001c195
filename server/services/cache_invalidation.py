"""Cache invalidation helpers for resource writes.

Call these after a successful create/update/delete so the cached copy of the
affected resource list is dropped. Failures never propagate; the cache
service already logs them, and a stale entry lapses at TTL expiry anyway.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Union

from core.cache import CacheService
from core.cache_keys import CacheKeys
from core.logging import get_logger

logger = get_logger(__name__)


class CacheResource(str, Enum):
    """Resource tags accepted by ``CacheInvalidator.invalidate_multiple``."""
    CONDOMINIUMS = "condominiums"
    COLONIES = "colonies"
    AMENITIES = "amenities"
    PROPERTY_FEATURES = "propertyFeatures"


class CacheInvalidator:
    """Named invalidation entry points over an injected CacheService."""

    def __init__(self, cache: CacheService):
        self.cache = cache
        self._handlers: Dict[CacheResource, Callable[[], Awaitable[None]]] = {
            CacheResource.CONDOMINIUMS: self.invalidate_condominium_cache,
            CacheResource.COLONIES: self.invalidate_colony_cache,
            CacheResource.AMENITIES: self.invalidate_amenity_cache,
            CacheResource.PROPERTY_FEATURES: self.invalidate_property_feature_cache,
        }

    async def invalidate_condominium_cache(self) -> None:
        await self.cache.invalidate(CacheKeys.condominiums_approved())

    async def invalidate_colony_cache(self) -> None:
        await self.cache.invalidate(CacheKeys.colonies_approved())

    async def invalidate_amenity_cache(self) -> None:
        await self.cache.invalidate(CacheKeys.amenities())

    async def invalidate_property_feature_cache(self) -> None:
        await self.cache.invalidate(CacheKeys.property_features())

    async def invalidate_user_cache(self, user_id: str) -> None:
        """Drop profile, notification and favorites entries for one user."""
        await self.cache.invalidate(CacheKeys.user_pattern(user_id))

    async def invalidate_property_search_cache(self) -> None:
        """Drop every cached search result plus the featured listing."""
        await asyncio.gather(
            self.cache.invalidate(CacheKeys.property_search_pattern()),
            self.cache.invalidate(CacheKeys.properties_featured()),
        )

    async def invalidate_external_dashboard_cache(self, agency_id: str) -> None:
        """Drop the agency dashboard summary and all per-seller dashboards."""
        await asyncio.gather(
            self.cache.invalidate(CacheKeys.external_dashboard_summary(agency_id)),
            self.cache.invalidate(CacheKeys.external_seller_pattern(agency_id)),
        )

    async def invalidate_multiple(self, *resources: Union[CacheResource, str]) -> None:
        """Invalidate several resource types concurrently.

        One failing helper does not stop the others; unknown tags are skipped.
        """
        tasks: List[Awaitable[None]] = []
        for resource in resources:
            try:
                tag = CacheResource(resource)
            except ValueError:
                logger.warning("Unknown cache resource type, skipping", resource=str(resource))
                continue
            tasks.append(self._handlers[tag]())

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                logger.error("Cache invalidation failed", error=str(result))
