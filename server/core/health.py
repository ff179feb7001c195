"""Health check utilities for daemon monitoring.

Provides uptime tracking and cache health status for a /health endpoint.
"""
import time
from typing import Dict, Any, TYPE_CHECKING

from core.logging import get_logger

if TYPE_CHECKING:
    from core.cache import CacheService

logger = get_logger(__name__)

HEALTH_CHECK_KEY = "_health_check"

# Module-level startup time tracking
_startup_time: float = 0.0


def set_startup_time() -> None:
    """Record the application startup time. Call once during lifespan startup."""
    global _startup_time
    _startup_time = time.time()


def get_uptime() -> float:
    """Get uptime in seconds since startup."""
    return time.time() - _startup_time if _startup_time else 0.0


async def check_cache(cache: "CacheService") -> bool:
    """Round-trip a probe key through the cache."""
    try:
        await cache.set(HEALTH_CHECK_KEY, "ok", ttl=10)
        result = await cache.get(HEALTH_CHECK_KEY)
        await cache.delete(HEALTH_CHECK_KEY)
        return result == "ok"
    except Exception as e:
        logger.warning("Cache health check failed", error=str(e))
        return False


async def get_health_status(cache: "CacheService") -> Dict[str, Any]:
    """Get health status for /health endpoint.

    A degraded cache only means extra database load, so it is reported
    rather than treated as fatal.
    """
    cache_healthy = await check_cache(cache)
    stats = await cache.get_stats()

    return {
        "status": "healthy" if cache_healthy else "degraded",
        "uptime_seconds": round(get_uptime(), 1),
        "checks": {
            "cache": cache_healthy,
        },
        "cache": {
            "backend": cache.backend,
            "state": cache.state.value,
            **stats.to_dict(),
        },
    }
