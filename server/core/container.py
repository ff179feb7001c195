"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from core.config import Settings
from core.cache import CacheService
from services.cache_invalidation import CacheInvalidator


class Container(containers.DeclarativeContainer):
    """Application dependency injection container."""

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # Cache service (uses Redis when REDIS_URL is set, in-memory otherwise)
    cache = providers.Singleton(
        CacheService,
        settings=settings
    )

    # Services
    cache_invalidator = providers.Factory(
        CacheInvalidator,
        cache=cache
    )

