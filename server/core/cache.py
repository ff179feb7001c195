"""Cache service with Redis (production) or in-memory (development) backend.

The cache is advisory: the database stays the source of truth, so no method
here raises for backend trouble. The worst outcome of a failure is a miss or
a stale read until TTL expiry.

Degradation modes are fixed at construction:
- No REDIS_URL configured: in-memory store, always enabled.
- REDIS_URL configured: Redis only. When the connection is down every
  operation is a no-op and reads report ``CacheStatus.UNAVAILABLE``.
"""

import json
import re
import time
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from core.config import Settings
from core.logging import get_logger, log_cache_operation
from core.memory_cache import MemoryCacheStore, wildcard_to_regex
from models.cache import CacheLookup, CacheState, CacheStats

logger = get_logger(__name__)

_CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)
_GLOB_SPECIAL = re.compile(r"([\\?\[\]])")


def wildcard_to_glob(pattern: str) -> str:
    """Escape Redis glob syntax so only `*` acts as a wildcard."""
    return _GLOB_SPECIAL.sub(r"\\\1", pattern)


def _redact_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.password:
        return url.replace(f":{parsed.password}@", ":***@", 1)
    return url


class CacheService:
    """Async get/set/invalidate facade over Redis or an in-memory store.

    Lifecycle (Redis only):
        DISABLED -> CONNECTING -> ENABLED   startup() handshake succeeded
                              -> DISABLED  handshake failed
        ENABLED -> DISABLED                connection lost during an operation

    While DISABLED after startup, one PING probe is attempted per
    ``redis_reconnect_interval`` seconds on the next call; a successful probe
    moves the service back to ENABLED.
    """

    def __init__(
        self,
        settings: Settings,
        redis_client: Optional["redis.Redis"] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.redis: Optional[redis.Redis] = redis_client
        self._clock = clock
        self.use_memory = redis_client is None and not settings.cache_backend_configured
        self.memory_cache: Optional[MemoryCacheStore] = (
            MemoryCacheStore(clock=clock) if self.use_memory else None
        )
        self.state = CacheState.ENABLED if self.use_memory else CacheState.DISABLED
        self._started = False
        self._last_probe: Optional[float] = None

    @property
    def backend(self) -> str:
        return "memory" if self.use_memory else "redis"

    def _create_client(self) -> "redis.Redis":
        s = self.settings
        return redis.from_url(
            s.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=s.redis_socket_timeout,
            socket_connect_timeout=s.redis_socket_connect_timeout,
            retry=Retry(
                ExponentialBackoff(cap=s.redis_retry_backoff_cap, base=s.redis_retry_backoff_base),
                s.redis_max_retries,
            ),
            retry_on_error=[RedisConnectionError, RedisTimeoutError],
        )

    async def startup(self):
        """Initialize cache connection."""
        self._started = True
        if self.use_memory:
            self.state = CacheState.ENABLED
            logger.info("Redis not configured - using in-memory cache")
            return

        self.state = CacheState.CONNECTING
        try:
            if self.redis is None:
                self.redis = self._create_client()
            await self.redis.ping()
        except Exception as e:
            self.state = CacheState.DISABLED
            self._last_probe = self._clock()
            logger.warning("Redis connection failed, cache disabled", error=str(e))
            return

        self.state = CacheState.ENABLED
        logger.info("Redis cache initialized",
                    url=_redact_url(self.settings.redis_url) if self.settings.redis_url else "injected")

    async def shutdown(self):
        """Close cache connections."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
                logger.info("Redis cache connections closed")
            except Exception as e:
                logger.warning("Redis close failed", error=str(e))
        if self.memory_cache is not None:
            self.memory_cache.clear()
        self.state = CacheState.DISABLED
        self._started = False

    async def _available(self) -> bool:
        """Whether the backend can take a command right now."""
        if self.use_memory:
            return self.state is CacheState.ENABLED
        if self.redis is None or not self._started:
            return False
        if self.state is CacheState.ENABLED:
            return True
        if self.state is CacheState.CONNECTING:
            return False
        return await self._probe()

    async def _probe(self) -> bool:
        now = self._clock()
        if self._last_probe is not None and now - self._last_probe < self.settings.redis_reconnect_interval:
            return False
        self._last_probe = now
        try:
            await self.redis.ping()
        except Exception as e:
            logger.debug("Redis reconnect probe failed", error=str(e))
            return False
        self.state = CacheState.ENABLED
        logger.info("Redis connection restored, cache enabled")
        return True

    def _backend_failed(self, operation: str, key: str, error: Exception) -> None:
        if isinstance(error, _CONNECTION_ERRORS) and self.state is CacheState.ENABLED and not self.use_memory:
            self.state = CacheState.DISABLED
            self._last_probe = self._clock()
            logger.error("Redis connection lost, cache disabled",
                         operation=operation, key=key, error=str(error))
        else:
            logger.error(f"Cache {operation} failed", key=key, error=str(error))

    async def lookup(self, key: str) -> CacheLookup:
        """Read a key and report whether it was a hit, a miss, or unavailable."""
        if not await self._available():
            return CacheLookup.unavailable()

        try:
            if self.use_memory:
                raw = self.memory_cache.get(key)
            else:
                raw = await self.redis.get(key)
        except Exception as e:
            self._backend_failed("get", key, e)
            return CacheLookup.unavailable()

        if raw is None:
            log_cache_operation(logger, "get", key, hit=False)
            return CacheLookup.miss()

        try:
            value = json.loads(raw)
        except (TypeError, ValueError, RecursionError) as e:
            logger.error("Cache payload could not be decoded", key=key, error=str(e))
            return CacheLookup.miss()

        log_cache_operation(logger, "get", key, hit=True)
        return CacheLookup.hit(value)

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache. None on miss, failure, or disabled cache."""
        return (await self.lookup(key)).value

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Set value in cache with a TTL in seconds. Returns False if dropped."""
        if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
            logger.warning("Cache set ignored, TTL must be a positive int", key=key, ttl=ttl)
            return False
        if not await self._available():
            return False

        try:
            serialized = json.dumps(value, default=str)
        except (TypeError, ValueError, RecursionError) as e:
            logger.error("Cache value could not be serialized", key=key, error=str(e))
            return False

        try:
            if self.use_memory:
                self.memory_cache.set(key, serialized, ttl)
            else:
                await self.redis.setex(key, ttl, serialized)
        except Exception as e:
            self._backend_failed("set", key, e)
            return False

        log_cache_operation(logger, "set", key, ttl=ttl)
        return True

    async def delete(self, key: str) -> bool:
        """Delete a single key. Returns True if it existed."""
        if not await self._available():
            return False
        try:
            if self.use_memory:
                deleted = self.memory_cache.delete(key)
            else:
                deleted = bool(await self.redis.delete(key))
        except Exception as e:
            self._backend_failed("delete", key, e)
            return False

        log_cache_operation(logger, "delete", key, deleted=deleted)
        return deleted

    async def invalidate(self, pattern: str) -> int:
        """Delete one key, or every key matching a `*` wildcard pattern.

        Returns the number of keys removed (0 when nothing matched or the
        cache is unavailable).
        """
        if "*" not in pattern:
            return int(await self.delete(pattern))
        if not await self._available():
            return 0

        try:
            if self.use_memory:
                deleted = self.memory_cache.delete_matching(wildcard_to_regex(pattern))
            else:
                deleted = await self._delete_glob(wildcard_to_glob(pattern))
        except Exception as e:
            self._backend_failed("invalidate", pattern, e)
            return 0

        if deleted:
            logger.info("Invalidated cache keys", pattern=pattern, deleted=deleted)
        log_cache_operation(logger, "invalidate", pattern, deleted=deleted)
        return deleted

    async def _delete_glob(self, glob: str) -> int:
        batch_size = self.settings.redis_scan_count
        deleted = 0
        batch = []
        async for key in self.redis.scan_iter(match=glob, count=batch_size):
            batch.append(key)
            if len(batch) >= batch_size:
                deleted += await self.redis.delete(*batch)
                batch = []
        if batch:
            deleted += await self.redis.delete(*batch)
        return deleted

    async def clear(self) -> bool:
        """Delete every entry in the cache database.

        Flushes the whole Redis logical database, including keys this service
        did not write. Administrative use only.
        """
        if not await self._available():
            return False
        try:
            if self.use_memory:
                count = self.memory_cache.clear()
                logger.warning("Cache cleared", backend="memory", deleted=count)
            else:
                await self.redis.flushdb()
                logger.warning("Cache cleared", backend="redis")
        except Exception as e:
            self._backend_failed("clear", "*", e)
            return False
        return True

    async def get_stats(self) -> CacheStats:
        """Best-effort introspection; ``enabled`` is False unless Redis is up."""
        if self.use_memory or not await self._available():
            return CacheStats(enabled=False)

        try:
            key_count = await self.redis.dbsize()
        except Exception as e:
            self._backend_failed("stats", "*", e)
            return CacheStats(enabled=self.state is CacheState.ENABLED)

        memory_used = "unknown"
        try:
            info = await self.redis.info("memory")
            memory_used = str(info.get("used_memory_human", "unknown"))
        except Exception as e:
            logger.debug("Redis memory info unavailable", error=str(e))

        return CacheStats(enabled=True, key_count=key_count, memory_used=memory_used)

    async def get_or_set(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: int,
    ) -> Any:
        """Read-through helper: return the cached value or load and store it.

        Errors raised by ``loader`` propagate; ``None`` results are not cached.
        """
        cached = await self.lookup(key)
        if cached.is_hit:
            return cached.value

        value = await loader()
        if value is not None:
            await self.set(key, value, ttl)
        return value

    def is_redis_available(self) -> bool:
        """Check if Redis is configured and currently connected."""
        return not self.use_memory and self.redis is not None and self.state is CacheState.ENABLED
