import json
import logging
import time
from typing import Any, Awaitable, Callable

import redis.asyncio as redis

from newsdesk.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key layout
# ---------------------------------------------------------------------------

ALL_ARTICLES = "all_articles"
ALL_VISUALS = "all_visuals"
ALL_COMMENTS = "all_comments"


def pad_id(article_id: int) -> str:
    """Render an article identifier in its fixed-width external form (7 -> "007")."""
    return f"{article_id:03d}"


def article_key(article_id: int) -> str:
    return f"article_{pad_id(article_id)}"


def visuals_key(article_id: int) -> str:
    return f"visuals_{pad_id(article_id)}"


def comments_key(article_id: int) -> str:
    return f"comments_{pad_id(article_id)}"


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MemoryBackend:
    """
    Process-local key/value store with per-entry expiry.

    Expiry is lazy: an entry past its deadline is reported as absent and
    dropped by the access that notices it.  Nothing sweeps the store in the
    background.
    """

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float | None, str]] = {}
        self._clock = clock

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, data = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._entries[key]
            return None
        return data

    async def set(self, key: str, data: str, ttl: int | None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._entries[key] = (expires_at, data)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)

    async def close(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisBackend:
    """Shared backend for deployments that run several API processes."""

    name = "redis"

    def __init__(self, url: str) -> None:
        self._url = url
        self._redis: redis.Redis | None = None

    async def connect(self) -> None:
        self._redis = redis.from_url(
            self._url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        await self._redis.ping()

    async def get(self, key: str) -> str | None:
        return await self._redis.get(key)

    async def set(self, key: str, data: str, ttl: int | None) -> None:
        await self._redis.set(key, data, ex=ttl)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._redis.delete(*keys)

    async def close(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------

class CacheManager:
    """
    Read-through cache in front of the article, media and comment tables.

    The cache is never authoritative.  Backend failures are logged and
    reported as a miss (reads) or skipped (writes), so a request falls back
    to the store instead of failing.

    Each key carries a generation number that ``delete`` bumps.  A
    read-through fill started before an invalidation is discarded instead of
    written back, so an invalidated entry is only ever replaced by data read
    after the invalidation.
    """

    def __init__(self) -> None:
        self._backend: MemoryBackend | RedisBackend | None = None
        self._generations: dict[str, int] = {}
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Select and open the configured backend.  Called once at startup."""
        if settings.CACHE_BACKEND == "redis":
            backend = RedisBackend(settings.REDIS_URL)
            try:
                await backend.connect()
            except Exception as exc:
                logger.warning("Redis unavailable, cache disabled: %s", exc)
                return
            self.use_backend(backend)
        else:
            self.use_backend(MemoryBackend())
        logger.info("Cache backend: %s (ttl=%ss)", self._backend.name, settings.CACHE_TTL)

    async def disconnect(self) -> None:
        """Close the backend.  Called once at shutdown."""
        if self._backend is not None:
            await self._backend.close()
            self._backend = None

    def use_backend(self, backend: MemoryBackend | RedisBackend | None) -> None:
        """Swap the backend and reset generations and counters."""
        self._backend = backend
        self._generations.clear()
        self._hits = 0
        self._misses = 0

    @property
    def enabled(self) -> bool:
        return self._backend is not None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the cached value for *key*, or None on a miss or error."""
        if self._backend is None:
            self._misses += 1
            return None
        try:
            data = await self._backend.get(key)
        except Exception as exc:
            logger.warning("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key* for *ttl* seconds (default ``CACHE_TTL``)."""
        if self._backend is None:
            return
        try:
            serialised = json.dumps(value, default=str)
            await self._backend.set(key, serialised, ttl or settings.CACHE_TTL)
        except Exception as exc:
            logger.warning("Cache SET error for key=%r: %s", key, exc)

    async def delete(self, *keys: str) -> None:
        """Invalidate *keys*; later reads of them go to the store."""
        for key in keys:
            self._generations[key] = self._generations.get(key, 0) + 1
        if self._backend is None or not keys:
            return
        try:
            await self._backend.delete(*keys)
            logger.debug("Cache invalidated %s", ", ".join(keys))
        except Exception as exc:
            logger.error("Cache DELETE error for keys=%r: %s", keys, exc)

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any | None]],
        ttl: int | None = None,
    ) -> Any | None:
        """
        Return the cached value for *key*, loading it on a miss.

        *loader* returning None means "nothing to cache" (e.g. no such row);
        None is passed through to the caller and nothing is stored.  A
        loaded value is written back only when *key* was not invalidated
        while the loader ran.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached

        generation = self._generations.get(key, 0)
        value = await loader()
        if value is None:
            return None
        if self._generations.get(key, 0) == generation:
            await self.set(key, value, ttl)
        else:
            logger.debug("Dropped fill for %r: invalidated while loading", key)
        return value

    # ------------------------------------------------------------------
    # Domain-level invalidation helpers
    # ------------------------------------------------------------------

    async def invalidate_article(self, article_id: int | None = None) -> None:
        """
        Invalidate after an article write.

        The aggregate is always dropped because it cannot be patched in
        place.  The detail entry is dropped when the identifier is known
        (it is not for a create).
        """
        keys = [ALL_ARTICLES]
        if article_id is not None:
            keys.append(article_key(article_id))
        await self.delete(*keys)

    async def invalidate_article_removal(self, article_id: int) -> None:
        """Invalidate everything derived from an article that no longer exists."""
        await self.delete(
            ALL_ARTICLES,
            article_key(article_id),
            ALL_VISUALS,
            visuals_key(article_id),
            ALL_COMMENTS,
            comments_key(article_id),
        )

    async def invalidate_comments(self, article_id: int) -> None:
        await self.delete(ALL_COMMENTS, comments_key(article_id))

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        """Return a snapshot of hit/miss counters for the metrics endpoint."""
        total = self._hits + self._misses
        return {
            "backend": self._backend.name if self._backend is not None else None,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
