import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

from redis import asyncio as redis
from redis.exceptions import RedisError

from domain.exceptions.currency import CacheError
from domain.models.currency import Currency
from infrastructure.cache.base import CacheNamespace
from infrastructure.cache.codec import decode, encode

logger = logging.getLogger(__name__)


class RedisCacheService:
    """
    Query-result cache keyed by namespace and currency.

    Keys carry a generation number; ``invalidate_all`` bumps it with a single
    INCR so every namespace is dropped at once. Old entries expire via TTL.
    """

    GENERATION_KEY = "rates:generation"

    def __init__(self, redis_client: redis.Redis, ttl: timedelta = timedelta(hours=1)):
        self.redis = redis_client
        self.ttl = ttl

    def _make_key(self, generation: int, namespace: CacheNamespace, currency: Currency) -> str:
        return f"rates:{generation}:{namespace.value}:{currency.value}"

    async def _current_generation(self) -> int:
        raw = await self.redis.get(self.GENERATION_KEY)
        return int(raw) if raw else 0

    async def get_or_compute(
        self, namespace: CacheNamespace, currency: Currency, compute: Callable[[], Awaitable[Any]]
    ) -> Any:
        try:
            generation = await self._current_generation()
            key = self._make_key(generation, namespace, currency)
            data = await self.redis.get(key)
        except RedisError as e:
            logger.warning(f"Cache read failed for {namespace.value}:{currency.value}, computing directly: {e}")
            return await compute()

        if data:
            try:
                return decode(namespace, data)
            except CacheError as e:
                logger.warning(f"Discarding cached {key}: {e}")

        value = await compute()

        try:
            await self.redis.setex(key, self.ttl, encode(namespace, value))
        except RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
        return value

    async def invalidate_all(self) -> None:
        try:
            generation = await self.redis.incr(self.GENERATION_KEY)
        except RedisError as e:
            raise CacheError(f"Failed to invalidate cached results: {e}") from e
        logger.info(f"Cached query results invalidated (generation {generation})")
