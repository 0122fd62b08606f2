from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol

from domain.models.currency import Currency


class CacheNamespace(str, Enum):
    LATEST = "latest"
    HOURLY = "hourly"
    DAILY = "daily"


class ResultCache(Protocol):
    async def get_or_compute(
        self, namespace: CacheNamespace, currency: Currency, compute: Callable[[], Awaitable[Any]]
    ) -> Any:
        ...

    async def invalidate_all(self) -> None:
        ...


class InMemoryResultCache:
    """Process-local cache with the same contract as the Redis one."""

    def __init__(self):
        self._entries: dict[tuple[CacheNamespace, Currency], Any] = {}
        self._generation = 0

    async def get_or_compute(
        self, namespace: CacheNamespace, currency: Currency, compute: Callable[[], Awaitable[Any]]
    ) -> Any:
        key = (namespace, currency)
        if key in self._entries:
            return self._entries[key]

        generation = self._generation
        value = await compute()
        # A result computed across an invalidation belongs to the old generation
        if generation == self._generation:
            self._entries[key] = value
        return value

    async def invalidate_all(self) -> None:
        self._generation += 1
        self._entries = {}
