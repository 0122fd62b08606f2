# nosec B101


import asyncio
from unittest.mock import AsyncMock

import pytest

from domain.models.currency import Currency
from infrastructure.cache.base import CacheNamespace, InMemoryResultCache


@pytest.mark.asyncio
async def test_computes_once_per_key():
    cache = InMemoryResultCache()
    compute = AsyncMock(return_value='usd-latest')

    assert await cache.get_or_compute(CacheNamespace.LATEST, Currency.USD, compute) == 'usd-latest'
    assert await cache.get_or_compute(CacheNamespace.LATEST, Currency.USD, compute) == 'usd-latest'

    compute.assert_awaited_once()


@pytest.mark.asyncio
async def test_namespaces_are_independent():
    cache = InMemoryResultCache()

    await cache.get_or_compute(CacheNamespace.LATEST, Currency.USD, AsyncMock(return_value='latest'))
    result = await cache.get_or_compute(CacheNamespace.HOURLY, Currency.USD, AsyncMock(return_value='hourly'))

    assert result == 'hourly'


@pytest.mark.asyncio
async def test_invalidate_all_clears_every_namespace():
    cache = InMemoryResultCache()
    for namespace in CacheNamespace:
        await cache.get_or_compute(namespace, Currency.EUR, AsyncMock(return_value='old'))

    await cache.invalidate_all()

    for namespace in CacheNamespace:
        assert await cache.get_or_compute(namespace, Currency.EUR, AsyncMock(return_value='new')) == 'new'


@pytest.mark.asyncio
async def test_compute_spanning_invalidation_is_not_stored():
    cache = InMemoryResultCache()
    gate = asyncio.Event()

    async def slow_compute():
        await gate.wait()
        return 'stale'

    pending = asyncio.create_task(cache.get_or_compute(CacheNamespace.LATEST, Currency.USD, slow_compute))
    await asyncio.sleep(0)
    await cache.invalidate_all()
    gate.set()

    assert await pending == 'stale'
    fresh = await cache.get_or_compute(CacheNamespace.LATEST, Currency.USD, AsyncMock(return_value='fresh'))
    assert fresh == 'fresh'


@pytest.mark.asyncio
async def test_failed_compute_is_not_cached():
    cache = InMemoryResultCache()

    with pytest.raises(LookupError):
        await cache.get_or_compute(CacheNamespace.DAILY, Currency.USD, AsyncMock(side_effect=LookupError))

    result = await cache.get_or_compute(CacheNamespace.DAILY, Currency.USD, AsyncMock(return_value=[]))
    assert result == []
