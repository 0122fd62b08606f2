import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

from application.clock import Clock
from application.services.aggregator import RateAggregator
from domain.exceptions.currency import CacheError, PersistenceError
from domain.models.currency import ExchangeRate
from infrastructure.cache.base import ResultCache
from infrastructure.persistence.repositories.exchange_rate import ExchangeRateRepository
from infrastructure.providers.base import BankRateProvider

logger = logging.getLogger(__name__)


class RefreshState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    PERSISTING = "persisting"
    INVALIDATING = "invalidating"
    NOTIFYING = "notifying"


class RateNotifier(Protocol):
    def submit(self, rates: list[ExchangeRate]) -> bool:
        ...


@dataclass
class RefreshOutcome:
    """Summary of one refresh cycle"""
    started_at: datetime
    rates: list[ExchangeRate] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    response_times_ms: dict[str, int | None] = field(default_factory=dict)
    persisted: bool = False
    notified: bool = False
    error: str | None = None


class RefreshCoordinator:
    """
    Runs the fetch -> aggregate -> persist -> invalidate -> notify cycle.

    Only one cycle runs at a time; a cycle requested while another is in
    flight is skipped rather than queued.
    """

    def __init__(
        self,
        providers: list[BankRateProvider],
        aggregator: RateAggregator,
        repository: ExchangeRateRepository,
        cache: ResultCache,
        notifier: RateNotifier | None = None,
        clock: Clock | None = None,
    ):
        self.providers = providers
        self.aggregator = aggregator
        self.repository = repository
        self.cache = cache
        self.notifier = notifier
        self.clock = clock or Clock()
        self.state = RefreshState.IDLE
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> RefreshOutcome | None:
        if self._lock.locked():
            logger.warning("Refresh cycle already in progress, skipping this trigger")
            return None

        async with self._lock:
            try:
                return await self._run()
            finally:
                self.state = RefreshState.IDLE

    async def _run(self) -> RefreshOutcome:
        outcome = RefreshOutcome(started_at=self.clock.now())
        logger.debug("Updating exchange rates...")

        self.state = RefreshState.FETCHING
        results = await asyncio.gather(
            *(provider.fetch() for provider in self.providers), return_exceptions=True
        )

        quotes = []
        for provider, result in zip(self.providers, results, strict=True):
            if isinstance(result, Exception):
                logger.warning(
                    f"Source {provider.name} failed unexpectedly, skipping it: {result}",
                    extra={"source": provider.name, "stage": self.state.value},
                )
                outcome.failed_sources.append(provider.name)
                continue

            outcome.response_times_ms[provider.name] = result.response_time_ms
            if not result.ok:
                logger.warning(
                    f"Source {provider.name} unavailable this cycle, skipping it: {result.error}",
                    extra={"source": provider.name, "stage": self.state.value},
                )
                outcome.failed_sources.append(provider.name)
            else:
                logger.info(
                    f"Source {provider.name} returned {len(result.quotes)} quotes in {result.response_time_ms} ms",
                    extra={"source": provider.name, "stage": self.state.value},
                )
                quotes.extend(result.quotes)

        self.state = RefreshState.AGGREGATING
        averaged = self.aggregator.aggregate(quotes, self.clock.now())
        if not averaged:
            logger.warning(
                f"No exchange rates to save this cycle (failed sources: {outcome.failed_sources})"
            )
            return outcome
        outcome.rates = list(averaged.values())

        self.state = RefreshState.PERSISTING
        try:
            await self.repository.append_all(outcome.rates)
        except PersistenceError as e:
            logger.error(f"Error saving exchange rates, cycle aborted: {e}", extra={"stage": self.state.value})
            outcome.error = str(e)
            return outcome
        outcome.persisted = True
        logger.info(f"Exchange rates successfully fetched and saved. Saved data: {outcome.rates}")

        self.state = RefreshState.INVALIDATING
        try:
            await self.cache.invalidate_all()
        except CacheError as e:
            logger.error(
                f"Cached results could not be invalidated and may be stale: {e}", extra={"stage": self.state.value}
            )

        self.state = RefreshState.NOTIFYING
        if self.notifier is not None:
            outcome.notified = self.notifier.submit(outcome.rates)

        return outcome
