import logging
from datetime import datetime, time, timedelta

from application.clock import Clock
from application.services.dynamics import DynamicsCalculator
from domain.exceptions.currency import CurrencyDataNotFoundError, InvalidCurrencyError
from domain.models.currency import QUERYABLE_CURRENCIES, Currency, DynamicDetails, ExchangeRate
from infrastructure.cache.base import CacheNamespace, ResultCache
from infrastructure.persistence.repositories.exchange_rate import ExchangeRateRepository

logger = logging.getLogger(__name__)


class ExchangeRateService:
    """Read side: latest rate and rate dynamics, memoized until the next refresh."""

    def __init__(
        self,
        repository: ExchangeRateRepository,
        calculator: DynamicsCalculator,
        cache: ResultCache,
        clock: Clock | None = None,
    ):
        self.repository = repository
        self.calculator = calculator
        self.cache = cache
        self.clock = clock or Clock()

    async def get_latest_rate(self, currency: Currency) -> ExchangeRate:
        self._validate_currency(currency)
        return await self.cache.get_or_compute(
            CacheNamespace.LATEST, currency, lambda: self._latest_rate(currency)
        )

    async def get_hourly_dynamics(self, currency: Currency) -> DynamicDetails:
        self._validate_currency(currency)
        return await self.cache.get_or_compute(
            CacheNamespace.HOURLY, currency, lambda: self._hourly_dynamics(currency)
        )

    async def get_daily_dynamics(self, currency: Currency) -> list[DynamicDetails]:
        self._validate_currency(currency)
        return await self.cache.get_or_compute(
            CacheNamespace.DAILY, currency, lambda: self._daily_dynamics(currency)
        )

    async def _latest_rate(self, currency: Currency) -> ExchangeRate:
        logger.debug(f"Fetching the latest exchange rate for currency: {currency.value}...")
        latest_rate = await self.repository.latest(currency)
        if latest_rate is None:
            raise CurrencyDataNotFoundError(currency.value)
        logger.info(f"Fetched the latest exchange rate for currency: {currency.value}. Rate: {latest_rate}")
        return latest_rate

    async def _hourly_dynamics(self, currency: Currency) -> DynamicDetails:
        logger.debug(f"Calculating hourly dynamics for currency: {currency.value}")
        latest_rate = await self._latest_rate(currency)

        window_start = latest_rate.timestamp - timedelta(minutes=self.calculator.max_minutes_difference)
        window_end = latest_rate.timestamp - timedelta(minutes=1)
        old_rate = await self.repository.latest_in_range(currency, window_start, window_end)
        if old_rate is None:
            raise CurrencyDataNotFoundError(f"For the last hour for currency {currency.value}")

        details = self.calculator.dynamic_details(currency, old_rate, latest_rate)
        logger.info(f"Calculated hourly dynamics for currency: {currency.value}. Dynamics: {details}")
        return details

    async def _daily_dynamics(self, currency: Currency) -> list[DynamicDetails]:
        logger.debug(f"Fetching daily rate changes for currency: {currency.value}")
        start_of_day = datetime.combine(self.clock.today(), time.min)
        next_start_of_day = start_of_day + timedelta(days=1)

        rates = await self.repository.all_in_range(currency, start_of_day, next_start_of_day)
        if not rates:
            raise CurrencyDataNotFoundError(f"No data for currency {currency.value} for today")

        daily_dynamics = self.calculator.daily_dynamics(currency, rates)
        logger.info(
            f"Calculated daily dynamics for currency: {currency.value}. "
            f"{len(daily_dynamics)} changes from {len(rates)} rates"
        )
        return daily_dynamics

    @staticmethod
    def _validate_currency(currency: Currency) -> None:
        if currency not in QUERYABLE_CURRENCIES:
            allowed = ", ".join(c.value for c in QUERYABLE_CURRENCIES)
            raise InvalidCurrencyError(f"Invalid currency. Allowed values: {allowed}")
