import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from domain.exceptions.currency import PersistenceError
from domain.models.currency import Currency, ExchangeRate
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import ExchangeRateDB

logger = logging.getLogger(__name__)


class ExchangeRateRepository:
	"""Append-only time series of averaged rates."""

	def __init__(self, database: Database):
		self.database = database

	async def append_all(self, rates: list[ExchangeRate]) -> None:
		"""Store a batch of rates in a single transaction (all or nothing)."""
		try:
			async with self.database.session() as session:
				session.add_all(
					[
						ExchangeRateDB(
							currency=rate.currency,
							rate_buy=rate.rate_buy,
							rate_sell=rate.rate_sell,
							timestamp=rate.timestamp,
						)
						for rate in rates
					]
				)
		except SQLAlchemyError as e:
			raise PersistenceError(f'Failed to save {len(rates)} exchange rates: {e}') from e

	async def latest(self, currency: Currency) -> ExchangeRate | None:
		stmt = (
			select(ExchangeRateDB)
			.filter(ExchangeRateDB.currency == currency)
			.order_by(ExchangeRateDB.timestamp.desc())
			.limit(1)
		)
		return await self._first(stmt)

	async def latest_in_range(
		self, currency: Currency, start: datetime, end: datetime
	) -> ExchangeRate | None:
		"""Newest rate with ``start <= timestamp <= end``."""
		stmt = (
			select(ExchangeRateDB)
			.filter(
				ExchangeRateDB.currency == currency,
				ExchangeRateDB.timestamp >= start,
				ExchangeRateDB.timestamp <= end,
			)
			.order_by(ExchangeRateDB.timestamp.desc())
			.limit(1)
		)
		return await self._first(stmt)

	async def all_in_range(
		self, currency: Currency, start: datetime, end: datetime
	) -> list[ExchangeRate]:
		"""Rates with ``start <= timestamp < end``, newest first."""
		stmt = (
			select(ExchangeRateDB)
			.filter(
				ExchangeRateDB.currency == currency,
				ExchangeRateDB.timestamp >= start,
				ExchangeRateDB.timestamp < end,
			)
			.order_by(ExchangeRateDB.timestamp.desc())
		)
		async with self.database.reader() as session:
			result = await session.execute(stmt)
			return [self._to_domain(row) for row in result.scalars().all()]

	async def _first(self, stmt) -> ExchangeRate | None:
		async with self.database.reader() as session:
			result = await session.execute(stmt)
			row = result.scalars().first()
			return self._to_domain(row) if row else None

	@staticmethod
	def _to_domain(row: ExchangeRateDB) -> ExchangeRate:
		return ExchangeRate(
			currency=row.currency,
			rate_buy=row.rate_buy,
			rate_sell=row.rate_sell,
			timestamp=row.timestamp,
		)
