import logging
from collections import defaultdict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from domain.models.currency import Currency, ExchangeRate, RateQuote

logger = logging.getLogger(__name__)

RATE_PLACES = Decimal("0.01")


class RateAggregator:
    """Merges the quotes of every source into one averaged rate per currency."""

    def aggregate(self, quotes: list[RateQuote], timestamp: datetime) -> dict[Currency, ExchangeRate]:
        grouped: dict[Currency, list[RateQuote]] = defaultdict(list)
        for quote in quotes:
            grouped[quote.currency].append(quote)

        averaged: dict[Currency, ExchangeRate] = {}
        # Iterate in enum order so the result never depends on input order
        for currency in Currency:
            group = grouped.get(currency)
            if not group:
                continue

            averaged[currency] = ExchangeRate(
                currency=currency,
                rate_buy=self._average([q.rate_buy for q in group]),
                rate_sell=self._average([q.rate_sell for q in group]),
                timestamp=timestamp,
            )
            logger.debug(
                f"Averaged {currency.value} over {len(group)} quotes from "
                f"{sorted({q.source for q in group})}: {averaged[currency]}"
            )

        return averaged

    @staticmethod
    def _average(values: list[Decimal]) -> Decimal:
        return (sum(values, Decimal(0)) / len(values)).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)
