import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

logger = logging.getLogger(__name__)


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    UAH = "UAH"

    @property
    def numeric_code(self) -> int:
        return _NUMERIC_CODES[self]

    @classmethod
    def from_numeric_code(cls, code: int | None) -> "Currency | None":
        """Resolve an ISO 4217 numeric code (840 -> USD), or None if unknown."""
        for currency, numeric in _NUMERIC_CODES.items():
            if numeric == code:
                return currency
        logger.debug(f"No currency found for code: {code}")
        return None

    @classmethod
    def from_code(cls, code: str | None) -> "Currency | None":
        """Resolve a three-letter code (case-insensitive), or None if unknown."""
        if not code:
            return None
        try:
            return cls(code.strip().upper())
        except ValueError:
            logger.debug(f"No currency found for code: {code}")
            return None


_NUMERIC_CODES: dict[Currency, int] = {
    Currency.USD: 840,
    Currency.EUR: 978,
    Currency.UAH: 980,
}

# UAH is only ever the counter-currency of a quote
QUERYABLE_CURRENCIES: tuple[Currency, ...] = (Currency.USD, Currency.EUR)


@dataclass(frozen=True)
class RateQuote:
    """One source's normalized buy/sell quote, before it gets a timestamp."""

    currency: Currency
    rate_buy: Decimal
    rate_sell: Decimal
    source: str


@dataclass(frozen=True)
class ExchangeRate:
    currency: Currency
    rate_buy: Decimal
    rate_sell: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class DynamicDetails:
    currency: Currency
    percentage_change_buy: Decimal
    old_rate_timestamp: datetime
    percentage_change_sell: Decimal
    new_rate_timestamp: datetime
