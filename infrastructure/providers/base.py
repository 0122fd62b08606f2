import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx
from pydantic import ValidationError

from domain.exceptions.currency import SourceFetchError
from domain.models.currency import Currency, RateQuote
from infrastructure.http import fetch_json

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of one provider fetch: normalized quotes or the error that stopped it"""
    source: str
    quotes: list[RateQuote] = field(default_factory=list)
    error: SourceFetchError | None = None
    response_time_ms: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BankRateProvider(ABC):
    """A base class for bank rate providers, handling common HTTP logic."""

    def __init__(
        self,
        api_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: int = 10,
        retry_attempts: int = 3,
    ):
        self.api_url = api_url
        self.retry_attempts = retry_attempts
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"accept": "application/json"},
        )

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def parse(self, payload: Any) -> list[Any]:
        """Validate the provider payload into its raw quote models"""
        ...

    @abstractmethod
    def to_quote(self, raw: Any) -> RateQuote | None:
        """Map one raw quote to a RateQuote, or None if it is not a known {X, UAH} pair"""
        ...

    async def fetch(self) -> FetchResult:
        """Fetch and normalize this provider's rates. Never raises."""
        start_time = datetime.now()
        logger.info(f"Starting to fetch currency rates from {self.name}: {self.api_url}")
        try:
            payload = await self._request()
            quotes = self.normalize(self.parse(payload))
        except SourceFetchError as e:
            logger.error(
                f"Error occurred while fetching currency rates from {self.name}: {e}", extra={"source": self.name}
            )
            return FetchResult(source=self.name, error=e, response_time_ms=self._elapsed_ms(start_time))
        except ValidationError as e:
            error = SourceFetchError(self.name, f"unexpected payload: {e.error_count()} validation errors")
            logger.error(
                f"Error occurred while parsing currency rates from {self.name}: {error}", extra={"source": self.name}
            )
            return FetchResult(source=self.name, error=error, response_time_ms=self._elapsed_ms(start_time))

        logger.info(f"Finished fetching currency rates from {self.name}: {len(quotes)} usable quotes")
        return FetchResult(source=self.name, quotes=quotes, response_time_ms=self._elapsed_ms(start_time))

    def normalize(self, raw_quotes: list[Any]) -> list[RateQuote]:
        quotes = []
        for raw in raw_quotes:
            quote = self.to_quote(raw)
            if quote is None or quote.currency is Currency.UAH:
                continue
            quotes.append(quote)
        logger.debug(f"{self.name}: kept {len(quotes)} of {len(raw_quotes)} quotes")
        return quotes

    async def _request(self) -> Any:
        try:
            return await fetch_json(self._client, self.api_url, attempts=self.retry_attempts)
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(
                self.name, f"HTTP error {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise SourceFetchError(self.name, f"Request failed: {e.__class__.__name__}") from e
        except ValueError as e:
            raise SourceFetchError(self.name, f"Response parsing error: {str(e)}") from e

    @staticmethod
    def _elapsed_ms(start_time: datetime) -> int:
        return int((datetime.now() - start_time).total_seconds() * 1000)

    @staticmethod
    def _build_quote(
        currency: Currency | None, buy: Decimal | None, sell: Decimal | None, source: str
    ) -> RateQuote | None:
        if currency is None or buy is None or sell is None:
            return None
        return RateQuote(currency=currency, rate_buy=buy, rate_sell=sell, source=source)

    def __repr__(self):
        return f"<{self.__class__.__name__}(name={self.name})>"
