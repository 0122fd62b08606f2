from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from domain.models.currency import Currency, RateQuote

from .base import BankRateProvider


class MonoRawQuote(BaseModel):
    """One entry of https://api.monobank.ua/bank/currency"""
    model_config = ConfigDict(populate_by_name=True)

    currency_code_a: int = Field(alias="currencyCodeA")
    currency_code_b: int = Field(alias="currencyCodeB")
    date: int | None = None
    rate_buy: Decimal | None = Field(default=None, ge=0, alias="rateBuy")
    rate_sell: Decimal | None = Field(default=None, ge=0, alias="rateSell")
    rate_cross: Decimal | None = Field(default=None, ge=0, alias="rateCross")

    @property
    def currency(self) -> Currency | None:
        # Only X/UAH pairs are quoted against the hryvnia
        if Currency.from_numeric_code(self.currency_code_b) is Currency.UAH:
            return Currency.from_numeric_code(self.currency_code_a)
        return None


_quotes_adapter = TypeAdapter(list[MonoRawQuote])


class MonoBankProvider(BankRateProvider):
    @property
    def name(self) -> str:
        return "monobank"

    def parse(self, payload: Any) -> list[MonoRawQuote]:
        return _quotes_adapter.validate_python(payload)

    def to_quote(self, raw: MonoRawQuote) -> RateQuote | None:
        return self._build_quote(raw.currency, raw.rate_buy, raw.rate_sell, self.name)
