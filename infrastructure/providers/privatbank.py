from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from domain.models.currency import Currency, RateQuote

from .base import BankRateProvider


class PrivatRawQuote(BaseModel):
    """One entry of the PrivatBank cash/non-cash exchange endpoint; rates come as strings"""
    ccy: str
    base_ccy: str
    buy: Decimal | None = Field(default=None, ge=0)
    sale: Decimal | None = Field(default=None, ge=0)

    @property
    def currency(self) -> Currency | None:
        if Currency.from_code(self.base_ccy) is Currency.UAH:
            return Currency.from_code(self.ccy)
        return None


_quotes_adapter = TypeAdapter(list[PrivatRawQuote])


class PrivatBankProvider(BankRateProvider):
    @property
    def name(self) -> str:
        return "privatbank"

    def parse(self, payload: Any) -> list[PrivatRawQuote]:
        return _quotes_adapter.validate_python(payload)

    def to_quote(self, raw: PrivatRawQuote) -> RateQuote | None:
        return self._build_quote(raw.currency, raw.buy, raw.sale, self.name)
