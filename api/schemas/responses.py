from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from domain.models.currency import DynamicDetails, ExchangeRate

DECIMAL_PLACES = Decimal('0.000001')


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExchangeRateResponse(CamelModel):
	currency: str = Field(..., description='Currency code')
	rate_buy: Decimal = Field(..., description='Averaged bank buy rate in UAH')
	rate_sell: Decimal = Field(..., description='Averaged bank sell rate in UAH')
	timestamp: datetime = Field(..., description='When the rate was recorded')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'currency': 'USD',
				'rateBuy': '36.750000',
				'rateSell': '36.850000',
				'timestamp': '2025-09-27T10:30:00',
			}
		}
	)

	@field_serializer('rate_buy', 'rate_sell')
	def serialize_rate(self, value: Decimal) -> str:
		return str(value.quantize(DECIMAL_PLACES))

	@classmethod
	def from_domain(cls, rate: ExchangeRate) -> 'ExchangeRateResponse':
		return cls(
			currency=rate.currency.value,
			rate_buy=rate.rate_buy,
			rate_sell=rate.rate_sell,
			timestamp=rate.timestamp,
		)


class DynamicDetailsResponse(CamelModel):
	currency: str = Field(..., description='Currency code')
	percentage_change_buy: Decimal = Field(..., description='Buy rate change, percent')
	old_rate_timestamp: datetime = Field(..., description='Timestamp of the older rate')
	percentage_change_sell: Decimal = Field(..., description='Sell rate change, percent')
	new_rate_timestamp: datetime = Field(..., description='Timestamp of the newer rate')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'currency': 'USD',
				'percentageChangeBuy': '1.369900',
				'oldRateTimestamp': '2025-09-27T11:00:00',
				'percentageChangeSell': '1.366100',
				'newRateTimestamp': '2025-09-27T12:00:00',
			}
		}
	)

	@field_serializer('percentage_change_buy', 'percentage_change_sell')
	def serialize_change(self, value: Decimal) -> str:
		return str(value.quantize(DECIMAL_PLACES))

	@classmethod
	def from_domain(cls, details: DynamicDetails) -> 'DynamicDetailsResponse':
		return cls(
			currency=details.currency.value,
			percentage_change_buy=details.percentage_change_buy,
			old_rate_timestamp=details.old_rate_timestamp,
			percentage_change_sell=details.percentage_change_sell,
			new_rate_timestamp=details.new_rate_timestamp,
		)


class ErrorResponse(BaseModel):
	code: int = Field(1, description='Application error code')
	message: str = Field(..., description='Human readable error message')
