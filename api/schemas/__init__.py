from .responses import DynamicDetailsResponse, ErrorResponse, ExchangeRateResponse

__all__ = [
	'DynamicDetailsResponse',
	'ErrorResponse',
	'ExchangeRateResponse',
]
