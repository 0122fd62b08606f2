from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_exchange_rate_service
from api.schemas import DynamicDetailsResponse, ErrorResponse, ExchangeRateResponse
from application.services import ExchangeRateService
from domain.exceptions.currency import InvalidCurrencyError
from domain.models.currency import QUERYABLE_CURRENCIES, Currency

router = APIRouter(prefix='/api/exchange-rate', tags=['exchange-rate'])

CurrencyQuery = Annotated[str, Query(min_length=3, max_length=3, description='USD or EUR')]

ERROR_RESPONSES = {
	status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse, 'description': 'Unsupported currency'},
}


def parse_currency(code: str) -> Currency:
	currency = Currency.from_code(code.upper())
	if currency not in QUERYABLE_CURRENCIES:
		allowed = ', '.join(c.value for c in QUERYABLE_CURRENCIES)
		raise InvalidCurrencyError(f'Invalid currency: {code}. Allowed values: {allowed}')
	return currency


@router.get(
	'/latest',
	response_model=ExchangeRateResponse,
	status_code=status.HTTP_200_OK,
	responses=ERROR_RESPONSES,
	summary='Get the latest averaged exchange rate',
)
async def get_latest_exchange_rate(
	currency: CurrencyQuery,
	service: Annotated[ExchangeRateService, Depends(get_exchange_rate_service)],
) -> ExchangeRateResponse:
	rate = await service.get_latest_rate(parse_currency(currency))
	return ExchangeRateResponse.from_domain(rate)


@router.get(
	'/hourly-difference',
	response_model=DynamicDetailsResponse,
	status_code=status.HTTP_200_OK,
	responses=ERROR_RESPONSES,
	summary='Get the rate change over the last hour',
)
async def get_hourly_difference(
	currency: CurrencyQuery,
	service: Annotated[ExchangeRateService, Depends(get_exchange_rate_service)],
) -> DynamicDetailsResponse:
	details = await service.get_hourly_dynamics(parse_currency(currency))
	return DynamicDetailsResponse.from_domain(details)


@router.get(
	'/daily-dynamics',
	response_model=list[DynamicDetailsResponse],
	status_code=status.HTTP_200_OK,
	responses=ERROR_RESPONSES,
	summary='Get rate changes between consecutive snapshots of today',
)
async def get_daily_dynamics(
	currency: CurrencyQuery,
	service: Annotated[ExchangeRateService, Depends(get_exchange_rate_service)],
) -> list[DynamicDetailsResponse]:
	dynamics = await service.get_daily_dynamics(parse_currency(currency))
	return [DynamicDetailsResponse.from_domain(details) for details in dynamics]
