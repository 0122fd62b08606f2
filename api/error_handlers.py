import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.schemas import ErrorResponse
from domain.exceptions.currency import CurrencyDataNotFoundError, InvalidCurrencyError

logger = logging.getLogger(__name__)


def error_body(message: str) -> dict:
	return ErrorResponse(message=message).model_dump()


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(InvalidCurrencyError)
	async def invalid_currency_handler(request: Request, exc: InvalidCurrencyError):
		logger.warning(f'Validation error: {exc}')
		return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(str(exc)))

	@app.exception_handler(RequestValidationError)
	async def request_validation_handler(request: Request, exc: RequestValidationError):
		message = '; '.join(
			f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
		)
		logger.warning(f'Validation error: {message}')
		return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))

	@app.exception_handler(CurrencyDataNotFoundError)
	async def not_found_handler(request: Request, exc: CurrencyDataNotFoundError):
		logger.warning(f'Data not found: {exc}')
		return JSONResponse(status_code=status.HTTP_200_OK, content=error_body(str(exc)))
