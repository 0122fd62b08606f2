import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.dependencies import cleanup_dependencies, deps, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import exchange_rate
from config.logger import setup_logging
from config.settings import get_settings

logger = logging.getLogger(__name__)


settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
	setup_logging(level=settings.LOG_LEVEL, log_directory=settings.LOG_DIRECTORY)
	logger.info(f'Starting {settings.APP_NAME}...')

	init_dependencies(settings)

	if deps.db is None or deps.scheduler is None:
		raise RuntimeError('Dependencies not initialized')
	await deps.db.create_tables()
	logger.info('Database tables created')

	background: list[asyncio.Task] = []
	if deps.dispatcher:
		deps.dispatcher.start()
	if deps.bot:
		background.append(asyncio.create_task(deps.bot.run(), name='telegram-bot'))
	background.append(asyncio.create_task(deps.scheduler.run(), name='refresh-scheduler'))

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	for task in background:
		task.cancel()
	for task in background:
		with contextlib.suppress(asyncio.CancelledError):
			await task
	await cleanup_dependencies()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
	logger.error(f'Unhandled exception: {exc}', exc_info=True)
	return JSONResponse(status_code=500, content={'code': 1, 'message': 'Internal server error'})


app.include_router(exchange_rate.router)
register_exception_handlers(app)
