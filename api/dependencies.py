import logging
from datetime import timedelta

import httpx
from redis.asyncio import Redis

from application.clock import Clock
from application.services import (
	DynamicsCalculator,
	ExchangeRateService,
	NotificationDispatcher,
	RateAggregator,
	RecipientService,
	RefreshCoordinator,
	RefreshScheduler,
)
from config.settings import Settings, get_settings
from infrastructure.cache.base import InMemoryResultCache, ResultCache
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.notifications.bot import ExchangeRatesBot
from infrastructure.notifications.telegram import TelegramBotClient
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.exchange_rate import ExchangeRateRepository
from infrastructure.persistence.repositories.recipient import RecipientRepository
from infrastructure.providers import BankRateProvider, build_providers

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	http_client: httpx.AsyncClient | None = None
	redis_client: Redis | None = None
	cache: ResultCache | None = None
	providers: list[BankRateProvider] | None = None
	exchange_rate_service: ExchangeRateService | None = None
	recipient_service: RecipientService | None = None
	telegram_client: TelegramBotClient | None = None
	bot: ExchangeRatesBot | None = None
	dispatcher: NotificationDispatcher | None = None
	coordinator: RefreshCoordinator | None = None
	scheduler: RefreshScheduler | None = None


deps = AppDependencies()


def build_cache(settings: Settings) -> ResultCache:
	if settings.CACHE_BACKEND == 'memory':
		logger.info('Using in-memory result cache')
		return InMemoryResultCache()

	deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
	return RedisCacheService(deps.redis_client, ttl=timedelta(seconds=settings.CACHE_TTL_SECONDS))


def init_dependencies(settings: Settings | None = None) -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = settings or get_settings()
	clock = Clock()

	deps.db = Database(settings.DATABASE_URL, echo=settings.DEBUG)
	deps.cache = build_cache(settings)
	deps.http_client = httpx.AsyncClient(
		timeout=settings.HTTP_TIMEOUT_SECONDS, headers={'Accept': 'application/json'}
	)
	deps.providers = build_providers(settings, client=deps.http_client)

	rate_repository = ExchangeRateRepository(deps.db)
	deps.recipient_service = RecipientService(RecipientRepository(deps.db))
	calculator = DynamicsCalculator(settings.MAX_MINUTES_DIFFERENCE_BETWEEN_RATES)
	deps.exchange_rate_service = ExchangeRateService(rate_repository, calculator, deps.cache, clock)

	if settings.TELEGRAM_BOT_TOKEN:
		deps.telegram_client = TelegramBotClient(
			settings.TELEGRAM_BOT_TOKEN, client=deps.http_client, timeout=settings.HTTP_TIMEOUT_SECONDS
		)
		logger.info(f'Telegram bot {settings.TELEGRAM_BOT_NAME or "(unnamed)"} enabled')
		deps.bot = ExchangeRatesBot(
			deps.telegram_client, deps.recipient_service, poll_timeout=settings.TELEGRAM_POLL_TIMEOUT
		)
		deps.dispatcher = NotificationDispatcher(
			deps.telegram_client, deps.recipient_service, max_queue_size=settings.NOTIFICATION_QUEUE_SIZE
		)
	else:
		logger.warning('TELEGRAM_BOT_TOKEN is not set, Telegram notifications are disabled')

	deps.coordinator = RefreshCoordinator(
		providers=deps.providers,
		aggregator=RateAggregator(),
		repository=rate_repository,
		cache=deps.cache,
		notifier=deps.dispatcher,
		clock=clock,
	)
	deps.scheduler = RefreshScheduler(
		deps.coordinator,
		interval_seconds=settings.REFRESH_INTERVAL_SECONDS,
		run_on_start=settings.REFRESH_ON_STARTUP,
	)
	logger.info('Dependencies initialized')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.scheduler:
		await deps.scheduler.stop()
	if deps.bot:
		deps.bot.stop()
	if deps.dispatcher:
		await deps.dispatcher.stop(drain=False)
	if deps.http_client:
		await deps.http_client.aclose()
	if deps.redis_client:
		await deps.redis_client.aclose()
	if deps.db:
		await deps.db.close()

	logger.info('Cleanup complete')


def get_exchange_rate_service() -> ExchangeRateService:
	if deps.exchange_rate_service is None:
		raise RuntimeError('Exchange rate service not initialized')
	return deps.exchange_rate_service
