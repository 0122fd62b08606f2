from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./bank_rates.db'

	REDIS_URL: str = 'redis://localhost:6379'
	CACHE_BACKEND: str = 'redis'
	CACHE_TTL_SECONDS: int = 3600

	# Refresh cycle
	REFRESH_INTERVAL_SECONDS: int = 3600
	REFRESH_ON_STARTUP: bool = True
	MAX_MINUTES_DIFFERENCE_BETWEEN_RATES: int = 70

	# Bank APIs
	PRIVAT_API_URL: str = 'https://api.privatbank.ua/p24api/pubinfo?exchange&coursid=5'
	MONO_API_URL: str = 'https://api.monobank.ua/bank/currency'
	HTTP_TIMEOUT_SECONDS: int = 10
	HTTP_RETRY_ATTEMPTS: int = 3

	# Telegram
	TELEGRAM_BOT_TOKEN: str = ''
	TELEGRAM_BOT_NAME: str = ''
	TELEGRAM_POLL_TIMEOUT: int = 30
	NOTIFICATION_QUEUE_SIZE: int = 100

	# Application
	APP_NAME: str = 'Bank Rates API'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_DIRECTORY: str | None = None

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
