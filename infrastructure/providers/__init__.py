import httpx

from config.settings import Settings

from .base import BankRateProvider, FetchResult
from .monobank import MonoBankProvider
from .privatbank import PrivatBankProvider

__all__ = [
    'BankRateProvider',
    'FetchResult',
    'MonoBankProvider',
    'PrivatBankProvider',
    'build_providers',
]


def build_providers(settings: Settings, client: httpx.AsyncClient | None = None) -> list[BankRateProvider]:
    """The closed set of bank adapters the refresh cycle polls."""
    options = {
        'client': client,
        'timeout': settings.HTTP_TIMEOUT_SECONDS,
        'retry_attempts': settings.HTTP_RETRY_ATTEMPTS,
    }
    return [
        PrivatBankProvider(settings.PRIVAT_API_URL, **options),
        MonoBankProvider(settings.MONO_API_URL, **options),
    ]
