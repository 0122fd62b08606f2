from .aggregator import RateAggregator
from .dynamics import DynamicsCalculator, percentage_change
from .exchange_rate_service import ExchangeRateService
from .notifications import NotificationDispatcher, format_rates_message
from .recipients import RecipientService
from .refresh import RefreshCoordinator, RefreshOutcome, RefreshState
from .scheduler import RefreshScheduler

__all__ = [
    'DynamicsCalculator',
    'ExchangeRateService',
    'NotificationDispatcher',
    'RateAggregator',
    'RecipientService',
    'RefreshCoordinator',
    'RefreshOutcome',
    'RefreshScheduler',
    'RefreshState',
    'format_rates_message',
    'percentage_change',
]
