# nosec B101


from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from config.settings import Settings
from domain.models.currency import Currency
from infrastructure.providers import build_providers
from infrastructure.providers.privatbank import PrivatBankProvider, PrivatRawQuote

PRIVAT_URL = 'https://api.privatbank.ua/p24api/pubinfo?exchange&coursid=5'

PRIVAT_PAYLOAD = [
    {'ccy': 'EUR', 'base_ccy': 'UAH', 'buy': '45.70000', 'sale': '46.72000'},
    {'ccy': 'USD', 'base_ccy': 'UAH', 'buy': '41.05000', 'sale': '41.60000'},
    {'ccy': 'BTC', 'base_ccy': 'USD', 'buy': '62000.0', 'sale': '63000.0'},
    {'ccy': 'PLN', 'base_ccy': 'UAH', 'buy': '10.50000', 'sale': '10.90000'},
]


@pytest.fixture
def mock_client():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_response = Mock()
    mock_response.json.return_value = PRIVAT_PAYLOAD
    mock_response.raise_for_status = Mock()
    mock_client.get.return_value = mock_response
    return mock_client


@pytest.mark.asyncio
async def test_fetch_parses_string_rates(mock_client):
    provider = PrivatBankProvider(PRIVAT_URL, client=mock_client, retry_attempts=1)

    result = await provider.fetch()

    assert result.ok
    assert result.source == 'privatbank'
    assert {q.currency: (q.rate_buy, q.rate_sell) for q in result.quotes} == {
        Currency.EUR: (Decimal('45.70000'), Decimal('46.72000')),
        Currency.USD: (Decimal('41.05000'), Decimal('41.60000')),
    }
    assert result.response_time_ms is not None
    mock_client.get.assert_called_once_with(PRIVAT_URL)


def test_quote_against_other_base_is_ignored():
    raw = PrivatRawQuote(ccy='BTC', base_ccy='USD', buy=Decimal('1'), sale=Decimal('2'))

    assert raw.currency is None


def test_uah_quote_is_never_an_instrument():
    provider = PrivatBankProvider(PRIVAT_URL, client=AsyncMock(spec=httpx.AsyncClient))
    raw = PrivatRawQuote(ccy='UAH', base_ccy='UAH', buy=Decimal('1'), sale=Decimal('1'))

    assert provider.normalize([raw]) == []


def test_missing_sale_rate_drops_quote():
    provider = PrivatBankProvider(PRIVAT_URL, client=AsyncMock(spec=httpx.AsyncClient))
    raw = PrivatRawQuote(ccy='USD', base_ccy='UAH', buy=Decimal('41.05'))

    assert provider.normalize([raw]) == []


@pytest.mark.asyncio
async def test_invalid_json_is_reported(mock_client):
    mock_client.get.return_value.json.side_effect = ValueError('Expecting value')
    provider = PrivatBankProvider(PRIVAT_URL, client=mock_client, retry_attempts=1)

    result = await provider.fetch()

    assert not result.ok
    assert 'Response parsing error' in str(result.error)



@pytest.mark.asyncio
async def test_negative_rate_is_rejected_as_unexpected_payload(mock_client):
    mock_client.get.return_value.json.return_value = [
        {'ccy': 'USD', 'base_ccy': 'UAH', 'buy': '41.05000', 'sale': '-41.60000'},
    ]
    provider = PrivatBankProvider(PRIVAT_URL, client=mock_client, retry_attempts=1)

    result = await provider.fetch()

    assert not result.ok
    assert result.error.source == 'privatbank'
    assert 'unexpected payload' in str(result.error)


def test_build_providers_uses_configured_urls():
    settings = Settings(_env_file=None, PRIVAT_API_URL='http://privat.test/rates', MONO_API_URL='http://mono.test/rates')

    providers = build_providers(settings, client=AsyncMock(spec=httpx.AsyncClient))

    assert [(p.name, p.api_url) for p in providers] == [
        ('privatbank', 'http://privat.test/rates'),
        ('monobank', 'http://mono.test/rates'),
    ]
