# nosec B101


import asyncio
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from application.services.notifications import NotificationDispatcher, format_rates_message
from application.services.recipients import RecipientService
from domain.exceptions.currency import NotificationDeliveryError
from domain.models.currency import Currency, ExchangeRate
from domain.models.recipient import Recipient
from infrastructure.notifications.telegram import TelegramBotClient

RATES = [
    ExchangeRate(Currency.USD, Decimal('36.75'), Decimal('36.85'), datetime(2025, 9, 27, 12, 0)),
    ExchangeRate(Currency.EUR, Decimal('39.10'), Decimal('39.90'), datetime(2025, 9, 27, 12, 0)),
]


@pytest.fixture
def bot_client():
    return AsyncMock(spec=TelegramBotClient)


@pytest.fixture
def recipient_service():
    service = AsyncMock(spec=RecipientService)
    service.get_recipients.return_value = [Recipient(1, 'alice'), Recipient(2, 'bob'), Recipient(3, 'carol')]
    return service


@pytest.fixture
def dispatcher(bot_client, recipient_service):
    return NotificationDispatcher(bot_client, recipient_service, max_queue_size=2)


def test_format_rates_message():
    text = format_rates_message(RATES)

    assert text == (
        'Оновлені курси валют:\n'
        'USD \n Покупка: 36.75, Продаж: 36.85\n'
        'EUR \n Покупка: 39.10, Продаж: 39.90\n'
    )


@pytest.mark.asyncio
async def test_deliver_sends_to_every_recipient(dispatcher, bot_client):
    delivered = await dispatcher.deliver(RATES)

    assert delivered == 3
    assert [c.args[0] for c in bot_client.send_message.await_args_list] == [1, 2, 3]
    assert bot_client.send_message.await_args_list[0].args[1] == format_rates_message(RATES)


@pytest.mark.asyncio
async def test_one_failed_recipient_does_not_stop_others(dispatcher, bot_client):
    bot_client.send_message.side_effect = [None, NotificationDeliveryError(2, 'Forbidden'), None]

    delivered = await dispatcher.deliver(RATES)

    assert delivered == 2
    assert bot_client.send_message.await_count == 3


@pytest.mark.asyncio
async def test_submit_drops_when_queue_is_full(dispatcher):
    assert dispatcher.submit(RATES)
    assert dispatcher.submit(RATES)
    assert not dispatcher.submit(RATES)
    assert dispatcher.pending == 2


@pytest.mark.asyncio
async def test_worker_delivers_submitted_batches(dispatcher, bot_client):
    dispatcher.start()
    dispatcher.submit(RATES)
    dispatcher.submit(RATES[:1])

    await asyncio.wait_for(dispatcher.drain(), timeout=1)

    assert bot_client.send_message.await_count == 6
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_worker_survives_failing_batch(dispatcher, bot_client, recipient_service):
    recipient_service.get_recipients.side_effect = [RuntimeError('db gone'), [Recipient(1, 'alice')]]
    dispatcher.start()
    dispatcher.submit(RATES)
    dispatcher.submit(RATES)

    await asyncio.wait_for(dispatcher.drain(), timeout=1)

    bot_client.send_message.assert_awaited_once()
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_stop_with_drain_delivers_pending(dispatcher, bot_client):
    dispatcher.start()
    dispatcher.submit(RATES)

    await asyncio.wait_for(dispatcher.stop(drain=True), timeout=1)

    assert bot_client.send_message.await_count == 3
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_stop_without_drain_leaves_queue(dispatcher, bot_client):
    dispatcher.submit(RATES)
    dispatcher.start()

    await dispatcher.stop(drain=False)

    bot_client.send_message.assert_not_awaited()
