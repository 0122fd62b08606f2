# nosec B101


import asyncio
import contextlib
from unittest.mock import AsyncMock

import pytest

from application.services.recipients import RecipientService
from domain.exceptions.currency import NotificationDeliveryError, TelegramApiError
from infrastructure.notifications.bot import GREETING_TEXT, UNKNOWN_COMMAND_TEXT, ExchangeRatesBot
from infrastructure.notifications.telegram import TelegramBotClient


def make_update(update_id: int, text: str, chat_id: int = 42, username: str | None = 'alice') -> dict:
    chat = {'id': chat_id, 'type': 'private'}
    if username:
        chat['username'] = username
    return {'update_id': update_id, 'message': {'message_id': 1, 'chat': chat, 'text': text}}


@pytest.fixture
def client():
    return AsyncMock(spec=TelegramBotClient)


@pytest.fixture
def recipient_service():
    return AsyncMock(spec=RecipientService)


@pytest.fixture
def bot(client, recipient_service):
    return ExchangeRatesBot(client, recipient_service, poll_timeout=1, retry_delay=0)


@pytest.mark.asyncio
async def test_start_command_registers_and_greets(bot, client, recipient_service):
    await bot.handle_update(make_update(1, '/start'))

    recipient_service.save_chat_id.assert_awaited_once_with(42, 'alice')
    client.send_message.assert_awaited_once_with(
        42, 'Привіт, alice!\nВ цьому боті ти будеш отримувати повідомлення про актуальний курс валют'
    )
    assert GREETING_TEXT.format(username='alice') == client.send_message.await_args.args[1]


@pytest.mark.asyncio
async def test_other_text_registers_and_replies_unknown(bot, client, recipient_service):
    await bot.handle_update(make_update(1, 'hello'))

    recipient_service.save_chat_id.assert_awaited_once_with(42, 'alice')
    client.send_message.assert_awaited_once_with(42, UNKNOWN_COMMAND_TEXT)


@pytest.mark.asyncio
async def test_chat_without_username_uses_chat_id(bot, recipient_service):
    await bot.handle_update(make_update(1, '/start', chat_id=7, username=None))

    recipient_service.save_chat_id.assert_awaited_once_with(7, '7')


@pytest.mark.asyncio
async def test_update_without_text_is_ignored(bot, client, recipient_service):
    await bot.handle_update({'update_id': 1, 'edited_message': {'chat': {'id': 42}}})

    recipient_service.save_chat_id.assert_not_awaited()
    client.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_reply_is_not_raised(bot, client):
    client.send_message.side_effect = NotificationDeliveryError(42, 'Forbidden')

    await bot.handle_update(make_update(1, '/start'))


@pytest.mark.asyncio
async def test_poll_once_advances_offset(bot, client):
    client.get_updates.side_effect = [[make_update(5, '/start'), make_update(6, 'hi')], []]

    assert await bot.poll_once() == 2
    assert await bot.poll_once() == 0

    assert client.get_updates.await_args_list[0].kwargs == {'offset': None, 'timeout': 1}
    assert client.get_updates.await_args_list[1].kwargs == {'offset': 7, 'timeout': 1}


@pytest.mark.asyncio
async def test_run_survives_api_errors_until_cancelled(bot, client):
    polled = asyncio.Event()

    async def get_updates(offset=None, timeout=30):
        if client.get_updates.await_count >= 3:
            polled.set()
        raise TelegramApiError('Bad Gateway')

    client.get_updates.side_effect = get_updates

    task = asyncio.create_task(bot.run())
    await asyncio.wait_for(polled.wait(), timeout=1)
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task

    assert client.get_updates.await_count >= 3


@pytest.mark.asyncio
async def test_run_survives_malformed_updates_until_cancelled(bot, client):
    polled = asyncio.Event()

    async def get_updates(offset=None, timeout=30):
        if client.get_updates.await_count >= 3:
            polled.set()
        return [{'message': {'chat': {'id': 42}, 'text': '/start'}}]

    client.get_updates.side_effect = get_updates

    task = asyncio.create_task(bot.run())
    await asyncio.wait_for(polled.wait(), timeout=1)
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task

    assert client.get_updates.await_count >= 3
    client.send_message.assert_not_awaited()
