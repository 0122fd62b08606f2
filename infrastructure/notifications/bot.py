import asyncio
import logging

from application.services.recipients import RecipientService
from domain.exceptions.currency import NotificationDeliveryError, TelegramApiError
from infrastructure.notifications.telegram import TelegramBotClient

logger = logging.getLogger(__name__)

START_COMMAND = "/start"

GREETING_TEXT = (
    "Привіт, {username}!\n"
    "В цьому боті ти будеш отримувати повідомлення про актуальний курс валют"
)
UNKNOWN_COMMAND_TEXT = "Ця команда не розпізнана!"


class ExchangeRatesBot:
    """
    Long-polling Telegram bot.

    Anyone who writes to the bot is registered as a notification recipient.
    """

    def __init__(
        self,
        client: TelegramBotClient,
        recipient_service: RecipientService,
        poll_timeout: int = 30,
        retry_delay: float = 5.0,
    ):
        self.client = client
        self.recipient_service = recipient_service
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.is_running = False
        self._offset: int | None = None

    async def handle_update(self, update: dict) -> None:
        message = update.get("message") or {}
        text = message.get("text")
        if not text:
            return

        chat_id = message["chat"]["id"]
        username = (
            message["chat"].get("username")
            or (message.get("from") or {}).get("username")
            or str(chat_id)
        )
        logger.info(f"Received message from user: {username} with chat ID: {chat_id}. Message: {text}")

        await self.recipient_service.save_chat_id(chat_id, username)

        if text.strip() == START_COMMAND:
            await self._reply(chat_id, GREETING_TEXT.format(username=username))
        else:
            await self._reply(chat_id, UNKNOWN_COMMAND_TEXT)

    async def poll_once(self) -> int:
        updates = await self.client.get_updates(offset=self._offset, timeout=self.poll_timeout)
        for update in updates:
            self._offset = update["update_id"] + 1
            await self.handle_update(update)
        return len(updates)

    async def run(self) -> None:
        self.is_running = True
        logger.info("Telegram bot polling started")
        while self.is_running:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                logger.info("Telegram bot received cancellation signal")
                break
            except TelegramApiError as e:
                logger.error(f"Telegram polling failed: {e}")
                await asyncio.sleep(self.retry_delay)
            except Exception as e:
                logger.error(f"Unexpected error while polling Telegram: {e}", exc_info=True)
                await asyncio.sleep(self.retry_delay)
        logger.info("Telegram bot polling stopped")

    def stop(self) -> None:
        self.is_running = False

    async def _reply(self, chat_id: int, text: str) -> None:
        try:
            await self.client.send_message(chat_id, text)
        except NotificationDeliveryError as e:
            logger.error(f"Couldn't send message in telegram: {e}")
