import asyncio
import contextlib
import logging

from application.services.recipients import RecipientService
from domain.exceptions.currency import NotificationDeliveryError
from domain.models.currency import ExchangeRate
from infrastructure.notifications.telegram import TelegramBotClient

logger = logging.getLogger(__name__)


def format_rates_message(rates: list[ExchangeRate]) -> str:
    lines = "\n".join(
        f"{rate.currency.value} \n Покупка: {rate.rate_buy}, Продаж: {rate.rate_sell}" for rate in rates
    )
    return f"Оновлені курси валют:\n{lines}\n"


class NotificationDispatcher:
    """
    Fans refreshed rates out to every registered recipient in the background.

    ``submit`` never blocks: batches go onto a bounded queue consumed by one
    worker task, and are dropped with a warning when the queue is full.
    """

    def __init__(
        self,
        bot_client: TelegramBotClient,
        recipient_service: RecipientService,
        max_queue_size: int = 100,
    ):
        self.bot_client = bot_client
        self.recipient_service = recipient_service
        self._queue: asyncio.Queue[list[ExchangeRate]] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, rates: list[ExchangeRate]) -> bool:
        logger.info(f"Starting notification process for {len(rates)} exchange rates.")
        try:
            self._queue.put_nowait(list(rates))
        except asyncio.QueueFull:
            logger.warning(f"Notification queue is full, dropping update with {len(rates)} rates")
            return False
        return True

    async def deliver(self, rates: list[ExchangeRate]) -> int:
        """Send one batch to every recipient; returns how many deliveries succeeded."""
        recipients = await self.recipient_service.get_recipients()
        text = format_rates_message(rates)

        delivered = 0
        for recipient in recipients:
            logger.info(f"Sending currency data to chatId: {recipient.chat_id}")
            try:
                await self.bot_client.send_message(recipient.chat_id, text)
                delivered += 1
            except NotificationDeliveryError as e:
                logger.error(
                    f"Couldn't deliver rates to {recipient.username}: {e}",
                    extra={"chat_id": recipient.chat_id},
                )

        logger.info(f"Delivered rates to {delivered}/{len(recipients)} recipients")
        return delivered

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="notification-dispatcher")

    async def drain(self) -> None:
        await self._queue.join()

    async def stop(self, drain: bool = True) -> None:
        """Stop the worker, optionally after every queued batch has been handled."""
        if self._worker is None:
            return
        if drain:
            await self.drain()
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

    async def _run(self) -> None:
        while True:
            rates = await self._queue.get()
            try:
                await self.deliver(rates)
            except Exception as e:
                logger.error(f"Error during the notification process: {e}", exc_info=True)
            finally:
                self._queue.task_done()
