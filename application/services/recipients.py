import logging

from domain.exceptions.currency import PersistenceError
from domain.models.recipient import Recipient
from infrastructure.persistence.repositories.recipient import RecipientRepository

logger = logging.getLogger(__name__)


class RecipientService:
    def __init__(self, repository: RecipientRepository):
        self.repository = repository

    async def save_chat_id(self, chat_id: int, username: str) -> None:
        logger.debug(f"Saving chat ID for user: {username} with chat ID: {chat_id}")
        try:
            await self.repository.save(Recipient(chat_id=chat_id, username=username))
        except PersistenceError as e:
            logger.error(f"Couldn't save user chat id: {e}")
            return
        logger.info(f"Successfully saved chat ID for user: {username}")

    async def get_recipients(self) -> list[Recipient]:
        return await self.repository.list_all()
