from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from domain.exceptions.currency import PersistenceError
from domain.models.recipient import Recipient
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import RecipientDB


class RecipientRepository:
	def __init__(self, database: Database):
		self.database = database

	async def save(self, recipient: Recipient) -> None:
		"""Insert a new recipient or refresh the username of a known chat id."""
		try:
			async with self.database.session() as session:
				await session.merge(RecipientDB(chat_id=recipient.chat_id, username=recipient.username))
		except SQLAlchemyError as e:
			raise PersistenceError(f'Failed to save chat id {recipient.chat_id}: {e}') from e

	async def list_all(self) -> list[Recipient]:
		async with self.database.reader() as session:
			result = await session.execute(select(RecipientDB).order_by(RecipientDB.chat_id))
			return [Recipient(chat_id=r.chat_id, username=r.username) for r in result.scalars().all()]
