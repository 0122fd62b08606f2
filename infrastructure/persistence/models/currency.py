from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, BigInteger, DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from domain.models.currency import Currency


class Base(DeclarativeBase):
	pass


class ExchangeRateDB(Base):
	__tablename__ = 'exchange_rate'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	currency: Mapped[Currency] = mapped_column(
		Enum(Currency, native_enum=False, length=5), nullable=False
	)
	rate_buy: Mapped[Decimal] = mapped_column(DECIMAL(precision=18, scale=6), nullable=False)
	rate_sell: Mapped[Decimal] = mapped_column(DECIMAL(precision=18, scale=6), nullable=False)
	timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)

	__table_args__ = (Index('idx_exchange_rate_currency_timestamp', 'currency', 'timestamp'),)


class RecipientDB(Base):
	__tablename__ = 'user_chat_id'

	chat_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
	username: Mapped[str] = mapped_column(String(255), nullable=False)
