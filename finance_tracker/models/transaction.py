"""Transaction model."""

import datetime as dt

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text

from finance_tracker.database import Base, utcnow


class Transaction(Base):
    """Income or expense entry owned by a user."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(16), nullable=False)  # income, expense
    amount = Column(Numeric(12, 2), nullable=False)
    purpose = Column(Text, nullable=False)
    category = Column(String(64), nullable=False)
    date = Column(Date, nullable=False, default=dt.date.today)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (Index("ix_transactions_user_date", "user_id", "date"),)
