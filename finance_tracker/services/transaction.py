"""Transaction service for recording and listing income and expenses."""

import datetime as dt
from decimal import Decimal

from sqlalchemy.orm import Session

from finance_tracker.models.transaction import Transaction


class TransactionService:
    """Handles per-user transaction storage."""

    def create_transaction(
        self,
        db: Session,
        user_id: int,
        type: str,
        amount: Decimal,
        purpose: str,
        category: str,
        date: dt.date | None = None,
    ) -> Transaction:
        """Create a transaction record. Date defaults to today."""
        transaction = Transaction(
            user_id=user_id,
            type=type,
            amount=amount,
            purpose=purpose.strip(),
            category=category.strip(),
            date=date or dt.date.today(),
        )
        db.add(transaction)
        db.commit()
        db.refresh(transaction)
        return transaction

    def get_user_transactions(self, db: Session, user_id: int) -> list[Transaction]:
        """Get all transactions for a user, newest date first, ties broken by newest id."""
        return (
            db.query(Transaction)
            .filter(Transaction.user_id == user_id)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
            .all()
        )


_transaction_service: TransactionService | None = None


def get_transaction_service() -> TransactionService:
    """Get singleton transaction service instance."""
    global _transaction_service
    if _transaction_service is None:
        _transaction_service = TransactionService()
    return _transaction_service
