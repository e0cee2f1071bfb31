"""Transaction API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from finance_tracker.database import get_db
from finance_tracker.dependencies import CurrentUser, get_current_user
from finance_tracker.schemas.transaction import TransactionCreate, TransactionResponse
from finance_tracker.services.transaction import get_transaction_service

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    body: TransactionCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TransactionResponse:
    """Record an income or expense for the current user."""
    service = get_transaction_service()
    transaction = service.create_transaction(
        db=db,
        user_id=user.user_id,
        type=body.type,
        amount=body.amount,
        purpose=body.purpose,
        category=body.category,
        date=body.date,
    )
    return TransactionResponse.model_validate(transaction)


@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TransactionResponse]:
    """List the current user's transactions, newest first."""
    service = get_transaction_service()
    return [TransactionResponse.model_validate(t) for t in service.get_user_transactions(db, user.user_id)]
