"""Pydantic schemas for transaction endpoints."""

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class TransactionCreate(BaseModel):
    type: Literal["income", "expense"]
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    purpose: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=64)
    date: dt.date | None = None


class TransactionResponse(BaseModel):
    id: int
    user_id: int
    type: str
    amount: Decimal
    purpose: str
    category: str
    date: dt.date

    model_config = {"from_attributes": True}
