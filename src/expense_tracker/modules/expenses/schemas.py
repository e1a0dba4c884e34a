from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SORT_COLUMNS = ("date", "amount", "vendor", "category", "created_at")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpenseCreateIn(_CamelModel):
    amount: Decimal
    vendor: str
    category: str
    date: dt.date
    receipt_url: str | None = None


class ExpenseUpdateIn(_CamelModel):
    amount: Decimal | None = None
    vendor: str | None = None
    category: str | None = None
    date: dt.date | None = None
    receipt_url: str | None = None


class ExpenseOut(_CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: Decimal
    vendor: str
    category: str
    date: dt.date
    receipt_url: str | None
    created_at: dt.datetime
    updated_at: dt.datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ExpensePageOut(BaseModel):
    data: list[ExpenseOut]
    pagination: Pagination


class ExpenseFilters(BaseModel):
    category: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    sort_by: str = "date"
    order: str = "desc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class DuplicateCandidate(_CamelModel):
    """Fields of a not-yet-saved expense checked against the user's history."""

    amount: Decimal
    date: dt.date
    vendor: str


class DuplicateCheckOut(_CamelModel):
    is_duplicate: bool
    duplicate_id: uuid.UUID | None = None
