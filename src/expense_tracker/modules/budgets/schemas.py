from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryBudgetIn(_CamelModel):
    category: str
    amount: Decimal


class CategoryBudgetOut(_CamelModel):
    id: uuid.UUID
    category: str
    amount: Decimal
    updated_at: dt.datetime


class BudgetResetOut(_CamelModel):
    deleted: int


class BudgetHistoryIn(_CamelModel):
    amount: Decimal
    effective_date: dt.date
    reason: str | None = None


class BudgetHistoryUpdateIn(_CamelModel):
    amount: Decimal | None = None
    effective_date: dt.date | None = None
    reason: str | None = None


class BudgetHistoryOut(_CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: Decimal
    effective_date: dt.date
    reason: str | None
    created_at: dt.datetime


class BudgetTrendOut(_CamelModel):
    trend: list[BudgetHistoryOut]
    average: Decimal
    count: int
