from __future__ import annotations

import datetime as dt
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from expense_tracker.api.deps import get_current_user
from expense_tracker.core.db import db_session
from expense_tracker.modules.budgets.schemas import (
    BudgetHistoryIn,
    BudgetHistoryOut,
    BudgetHistoryUpdateIn,
    BudgetResetOut,
    BudgetTrendOut,
    CategoryBudgetIn,
    CategoryBudgetOut,
)
from expense_tracker.modules.budgets.service import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_TREND_MONTHS,
    budget_history,
    budget_on_date,
    budget_trend,
    delete_category_budget,
    delete_history_entry,
    list_category_budgets,
    record_budget_change,
    reset_category_budgets,
    set_category_budget,
    update_history_entry,
)
from expense_tracker.modules.identity.models import User

router = APIRouter(prefix="/budgets", tags=["budgets"])
history_router = APIRouter(prefix="/budget-history", tags=["budgets"])


def _budgets_out(session: Session, user: User) -> list[CategoryBudgetOut]:
    return [
        CategoryBudgetOut.model_validate(b, from_attributes=True)
        for b in list_category_budgets(session, user=user)
    ]


@router.get("", response_model=list[CategoryBudgetOut])
def list_budgets_endpoint(
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> list[CategoryBudgetOut]:
    return _budgets_out(session, user)


@router.post("", response_model=list[CategoryBudgetOut])
def set_budget_endpoint(
    payload: CategoryBudgetIn,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> list[CategoryBudgetOut]:
    set_category_budget(session, user=user, category=payload.category, amount=payload.amount)
    return _budgets_out(session, user)


@router.post("/reset-all", response_model=BudgetResetOut)
def reset_budgets_endpoint(
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> BudgetResetOut:
    return BudgetResetOut(deleted=reset_category_budgets(session, user=user))


@router.delete("/{category}")
def delete_budget_endpoint(
    category: str,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> Response:
    delete_category_budget(session, user=user, category=category)
    return Response(status_code=204)


@history_router.get("", response_model=list[BudgetHistoryOut])
def list_history_endpoint(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=120),
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> list[BudgetHistoryOut]:
    return [
        BudgetHistoryOut.model_validate(e, from_attributes=True)
        for e in budget_history(session, user=user, limit=limit)
    ]


@history_router.get("/trend", response_model=BudgetTrendOut)
def trend_endpoint(
    months: int = Query(DEFAULT_TREND_MONTHS, ge=1, le=120),
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> BudgetTrendOut:
    entries, average = budget_trend(session, user=user, months=months)
    return BudgetTrendOut(
        trend=[BudgetHistoryOut.model_validate(e, from_attributes=True) for e in entries],
        average=average,
        count=len(entries),
    )


@history_router.get("/on-date", response_model=BudgetHistoryOut | None)
def on_date_endpoint(
    on: dt.date = Query(..., alias="date"),
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> BudgetHistoryOut | None:
    entry = budget_on_date(session, user=user, on=on)
    return BudgetHistoryOut.model_validate(entry, from_attributes=True) if entry else None


@history_router.post("", response_model=BudgetHistoryOut, status_code=status.HTTP_201_CREATED)
def record_history_endpoint(
    payload: BudgetHistoryIn,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> BudgetHistoryOut:
    entry = record_budget_change(session, user=user, **payload.model_dump())
    return BudgetHistoryOut.model_validate(entry, from_attributes=True)


@history_router.put("/{entry_id}", response_model=BudgetHistoryOut)
def update_history_endpoint(
    entry_id: uuid.UUID,
    payload: BudgetHistoryUpdateIn,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> BudgetHistoryOut:
    entry = update_history_entry(
        session, user=user, entry_id=entry_id, changes=payload.model_dump(exclude_unset=True)
    )
    return BudgetHistoryOut.model_validate(entry, from_attributes=True)


@history_router.delete("/{entry_id}")
def delete_history_endpoint(
    entry_id: uuid.UUID,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> Response:
    delete_history_entry(session, user=user, entry_id=entry_id)
    return Response(status_code=204)
