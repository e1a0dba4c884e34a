from __future__ import annotations

import calendar
import datetime as dt
import uuid
from decimal import Decimal, InvalidOperation

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from expense_tracker.core.logging import get_logger, log_event
from expense_tracker.modules.budgets.models import BudgetHistoryEntry, CategoryBudget
from expense_tracker.modules.identity.models import User

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 12
DEFAULT_TREND_MONTHS = 6


def list_category_budgets(session: Session, *, user: User) -> list[CategoryBudget]:
    return list(
        session.scalars(
            select(CategoryBudget)
            .where(CategoryBudget.user_id == user.id)
            .order_by(CategoryBudget.category)
        )
    )


def set_category_budget(
    session: Session, *, user: User, category: str, amount: Decimal
) -> CategoryBudget:
    """Create or replace the limit for ``category``. Zero is a valid limit."""
    category = str(category or "").strip()
    if not category:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category is required")
    value = _parse_amount(amount, allow_zero=True)

    budget = session.scalar(
        select(CategoryBudget).where(
            CategoryBudget.user_id == user.id, CategoryBudget.category == category
        )
    )
    if budget is None:
        budget = CategoryBudget(user_id=user.id, category=category, amount=value)
    else:
        budget.amount = value
    session.add(budget)
    session.commit()
    session.refresh(budget)
    log_event(logger, "budgets.category.set", category=category, amount=str(value))
    return budget


def delete_category_budget(session: Session, *, user: User, category: str) -> None:
    budget = session.scalar(
        select(CategoryBudget).where(
            CategoryBudget.user_id == user.id, CategoryBudget.category == category
        )
    )
    if not budget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    session.delete(budget)
    session.commit()
    log_event(logger, "budgets.category.deleted", category=category)


def reset_category_budgets(session: Session, *, user: User) -> int:
    result = session.execute(delete(CategoryBudget).where(CategoryBudget.user_id == user.id))
    session.commit()
    log_event(logger, "budgets.category.reset", deleted=result.rowcount)
    return int(result.rowcount or 0)


def record_budget_change(
    session: Session,
    *,
    user: User,
    amount: Decimal,
    effective_date: dt.date,
    reason: str | None = None,
) -> BudgetHistoryEntry:
    entry = BudgetHistoryEntry(
        user_id=user.id,
        amount=_parse_amount(amount),
        effective_date=effective_date,
        reason=(reason or "").strip() or None,
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    log_event(
        logger,
        "budgets.history.recorded",
        entry_id=str(entry.id),
        effective_date=effective_date.isoformat(),
    )
    return entry


def budget_history(
    session: Session, *, user: User, limit: int = DEFAULT_HISTORY_LIMIT
) -> list[BudgetHistoryEntry]:
    return list(
        session.scalars(
            select(BudgetHistoryEntry)
            .where(BudgetHistoryEntry.user_id == user.id)
            .order_by(
                BudgetHistoryEntry.effective_date.desc(), BudgetHistoryEntry.created_at.desc()
            )
            .limit(limit)
        )
    )


def budget_on_date(session: Session, *, user: User, on: dt.date) -> BudgetHistoryEntry | None:
    """The most recent entry effective on or before ``on``."""
    return session.scalar(
        select(BudgetHistoryEntry)
        .where(BudgetHistoryEntry.user_id == user.id, BudgetHistoryEntry.effective_date <= on)
        .order_by(BudgetHistoryEntry.effective_date.desc(), BudgetHistoryEntry.created_at.desc())
        .limit(1)
    )


def budget_trend(
    session: Session,
    *,
    user: User,
    months: int = DEFAULT_TREND_MONTHS,
    today: dt.date | None = None,
) -> tuple[list[BudgetHistoryEntry], Decimal]:
    """Entries effective in the last ``months`` months, oldest first, and their mean amount."""
    cutoff = months_before(today or dt.date.today(), months)
    entries = list(
        session.scalars(
            select(BudgetHistoryEntry)
            .where(
                BudgetHistoryEntry.user_id == user.id,
                BudgetHistoryEntry.effective_date >= cutoff,
            )
            .order_by(BudgetHistoryEntry.effective_date.asc())
        )
    )
    if not entries:
        return entries, Decimal("0.00")
    average = sum((Decimal(e.amount) for e in entries), Decimal(0)) / len(entries)
    return entries, average.quantize(Decimal("0.01"))


def get_history_entry(
    session: Session, *, user: User, entry_id: uuid.UUID
) -> BudgetHistoryEntry:
    entry = session.scalar(
        select(BudgetHistoryEntry).where(
            BudgetHistoryEntry.id == entry_id, BudgetHistoryEntry.user_id == user.id
        )
    )
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Budget history entry not found"
        )
    return entry


def update_history_entry(
    session: Session, *, user: User, entry_id: uuid.UUID, changes: dict
) -> BudgetHistoryEntry:
    entry = get_history_entry(session, user=user, entry_id=entry_id)
    if changes.get("amount") is not None:
        entry.amount = _parse_amount(changes["amount"])
    if changes.get("effective_date") is not None:
        entry.effective_date = changes["effective_date"]
    if "reason" in changes:
        entry.reason = (changes["reason"] or "").strip() or None
    session.add(entry)
    session.commit()
    session.refresh(entry)
    return entry


def delete_history_entry(session: Session, *, user: User, entry_id: uuid.UUID) -> None:
    entry = get_history_entry(session, user=user, entry_id=entry_id)
    session.delete(entry)
    session.commit()
    log_event(logger, "budgets.history.deleted", entry_id=str(entry_id))


def months_before(day: dt.date, months: int) -> dt.date:
    """Same day ``months`` calendar months earlier, clamped to the month's last day."""
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    return dt.date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def _parse_amount(amount: Decimal | str | float, *, allow_zero: bool = False) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid amount") from e
    if not value.is_finite() or value < 0 or (value == 0 and not allow_zero):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid amount")
    return value.quantize(Decimal("0.01"))
