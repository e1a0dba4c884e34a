from __future__ import annotations

import datetime as dt
import math
import uuid
from decimal import Decimal, InvalidOperation

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from expense_tracker.core.logging import get_logger, log_event
from expense_tracker.modules.expenses.models import Expense
from expense_tracker.modules.expenses.schemas import (
    SORT_COLUMNS,
    DuplicateCandidate,
    ExpenseFilters,
)
from expense_tracker.modules.identity.models import User

logger = get_logger(__name__)


def create_expense(
    session: Session,
    *,
    user: User,
    amount: Decimal,
    vendor: str,
    category: str,
    date: dt.date,
    receipt_url: str | None = None,
) -> Expense:
    amount = _require_positive_amount(amount)
    vendor = _require_text(vendor, field="Vendor")
    category = _require_text(category, field="Category")

    expense = Expense(
        user_id=user.id,
        amount=amount,
        vendor=vendor,
        category=category,
        date=date,
        receipt_url=receipt_url or None,
    )
    session.add(expense)
    session.commit()
    session.refresh(expense)
    log_event(
        logger,
        "expenses.created",
        expense_id=str(expense.id),
        amount=str(expense.amount),
        category=expense.category,
    )
    return expense


def get_expense(session: Session, *, user: User, expense_id: uuid.UUID) -> Expense:
    expense = session.scalar(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user.id)
    )
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


def list_expenses(
    session: Session, *, user: User, filters: ExpenseFilters
) -> tuple[list[Expense], int]:
    stmt = select(Expense).where(Expense.user_id == user.id)
    if filters.category:
        stmt = stmt.where(Expense.category == filters.category)
    if filters.start_date:
        stmt = stmt.where(Expense.date >= filters.start_date)
    if filters.end_date:
        stmt = stmt.where(Expense.date <= filters.end_date)
    if filters.min_amount is not None:
        stmt = stmt.where(Expense.amount >= filters.min_amount)
    if filters.max_amount is not None:
        stmt = stmt.where(Expense.amount <= filters.max_amount)

    total = session.scalar(select(func.count()).select_from(stmt.subquery())) or 0

    sort_by = filters.sort_by if filters.sort_by in SORT_COLUMNS else "date"
    column = getattr(Expense, sort_by)
    ordering = column.asc() if filters.order.lower() == "asc" else column.desc()
    stmt = (
        stmt.order_by(ordering, Expense.created_at.desc())
        .limit(filters.limit)
        .offset((filters.page - 1) * filters.limit)
    )
    return list(session.scalars(stmt)), int(total)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def update_expense(
    session: Session, *, user: User, expense_id: uuid.UUID, changes: dict
) -> Expense:
    expense = get_expense(session, user=user, expense_id=expense_id)

    if changes.get("amount") is not None:
        expense.amount = _require_positive_amount(changes["amount"])
    if changes.get("vendor") is not None:
        expense.vendor = _require_text(changes["vendor"], field="Vendor")
    if changes.get("category") is not None:
        expense.category = _require_text(changes["category"], field="Category")
    if changes.get("date") is not None:
        expense.date = changes["date"]
    if "receipt_url" in changes:
        expense.receipt_url = changes["receipt_url"] or None

    session.add(expense)
    session.commit()
    session.refresh(expense)
    return expense


def delete_expense(session: Session, *, user: User, expense_id: uuid.UUID) -> None:
    expense = get_expense(session, user=user, expense_id=expense_id)
    session.delete(expense)
    session.commit()
    log_event(logger, "expenses.deleted", expense_id=str(expense_id))


def find_duplicate(
    session: Session, *, user_id: uuid.UUID, candidate: DuplicateCandidate
) -> Expense | None:
    """
    Look for an existing expense of the same user that is probably the same purchase.

    Amount and date must match exactly; the stored vendor only has to contain the
    candidate vendor (case-sensitive). Advisory only: the caller decides what to do.
    """
    vendor = (candidate.vendor or "").strip()
    if not vendor:
        return None

    rows = session.scalars(
        select(Expense)
        .where(
            Expense.user_id == user_id,
            Expense.amount == candidate.amount,
            Expense.date == candidate.date,
        )
        .order_by(Expense.created_at)
    )
    # SQL LIKE is case-insensitive on SQLite, so the substring test happens here.
    match = next((row for row in rows if vendor in row.vendor), None)
    log_event(
        logger,
        "expenses.duplicate.found" if match else "expenses.duplicate.none",
        amount=str(candidate.amount),
        date=candidate.date.isoformat(),
        duplicate_id=str(match.id) if match else None,
    )
    return match


def _require_positive_amount(amount: Decimal | str | float) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Amount must be a positive number"
        ) from e
    if not value.is_finite() or value <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Amount must be a positive number"
        )
    return value.quantize(Decimal("0.01"))


def _require_text(value: str, *, field: str) -> str:
    cleaned = str(value or "").strip()
    if not cleaned:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} is required"
        )
    return cleaned
