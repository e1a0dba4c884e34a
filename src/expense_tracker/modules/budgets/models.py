from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from expense_tracker.core.models import Base, Timestamped, UUIDPrimaryKey


class CategoryBudget(UUIDPrimaryKey, Timestamped, Base):
    """Spending limit for one category; at most one per user and category."""

    __tablename__ = "budgets_category_budget"
    __table_args__ = (
        UniqueConstraint("user_id", "category", name="uq_budgets_category_budget_user_category"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("identity_user.id", ondelete="CASCADE"), index=True
    )
    category: Mapped[str] = mapped_column(String(50))
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))


class BudgetHistoryEntry(UUIDPrimaryKey, Timestamped, Base):
    """Overall monthly budget as of ``effective_date``."""

    __tablename__ = "budgets_history_entry"
    __table_args__ = (
        Index("ix_budgets_history_entry_user_effective", "user_id", "effective_date"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("identity_user.id", ondelete="CASCADE")
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    effective_date: Mapped[dt.date] = mapped_column(Date)
    reason: Mapped[str | None] = mapped_column(String(100), nullable=True)
