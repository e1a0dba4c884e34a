from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expense_tracker.core.models import Base, Timestamped, UUIDPrimaryKey

DEFAULT_CATEGORY = "Other"


class Expense(UUIDPrimaryKey, Timestamped, Base):
    __tablename__ = "expenses_expense"
    __table_args__ = (Index("ix_expenses_expense_user_date", "user_id", "date"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("identity_user.id", ondelete="CASCADE"), index=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    vendor: Mapped[str] = mapped_column(String(255))
    category: Mapped[str] = mapped_column(String(50), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    receipt_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    user = relationship("User")
