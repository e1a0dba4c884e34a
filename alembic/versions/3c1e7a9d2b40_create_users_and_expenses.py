"""create users and expenses

Revision ID: 3c1e7a9d2b40
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3c1e7a9d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "identity_user",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_identity_user_email", "identity_user", ["email"], unique=True)

    op.create_table(
        "expenses_expense",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("identity_user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("vendor", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("receipt_url", sa.String(length=500), nullable=True),
    )
    op.create_index("ix_expenses_expense_user_id", "expenses_expense", ["user_id"])
    op.create_index("ix_expenses_expense_date", "expenses_expense", ["date"])
    op.create_index("ix_expenses_expense_category", "expenses_expense", ["category"])
    op.create_index("ix_expenses_expense_user_date", "expenses_expense", ["user_id", "date"])


def downgrade() -> None:
    op.drop_index("ix_expenses_expense_user_date", table_name="expenses_expense")
    op.drop_index("ix_expenses_expense_category", table_name="expenses_expense")
    op.drop_index("ix_expenses_expense_date", table_name="expenses_expense")
    op.drop_index("ix_expenses_expense_user_id", table_name="expenses_expense")
    op.drop_table("expenses_expense")
    op.drop_index("ix_identity_user_email", table_name="identity_user")
    op.drop_table("identity_user")
