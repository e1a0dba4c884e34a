"""add category budgets and budget history

Revision ID: 8d2f4b6a1c93
Revises: 3c1e7a9d2b40
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "8d2f4b6a1c93"
down_revision: Union[str, Sequence[str], None] = "3c1e7a9d2b40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "budgets_category_budget",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("identity_user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.UniqueConstraint(
            "user_id", "category", name="uq_budgets_category_budget_user_category"
        ),
    )
    op.create_index(
        "ix_budgets_category_budget_user_id", "budgets_category_budget", ["user_id"]
    )

    op.create_table(
        "budgets_history_entry",
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
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(length=100), nullable=True),
    )
    op.create_index(
        "ix_budgets_history_entry_user_effective",
        "budgets_history_entry",
        ["user_id", "effective_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_budgets_history_entry_user_effective", table_name="budgets_history_entry")
    op.drop_table("budgets_history_entry")
    op.drop_index("ix_budgets_category_budget_user_id", table_name="budgets_category_budget")
    op.drop_table("budgets_category_budget")
