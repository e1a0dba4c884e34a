"""
Alembic model import hook.

Importing this module ensures all SQLAlchemy models are registered on Base.metadata.
"""

from __future__ import annotations

# Import User first - expenses and budgets reference identity_user
from expense_tracker.modules.identity.models import User  # noqa: F401

from expense_tracker.modules.expenses.models import Expense  # noqa: F401
from expense_tracker.modules.budgets.models import BudgetHistoryEntry, CategoryBudget  # noqa: F401
