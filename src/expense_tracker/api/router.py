from __future__ import annotations

from fastapi import APIRouter

from expense_tracker.modules.budgets.api import history_router as budget_history_router
from expense_tracker.modules.budgets.api import router as budgets_router
from expense_tracker.modules.expenses.api import router as expenses_router
from expense_tracker.modules.extraction.api import router as extraction_router
from expense_tracker.modules.extraction.ocr import ocr_available
from expense_tracker.modules.identity.api import router as identity_router

router = APIRouter()

router.include_router(identity_router, prefix="/api")
# Before the expenses router so /expenses/parse is not read as an expense id.
router.include_router(extraction_router, prefix="/api")
router.include_router(expenses_router, prefix="/api")
router.include_router(budgets_router, prefix="/api")
router.include_router(budget_history_router, prefix="/api")


@router.get("/healthz")
def healthz() -> dict[str, str | bool]:
    return {"status": "ok", "ocr_configured": ocr_available()}
