from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from expense_tracker.api.deps import get_current_user
from expense_tracker.core.db import db_session
from expense_tracker.modules.expenses.schemas import (
    DuplicateCandidate,
    DuplicateCheckOut,
    ExpenseCreateIn,
    ExpenseFilters,
    ExpenseOut,
    ExpensePageOut,
    ExpenseUpdateIn,
    Pagination,
)
from expense_tracker.modules.expenses.service import (
    create_expense,
    delete_expense,
    find_duplicate,
    get_expense,
    list_expenses,
    page_count,
    update_expense,
)
from expense_tracker.modules.identity.models import User

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("/duplicates/check", response_model=DuplicateCheckOut)
def check_duplicate_endpoint(
    payload: DuplicateCandidate,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> DuplicateCheckOut:
    match = find_duplicate(session, user_id=user.id, candidate=payload)
    return DuplicateCheckOut(
        is_duplicate=match is not None, duplicate_id=match.id if match else None
    )


@router.get("", response_model=ExpensePageOut)
def list_expenses_endpoint(
    filters: Annotated[ExpenseFilters, Query()],
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> ExpensePageOut:
    items, total = list_expenses(session, user=user, filters=filters)
    return ExpensePageOut(
        data=[ExpenseOut.model_validate(i, from_attributes=True) for i in items],
        pagination=Pagination(
            page=filters.page,
            limit=filters.limit,
            total=total,
            pages=page_count(total, filters.limit),
        ),
    )


@router.post("", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense_endpoint(
    payload: ExpenseCreateIn,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> ExpenseOut:
    expense = create_expense(session, user=user, **payload.model_dump())
    return ExpenseOut.model_validate(expense, from_attributes=True)


@router.get("/{expense_id}", response_model=ExpenseOut)
def get_expense_endpoint(
    expense_id: uuid.UUID,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> ExpenseOut:
    expense = get_expense(session, user=user, expense_id=expense_id)
    return ExpenseOut.model_validate(expense, from_attributes=True)


@router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense_endpoint(
    expense_id: uuid.UUID,
    payload: ExpenseUpdateIn,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> ExpenseOut:
    expense = update_expense(
        session,
        user=user,
        expense_id=expense_id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return ExpenseOut.model_validate(expense, from_attributes=True)


@router.delete("/{expense_id}")
def delete_expense_endpoint(
    expense_id: uuid.UUID,
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> Response:
    delete_expense(session, user=user, expense_id=expense_id)
    return Response(status_code=204)
