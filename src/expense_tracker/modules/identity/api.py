from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from expense_tracker.api.deps import get_current_user
from expense_tracker.core.db import db_session
from expense_tracker.core.security import create_access_token
from expense_tracker.modules.identity.models import User
from expense_tracker.modules.identity.schemas import LoginIn, RegisterIn, TokenOut, UserOut
from expense_tracker.modules.identity.service import authenticate_user, create_user

router = APIRouter(prefix="/auth", tags=["identity"])


def _token_for(user: User) -> TokenOut:
    token = create_access_token(subject=str(user.id), email=user.email)
    return TokenOut(access_token=token, user=UserOut.model_validate(user, from_attributes=True))


@router.post("/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, session: Session = Depends(db_session)) -> TokenOut:
    user = create_user(
        session,
        email=str(payload.email),
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return _token_for(user)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, session: Session = Depends(db_session)) -> TokenOut:
    user = authenticate_user(session, email=payload.email, password=payload.password)
    return _token_for(user)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(user, from_attributes=True)
