from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from expense_tracker.core.db import db_session
from expense_tracker.core.logging import get_logger, log_event, set_user_context
from expense_tracker.core.security import decode_access_token
from expense_tracker.modules.identity.models import User

bearer_scheme = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


def _unauthorized(detail: str, *, reason: str) -> HTTPException:
    log_event(logger, "auth.rejected", reason=reason)
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(db_session),
) -> User:
    """Resolve the bearer token to an active user; every failure is a 401."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated", reason="missing_token")

    subject = decode_access_token(credentials.credentials)
    try:
        user_id = uuid.UUID(subject or "")
    except ValueError as e:
        raise _unauthorized("Invalid token", reason="bad_token") from e

    user = session.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("Invalid user", reason="unknown_user")
    set_user_context(str(user.id))
    return user
