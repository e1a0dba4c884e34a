from __future__ import annotations

import datetime as dt
from decimal import Decimal

from expense_tracker.core.db import SessionLocal
from expense_tracker.modules.expenses.schemas import DuplicateCandidate
from expense_tracker.modules.expenses.service import create_expense, find_duplicate
from expense_tracker.modules.identity.service import create_user

MARCH_5 = dt.date(2024, 3, 5)


def _seed(session):
    user = create_user(session, email="dup@example.com", password="secret123")
    expense = create_expense(
        session,
        user=user,
        amount=Decimal("42.50"),
        vendor="Acme Hardware Co.",
        category="Supplies",
        date=MARCH_5,
    )
    return user, expense


def test_vendor_substring_with_same_amount_and_date_is_duplicate():
    with SessionLocal() as session:
        user, expense = _seed(session)
        match = find_duplicate(
            session,
            user_id=user.id,
            candidate=DuplicateCandidate(amount=Decimal("42.50"), date=MARCH_5, vendor="Acme"),
        )
        assert match is not None
        assert match.id == expense.id


def test_one_cent_difference_is_not_duplicate():
    with SessionLocal() as session:
        user, _ = _seed(session)
        match = find_duplicate(
            session,
            user_id=user.id,
            candidate=DuplicateCandidate(amount=Decimal("42.51"), date=MARCH_5, vendor="Acme"),
        )
        assert match is None


def test_other_date_or_vendor_case_is_not_duplicate():
    with SessionLocal() as session:
        user, _ = _seed(session)
        other_day = DuplicateCandidate(
            amount=Decimal("42.50"), date=dt.date(2024, 3, 6), vendor="Acme"
        )
        lower_case = DuplicateCandidate(amount=Decimal("42.50"), date=MARCH_5, vendor="acme")
        assert find_duplicate(session, user_id=user.id, candidate=other_day) is None
        assert find_duplicate(session, user_id=user.id, candidate=lower_case) is None


def test_duplicates_are_scoped_to_the_user():
    with SessionLocal() as session:
        _seed(session)
        other = create_user(session, email="other@example.com", password="secret123")
        match = find_duplicate(
            session,
            user_id=other.id,
            candidate=DuplicateCandidate(amount=Decimal("42.50"), date=MARCH_5, vendor="Acme"),
        )
        assert match is None


def test_duplicate_check_endpoint(client, auth_headers):
    created = client.post(
        "/api/expenses",
        headers=auth_headers,
        json={
            "amount": 42.5,
            "vendor": "Acme Hardware Co.",
            "category": "Supplies",
            "date": "2024-03-05",
        },
    )
    assert created.status_code == 201

    hit = client.post(
        "/api/expenses/duplicates/check",
        headers=auth_headers,
        json={"amount": "42.50", "date": "2024-03-05", "vendor": "Hardware"},
    )
    assert hit.status_code == 200
    assert hit.json() == {"isDuplicate": True, "duplicateId": created.json()["id"]}

    miss = client.post(
        "/api/expenses/duplicates/check",
        headers=auth_headers,
        json={"amount": "42.49", "date": "2024-03-05", "vendor": "Hardware"},
    )
    assert miss.json() == {"isDuplicate": False, "duplicateId": None}
