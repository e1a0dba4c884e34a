from __future__ import annotations

import os

import pytest

# Set env before any expense_tracker imports (settings/engine are created at import time).
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./.expense_tracker_test.db")
os.environ["OCR_SPACE_API_KEY"] = ""


@pytest.fixture(autouse=True)
def _reset_db() -> None:
    import expense_tracker.models  # noqa: F401
    from expense_tracker.core.db import engine
    from expense_tracker.core.models import Base

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from expense_tracker.main import create_app

    with TestClient(create_app()) as c:
        yield c


@pytest.fixture()
def auth_headers(client) -> dict[str, str]:
    resp = client.post(
        "/api/auth/register",
        json={"email": "owner@example.com", "password": "secret123", "firstName": "Olive"},
    )
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
