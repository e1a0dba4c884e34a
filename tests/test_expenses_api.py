from __future__ import annotations

from decimal import Decimal


def _create(client, headers, **overrides):
    payload = {
        "amount": "10.00",
        "vendor": "Corner Deli",
        "category": "Meals",
        "date": "2024-03-05",
    }
    payload.update(overrides)
    resp = client.post("/api/expenses", headers=headers, json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_and_get_expense(client, auth_headers):
    created = _create(client, auth_headers, receiptUrl="https://example.com/r/1.png")

    assert Decimal(created["amount"]) == Decimal("10.00")
    assert created["vendor"] == "Corner Deli"
    assert created["receiptUrl"] == "https://example.com/r/1.png"

    resp = client.get(f"/api/expenses/{created['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]


def test_create_rejects_non_positive_amount_and_blank_vendor(client, auth_headers):
    base = {"vendor": "Deli", "category": "Meals", "date": "2024-03-05"}
    zero = client.post("/api/expenses", headers=auth_headers, json={**base, "amount": "0"})
    assert zero.status_code == 400

    negative = client.post("/api/expenses", headers=auth_headers, json={**base, "amount": "-5"})
    assert negative.status_code == 400

    blank = client.post(
        "/api/expenses", headers=auth_headers, json={**base, "amount": "5", "vendor": "  "}
    )
    assert blank.status_code == 400
    assert blank.json()["detail"] == "Vendor is required"


def test_list_filters_sorts_and_paginates(client, auth_headers):
    _create(client, auth_headers, amount="5.00", vendor="A", category="Meals", date="2024-01-10")
    _create(client, auth_headers, amount="25.00", vendor="B", category="Travel", date="2024-02-10")
    _create(client, auth_headers, amount="15.00", vendor="C", category="Meals", date="2024-03-10")

    resp = client.get("/api/expenses", headers=auth_headers)
    body = resp.json()
    assert [e["vendor"] for e in body["data"]] == ["C", "B", "A"]
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 3, "pages": 1}

    meals = client.get("/api/expenses", headers=auth_headers, params={"category": "Meals"}).json()
    assert {e["vendor"] for e in meals["data"]} == {"A", "C"}

    ranged = client.get(
        "/api/expenses",
        headers=auth_headers,
        params={"start_date": "2024-02-01", "end_date": "2024-03-31", "min_amount": "20"},
    ).json()
    assert [e["vendor"] for e in ranged["data"]] == ["B"]

    by_amount = client.get(
        "/api/expenses", headers=auth_headers, params={"sort_by": "amount", "order": "asc"}
    ).json()
    assert [e["vendor"] for e in by_amount["data"]] == ["A", "C", "B"]

    paged = client.get(
        "/api/expenses", headers=auth_headers, params={"limit": 2, "page": 2}
    ).json()
    assert [e["vendor"] for e in paged["data"]] == ["A"]
    assert paged["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_list_unknown_sort_column_falls_back_to_date(client, auth_headers):
    _create(client, auth_headers, vendor="Old", date="2023-01-01")
    _create(client, auth_headers, vendor="New", date="2024-01-01")

    resp = client.get("/api/expenses", headers=auth_headers, params={"sort_by": "password"})
    assert resp.status_code == 200
    assert [e["vendor"] for e in resp.json()["data"]] == ["New", "Old"]


def test_update_and_delete_expense(client, auth_headers):
    created = _create(client, auth_headers)

    updated = client.put(
        f"/api/expenses/{created['id']}",
        headers=auth_headers,
        json={"amount": "12.34", "category": "Travel"},
    )
    assert updated.status_code == 200
    assert Decimal(updated.json()["amount"]) == Decimal("12.34")
    assert updated.json()["category"] == "Travel"
    assert updated.json()["vendor"] == "Corner Deli"

    bad = client.put(
        f"/api/expenses/{created['id']}", headers=auth_headers, json={"amount": "0"}
    )
    assert bad.status_code == 400

    deleted = client.delete(f"/api/expenses/{created['id']}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = client.get(f"/api/expenses/{created['id']}", headers=auth_headers)
    assert missing.status_code == 404


def test_expenses_are_private_to_their_owner(client, auth_headers):
    created = _create(client, auth_headers)

    other = client.post(
        "/api/auth/register", json={"email": "other@example.com", "password": "secret123"}
    )
    other_headers = {"Authorization": f"Bearer {other.json()['access_token']}"}

    assert client.get(f"/api/expenses/{created['id']}", headers=other_headers).status_code == 404
    assert client.get("/api/expenses", headers=other_headers).json()["data"] == []
    delete = client.delete(f"/api/expenses/{created['id']}", headers=other_headers)
    assert delete.status_code == 404


def test_expenses_require_authentication(client):
    assert client.get("/api/expenses").status_code == 401
    bad = client.get("/api/expenses", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401
