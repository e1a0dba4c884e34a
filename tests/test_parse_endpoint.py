from __future__ import annotations

import asyncio

import pytest
from fastapi import HTTPException

from expense_tracker.core.config import settings
from expense_tracker.modules.extraction import text_source
from expense_tracker.modules.extraction.api import read_upload
from expense_tracker.modules.extraction.ocr import OcrProcessingError
from expense_tracker.modules.extraction.service import OCR_UNAVAILABLE_MESSAGE

PNG_BODY = b"\x89PNG\r\n\x1a\n fake image"

RECEIPT_TEXT = (
    "Acme Hardware Co.\n"
    "03/05/2024\n"
    "Hammer 12.00\n"
    "Nails 3.50\n"
    "Total: $15.50\n"
)


@pytest.fixture()
def fake_ocr(monkeypatch):
    monkeypatch.setattr(settings, "ocr_space_api_key", "test-key")

    async def _recognize(body, media_type, *, client=None):
        return RECEIPT_TEXT

    monkeypatch.setattr(text_source, "recognize", _recognize)


def _upload(client, headers, body=PNG_BODY, content_type="image/png"):
    return client.post(
        "/api/expenses/parse",
        headers=headers,
        files={"receipt": ("receipt.png", body, content_type)},
    )


def test_image_without_ocr_degrades_to_manual_entry(client, auth_headers):
    resp = _upload(client, auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {
        "vendor": None,
        "date": None,
        "amount": None,
        "category": "Other",
        "error": OCR_UNAVAILABLE_MESSAGE,
    }


def test_parse_returns_fields_without_duplicate(client, auth_headers, fake_ocr):
    resp = _upload(client, auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["vendor"] == "Acme Hardware Co."
    assert body["date"] == "2024-03-05"
    assert body["amount"] == "15.50"
    assert body["category"] == "Other"
    assert body["isDuplicate"] is False
    assert "duplicateId" not in body
    assert "error" not in body


def test_parse_flags_existing_expense_as_duplicate(client, auth_headers, fake_ocr):
    created = client.post(
        "/api/expenses",
        headers=auth_headers,
        json={
            "amount": "15.50",
            "vendor": "Acme Hardware Co. #12",
            "category": "Supplies",
            "date": "2024-03-05",
        },
    )
    assert created.status_code == 201

    resp = _upload(client, auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["isDuplicate"] is True
    assert body["duplicateId"] == created.json()["id"]


def test_parse_requires_a_file(client, auth_headers):
    resp = client.post("/api/expenses/parse", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No file uploaded"


def test_parse_rejects_empty_file(client, auth_headers):
    resp = _upload(client, auth_headers, body=b"")
    assert resp.status_code == 400


def test_parse_rejects_oversized_file(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 8)
    resp = _upload(client, auth_headers)
    assert resp.status_code == 413


def test_parse_ocr_failure_is_bad_gateway(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "ocr_space_api_key", "test-key")

    async def _failing(body, media_type, *, client=None):
        raise OcrProcessingError("OCR processing failed: unreadable")

    monkeypatch.setattr(text_source, "recognize", _failing)

    resp = _upload(client, auth_headers)
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Error parsing receipt"


def test_parse_requires_authentication(client):
    resp = client.post(
        "/api/expenses/parse", files={"receipt": ("receipt.png", PNG_BODY, "image/png")}
    )
    assert resp.status_code == 401


def test_healthz_reports_ocr_configuration(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "ocr_configured": False}
    assert resp.headers.get("x-request-id")


class _Upload:
    def __init__(self, body: bytes, size: int | None) -> None:
        self._body = body
        self.size = size
        self.read_sizes: list[int] = []

    async def read(self, size: int = -1) -> bytes:
        self.read_sizes.append(size)
        return self._body if size < 0 else self._body[:size]


def test_read_upload_never_reads_past_the_limit():
    upload = _Upload(b"x" * 100, size=None)
    with pytest.raises(HTTPException) as exc:
        asyncio.run(read_upload(upload, limit=10))
    assert exc.value.status_code == 413
    assert upload.read_sizes == [11]


def test_read_upload_rejects_declared_size_without_reading():
    upload = _Upload(b"x" * 100, size=100)
    with pytest.raises(HTTPException) as exc:
        asyncio.run(read_upload(upload, limit=10))
    assert exc.value.status_code == 413
    assert upload.read_sizes == []


def test_read_upload_returns_body_within_limit():
    upload = _Upload(b"x" * 10, size=10)
    assert asyncio.run(read_upload(upload, limit=10)) == b"x" * 10
