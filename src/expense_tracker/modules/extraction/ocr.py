from __future__ import annotations

import asyncio
import base64
import time
from typing import Any

import httpx

from expense_tracker.core.config import settings
from expense_tracker.core.logging import get_logger, log_event, monotonic_ms

logger = get_logger(__name__)

# Fixed recognition options: English, auto-rotate, upscale, engine 2 (more accurate).
_RECOGNITION_OPTIONS: dict[str, str] = {
    "language": "eng",
    "isOverlayRequired": "false",
    "detectOrientation": "true",
    "scale": "true",
    "OCREngine": "2",
}


class OcrError(Exception):
    pass


class OcrUnavailable(OcrError):
    """No OCR credential is configured."""


class OcrTransportError(OcrError):
    """The OCR service could not be reached, timed out or answered with an HTTP error."""


class OcrProcessingError(OcrError):
    """The OCR service answered but could not read the document."""


def ocr_available() -> bool:
    return bool(settings.ocr_space_api_key)


async def recognize(
    body: bytes, media_type: str, *, client: httpx.AsyncClient | None = None
) -> str:
    """
    Send ``body`` to the OCR service and return the recognized text.

    Only the first parsed result is returned; for multi-page PDFs later pages are
    dropped.
    """
    api_key = settings.ocr_space_api_key
    if not api_key:
        raise OcrUnavailable("OCR_SPACE_API_KEY is not configured")

    encoded = base64.b64encode(body).decode("ascii")
    fields = {"base64Image": f"data:{media_type};base64,{encoded}", **_RECOGNITION_OPTIONS}
    # Plain form fields sent as multipart/form-data parts.
    parts = {name: (None, value) for name, value in fields.items()}
    headers = {"apikey": api_key}
    timeout = float(settings.ocr_timeout_seconds or 60.0)

    start = time.monotonic()
    log_event(
        logger,
        "extraction.ocr.request",
        media_type=media_type,
        byte_size=len(body),
        timeout_seconds=timeout,
    )
    try:
        # httpx timeouts apply per phase; this bounds the whole exchange.
        async with asyncio.timeout(timeout):
            if client is None:
                async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
                    resp = await owned.post(settings.ocr_space_url, files=parts, headers=headers)
            else:
                resp = await client.post(
                    settings.ocr_space_url, files=parts, headers=headers, timeout=timeout
                )
        resp.raise_for_status()
    except TimeoutError as e:
        raise OcrTransportError(f"OCR request timed out after {timeout:g}s") from e
    except httpx.HTTPStatusError as e:
        raise OcrTransportError(
            f"OCR service returned HTTP {e.response.status_code}: {_error_message(e.response)}"
        ) from e
    except httpx.HTTPError as e:
        raise OcrTransportError(f"OCR request failed: {e.__class__.__name__}") from e

    try:
        payload = resp.json()
    except ValueError as e:
        raise OcrProcessingError("OCR service returned a non-JSON body") from e
    if not isinstance(payload, dict):
        raise OcrProcessingError("OCR service returned an unexpected body")

    if payload.get("IsErroredOnProcessing"):
        message = _first_message(payload.get("ErrorMessage")) or "Unknown OCR error"
        raise OcrProcessingError(f"OCR processing failed: {message}")

    results = payload.get("ParsedResults") or []
    if not results:
        raise OcrProcessingError("No text found in file by OCR")

    first = results[0] if isinstance(results[0], dict) else {}
    text = str(first.get("ParsedText") or "")
    log_event(
        logger,
        "extraction.ocr.response",
        result_count=len(results),
        text_chars=len(text),
        duration_ms=monotonic_ms(start),
    )
    return text


def _first_message(value: Any) -> str | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value).strip() or None


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or "error"
    if isinstance(body, dict):
        return _first_message(body.get("ErrorMessage")) or resp.reason_phrase or "error"
    return resp.reason_phrase or "error"
