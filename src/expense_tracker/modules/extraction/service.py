from __future__ import annotations

import time

import httpx

from expense_tracker.core.logging import get_logger, log_event, monotonic_ms
from expense_tracker.modules.extraction.fields import extract_fields
from expense_tracker.modules.extraction.schemas import ParsedReceipt
from expense_tracker.modules.extraction.text_source import resolve_text

logger = get_logger(__name__)

OCR_UNAVAILABLE_MESSAGE = (
    "File detected but OCR is not configured, so the receipt could not be read. "
    "Fill in the expense manually, or set OCR_SPACE_API_KEY to enable OCR."
)


async def parse_receipt(
    body: bytes,
    media_type: str | None = None,
    *,
    ocr_client: httpx.AsyncClient | None = None,
) -> ParsedReceipt:
    start = time.monotonic()
    log_event(
        logger,
        "extraction.parse.start",
        byte_size=len(body),
        content_type=media_type,
    )

    extracted = await resolve_text(body, media_type, ocr_client=ocr_client)
    if extracted.unavailable:
        log_event(
            logger,
            "extraction.parse.finish",
            status="degraded",
            reason="ocr_not_configured",
            duration_ms=monotonic_ms(start),
        )
        return ParsedReceipt(error=OCR_UNAVAILABLE_MESSAGE)

    fields = extract_fields(extracted.text)
    receipt = ParsedReceipt(vendor=fields.vendor, date=fields.date, amount=fields.amount)
    log_event(
        logger,
        "extraction.parse.finish",
        status="ok",
        method=extracted.method,
        page_count=extracted.page_count,
        text_chars=len(extracted.text),
        has_vendor=fields.vendor is not None,
        has_date=fields.date is not None,
        has_amount=fields.amount is not None,
        amount_strategy=fields.amount_strategy,
        duration_ms=monotonic_ms(start),
    )
    return receipt
