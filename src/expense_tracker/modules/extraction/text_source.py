from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from io import BytesIO
from typing import Literal

import httpx
from pypdf import PdfReader

from expense_tracker.core.logging import get_logger, log_event, log_exception
from expense_tracker.modules.extraction.ocr import ocr_available, recognize

logger = get_logger(__name__)

# Native PDF text shorter than this is treated as a scanned document.
MIN_NATIVE_TEXT_LENGTH = 50

PDF_MEDIA_TYPE = "application/pdf"
DEFAULT_IMAGE_MEDIA_TYPE = "image/png"


class TextSourceState(str, enum.Enum):
    NATIVE_ATTEMPT = "native_attempt"
    OCR_ATTEMPT = "ocr_attempt"
    UNAVAILABLE = "unavailable"
    DONE = "done"


@dataclass(frozen=True)
class ExtractedText:
    text: str
    method: Literal["native", "ocr", "unavailable"]
    page_count: int | None = None

    @property
    def unavailable(self) -> bool:
        return self.method == "unavailable"


UNAVAILABLE = ExtractedText(text="", method="unavailable")


def looks_like_pdf_bytes(body: bytes) -> bool:
    if not body:
        return False
    b = body.lstrip()
    if b.startswith(b"\xef\xbb\xbf"):
        b = b[3:].lstrip()
    return b.startswith(b"%PDF")


def ocr_media_type(*, is_pdf: bool, declared: str | None) -> str:
    if is_pdf:
        return PDF_MEDIA_TYPE
    ctype = (declared or "").split(";")[0].strip().lower()
    if ctype.startswith("image/") or ctype == PDF_MEDIA_TYPE:
        return ctype
    return DEFAULT_IMAGE_MEDIA_TYPE


def extract_native_text(body: bytes) -> ExtractedText:
    reader = PdfReader(BytesIO(body))
    pages: list[str] = []
    for page in reader.pages:
        text = (page.extract_text() or "").replace("\u202f", " ").replace("\xa0", " ")
        pages.append(text)
    # Unstripped: the length threshold counts the text layer as extracted.
    return ExtractedText(text="\n".join(pages), method="native", page_count=len(pages))


async def resolve_text(
    body: bytes,
    media_type: str | None = None,
    *,
    ocr_client: httpx.AsyncClient | None = None,
) -> ExtractedText:
    """
    Get the text of an uploaded receipt, preferring the PDF text layer over OCR.

    NATIVE_ATTEMPT -> OCR_ATTEMPT -> UNAVAILABLE, each step taken only when the
    previous one produced nothing usable. OCR failures propagate.
    """
    is_pdf = looks_like_pdf_bytes(body)
    state = _transition(
        None,
        TextSourceState.NATIVE_ATTEMPT if is_pdf else TextSourceState.OCR_ATTEMPT,
        reason="pdf_signature" if is_pdf else "not_pdf",
        declared_media_type=media_type,
    )

    if state is TextSourceState.NATIVE_ATTEMPT:
        native = await asyncio.to_thread(_try_native, body)
        if native is not None and len(native.text) >= MIN_NATIVE_TEXT_LENGTH:
            _transition(
                state,
                TextSourceState.DONE,
                reason="native_text",
                text_chars=len(native.text),
                page_count=native.page_count,
            )
            return native
        state = _transition(
            state,
            TextSourceState.OCR_ATTEMPT,
            reason="native_failed" if native is None else "native_insufficient",
            text_chars=len(native.text) if native is not None else None,
        )

    if not ocr_available():
        _transition(state, TextSourceState.UNAVAILABLE, reason="ocr_not_configured")
        return UNAVAILABLE

    text = await recognize(
        body, ocr_media_type(is_pdf=is_pdf, declared=media_type), client=ocr_client
    )
    _transition(state, TextSourceState.DONE, reason="ocr_text", text_chars=len(text))
    return ExtractedText(text=text, method="ocr")


def _try_native(body: bytes) -> ExtractedText | None:
    try:
        return extract_native_text(body)
    except Exception:
        log_exception(logger, "extraction.native.failed", byte_size=len(body))
        return None


def _transition(
    current: TextSourceState | None, target: TextSourceState, *, reason: str, **fields
) -> TextSourceState:
    log_event(
        logger,
        "extraction.text_source.transition",
        from_state=current.value if current else None,
        to_state=target.value,
        reason=reason,
        **fields,
    )
    return target
