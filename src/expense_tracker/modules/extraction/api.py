from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from expense_tracker.api.deps import get_current_user
from expense_tracker.core.config import settings
from expense_tracker.core.db import db_session
from expense_tracker.core.logging import bind_parse_session, get_logger, log_event, log_exception
from expense_tracker.modules.expenses.service import find_duplicate
from expense_tracker.modules.extraction.inflight import (
    ClientDisconnected,
    ParseSuperseded,
    await_unless_disconnected,
    inflight_parses,
)
from expense_tracker.modules.extraction.ocr import OcrError
from expense_tracker.modules.extraction.schemas import ParsedReceipt
from expense_tracker.modules.extraction.service import parse_receipt
from expense_tracker.modules.identity.models import User

router = APIRouter(prefix="/expenses", tags=["extraction"])
logger = get_logger(__name__)

CLIENT_SESSION_HEADER = "x-client-session"
# nginx convention for "client closed request"; never actually reaches the client.
CLIENT_CLOSED_REQUEST = 499


async def read_upload(upload: UploadFile, *, limit: int) -> bytes:
    """Read an upload, refusing with 413 once it is known to exceed ``limit`` bytes."""
    if upload.size is not None and upload.size > limit:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")
    body = await upload.read(limit + 1)
    if len(body) > limit:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")
    return body


@router.post("/parse", response_model=ParsedReceipt)
async def parse_receipt_endpoint(
    request: Request,
    receipt: UploadFile | None = File(None),
    session: Session = Depends(db_session),
    user: User = Depends(get_current_user),
) -> ParsedReceipt:
    if receipt is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    body = await read_upload(receipt, limit=settings.max_upload_bytes)
    log_event(
        logger,
        "upload.received",
        filename=receipt.filename or "upload.bin",
        content_type=receipt.content_type,
        byte_size=len(body),
    )
    if not body:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty"
        )

    session_key = f"{user.id}:{request.headers.get(CLIENT_SESSION_HEADER) or user.id}"
    with bind_parse_session(session_key):
        task = inflight_parses.start(session_key, parse_receipt(body, receipt.content_type))
    try:
        parsed = await await_unless_disconnected(task, request.is_disconnected)
    except ParseSuperseded as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Superseded by a newer parse request",
        ) from e
    except ClientDisconnected as e:
        raise HTTPException(
            status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request"
        ) from e
    except OcrError as e:
        log_exception(
            logger,
            "extraction.parse.failed",
            error_type=e.__class__.__name__,
            content_type=receipt.content_type,
            byte_size=len(body),
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Error parsing receipt"
        ) from e

    candidate = parsed.duplicate_candidate()
    if candidate is None:
        return parsed
    match = await run_in_threadpool(find_duplicate, session, user_id=user.id, candidate=candidate)
    return parsed.model_copy(
        update={"is_duplicate": match is not None, "duplicate_id": match.id if match else None}
    )
