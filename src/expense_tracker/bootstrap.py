from __future__ import annotations

import expense_tracker.models  # noqa: F401
from expense_tracker.core.config import settings
from expense_tracker.core.db import engine
from expense_tracker.core.logging import get_logger, log_event
from expense_tracker.core.models import Base
from expense_tracker.modules.extraction.ocr import ocr_available

logger = get_logger(__name__)


def bootstrap() -> None:
    if settings.environment in {"dev", "test"} and str(settings.database_url).startswith("sqlite"):
        Base.metadata.create_all(engine)

    log_event(
        logger,
        "app.bootstrap",
        environment=settings.environment,
        ocr_configured=ocr_available(),
    )
