from __future__ import annotations

import uuid
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, model_serializer
from pydantic.alias_generators import to_camel

from expense_tracker.modules.expenses.models import DEFAULT_CATEGORY
from expense_tracker.modules.expenses.schemas import DuplicateCandidate
from expense_tracker.modules.extraction.dates import parse_canonical_date

# Omitted from the JSON body unless set.
_OPTIONAL_KEYS = ("error", "isDuplicate", "duplicateId", "is_duplicate", "duplicate_id")


class ParsedReceipt(BaseModel):
    """Best-effort fields recovered from a receipt, used to pre-fill the expense form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    vendor: str | None = None
    date: str | None = None
    amount: str | None = None
    category: str = DEFAULT_CATEGORY
    error: str | None = None
    is_duplicate: bool | None = None
    duplicate_id: uuid.UUID | None = None

    @model_serializer(mode="wrap")
    def omit_unset_optionals(self, handler):
        data = handler(self)
        for key in _OPTIONAL_KEYS:
            if key in data and data[key] is None:
                del data[key]
        return data

    def duplicate_candidate(self) -> DuplicateCandidate | None:
        if not self.vendor or not self.amount:
            return None
        parsed_date = parse_canonical_date(self.date)
        if parsed_date is None:
            return None
        try:
            amount = Decimal(self.amount)
        except InvalidOperation:
            return None
        return DuplicateCandidate(amount=amount, date=parsed_date, vendor=self.vendor)
