from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from expense_tracker.modules.extraction.dates import normalize_date

_DATE_PATTERNS = (
    r"[0-9]{4}-[0-9]{2}-[0-9]{2}",  # 2024-03-05
    r"[0-9]{1,2}/[0-9]{1,2}/(?:[0-9]{4}|[0-9]{2})",  # 3/5/2024, 03/05/24
    r"[0-9]{1,2}-[A-Za-z]{3}-[0-9]{4}",  # 5-Mar-2024
)
_DATE_RE = re.compile(r"\b(" + "|".join(_DATE_PATTERNS) + r")\b")

# At most 12 integer digits; longer runs are reference numbers, not amounts.
_NUMBER = r"[0-9]{1,3}(?:,?[0-9]{3}){0,3}"
_CURRENCY_CODES = ("USD", "CAD", "EUR", "GBP", "AUD", "NZD", "CHF", "SGD", "HKD", "INR", "JPY")
_CURRENCY_CODE_ALT = "|".join(_CURRENCY_CODES)

_KEYWORD_AMOUNT_RE = re.compile(
    r"\b(?:grand\s+total|net\s+total|sub[\s-]?total|total|amount|sum|balance)\b"
    r"[\s:]*(?:[$£€]\s*)?"
    rf"({_NUMBER}(?:\.[0-9]{{1,2}})?)(?![0-9])",
    re.I,
)
_CURRENCY_AMOUNT_RE = re.compile(
    rf"[$£€]\s*({_NUMBER}\.[0-9]{{2}})(?![0-9])"
    rf"|(?<![0-9.,])({_NUMBER}\.[0-9]{{2}})\s*(?:{_CURRENCY_CODE_ALT})\b"
)
_LOOSE_AMOUNT_RE = re.compile(r"(?<![0-9.,])([0-9]{1,3}(?:,[0-9]{3})*\.[0-9]{2})(?![0-9])")

# Loose matches at or above this are more likely references, years or phone digits.
LOOSE_AMOUNT_CEILING = Decimal("10000")

VENDOR_SCAN_LINES = 20
_VENDOR_SKIP_WORDS = ("page", "invoice")


@dataclass(frozen=True)
class ExtractedFields:
    vendor: str | None
    date: str | None
    amount: str | None
    amount_strategy: str | None = None


def extract_fields(text: str) -> ExtractedFields:
    text = (text or "").replace("\u202f", " ").replace("\xa0", " ")
    amount, strategy = extract_amount(text)
    return ExtractedFields(
        vendor=extract_vendor(text),
        date=extract_date(text),
        amount=amount,
        amount_strategy=strategy,
    )


def extract_date(text: str) -> str | None:
    m = _DATE_RE.search(text or "")
    if not m:
        return None
    return normalize_date(m.group(1))


def _keyword_amounts(text: str) -> list[Decimal]:
    return _collect(m.group(1) for m in _KEYWORD_AMOUNT_RE.finditer(text))


def _currency_amounts(text: str) -> list[Decimal]:
    return _collect(m.group(1) or m.group(2) for m in _CURRENCY_AMOUNT_RE.finditer(text))


def _loose_amounts(text: str) -> list[Decimal]:
    values = _collect(m.group(1) for m in _LOOSE_AMOUNT_RE.finditer(text))
    return [v for v in values if v < LOOSE_AMOUNT_CEILING]


AMOUNT_STRATEGIES: tuple[tuple[str, Callable[[str], list[Decimal]]], ...] = (
    ("keyword", _keyword_amounts),
    ("currency", _currency_amounts),
    ("loose", _loose_amounts),
)


def extract_amount(text: str) -> tuple[str | None, str | None]:
    """
    Pick the receipt total as a two-decimal string, plus the strategy that found it.

    Strategies run in priority order and the first one with any candidate wins.
    Within it the largest value is taken: line items are smaller than the total.
    """
    for name, strategy in AMOUNT_STRATEGIES:
        candidates = strategy(text or "")
        if candidates:
            return str(max(candidates).quantize(Decimal("0.01"))), name
    return None, None


def extract_vendor(text: str) -> str | None:
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()]
    for ln in lines[:VENDOR_SCAN_LINES]:
        if _DATE_RE.search(ln):
            continue
        if _CURRENCY_AMOUNT_RE.search(ln) or _KEYWORD_AMOUNT_RE.search(ln):
            continue
        lowered = ln.lower()
        if any(word in lowered for word in _VENDOR_SKIP_WORDS):
            continue
        return ln
    return None


def _collect(raw_values) -> list[Decimal]:
    out: list[Decimal] = []
    for raw in raw_values:
        if not raw:
            continue
        try:
            value = Decimal(raw.replace(",", ""))
        except InvalidOperation:
            continue
        if value > 0:
            out.append(value)
    return out
