"""
Normalize date tokens found on receipts to ``YYYY-MM-DD``.

Numeric tokens with the year last are read month-first (US convention). There is
no locale signal on a receipt to tell ``03/05/2024`` apart from 3 May, so
day-first receipts come out with month and day swapped. Known limitation.
"""

from __future__ import annotations

from datetime import date, datetime

_GENERIC_FORMATS = (
    "%d-%b-%Y",  # 5-Mar-2024
    "%d-%B-%Y",  # 5-March-2024
    "%d %b %Y",  # 5 Mar 2024
    "%d %B %Y",  # 5 March 2024
    "%b %d, %Y",  # Mar 5, 2024
    "%B %d, %Y",  # March 5, 2024
)

# Two-digit years below this pivot belong to the 2000s, the rest to the 1900s.
TWO_DIGIT_YEAR_PIVOT = 30


def normalize_date(raw: str) -> str:
    """
    Return ``raw`` as a canonical ``YYYY-MM-DD`` string when it can be read.

    Never raises. When nothing matches, the input comes back with ``/`` replaced by
    ``-`` so callers must still treat the value as possibly non-canonical.
    """
    token = (raw or "").strip()
    normalized = token.replace("/", "-")
    parts = normalized.split("-")

    if len(parts) == 3:
        first, middle, last = parts
        if len(first) == 4 and first.isdigit():
            return normalized
        if first.isdigit() and middle.isdigit() and last.isdigit():
            if len(last) == 4:
                return _format_month_first(first, middle, last) or normalized
            if len(last) == 2:
                year = _expand_two_digit_year(last)
                return _format_month_first(first, middle, year) or normalized

    parsed = _parse_generic(token)
    if parsed:
        return parsed.isoformat()
    return normalized


def parse_canonical_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _expand_two_digit_year(yy: str) -> str:
    century = "20" if int(yy) < TWO_DIGIT_YEAR_PIVOT else "19"
    return century + yy


def _format_month_first(month: str, day: str, year: str) -> str | None:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def _parse_generic(token: str) -> date | None:
    for fmt in _GENERIC_FORMATS:
        try:
            return datetime.strptime(token, fmt).date()
        except ValueError:
            continue
    return None
