from __future__ import annotations

from expense_tracker.modules.extraction.fields import VENDOR_SCAN_LINES, extract_vendor


def test_vendor_skips_page_and_invoice_lines():
    text = "Page 1 of 2\nINVOICE #4471\nAcme Hardware Co.\nTotal: $42.50\n"
    assert extract_vendor(text) == "Acme Hardware Co."


def test_vendor_skips_dates_and_amount_lines():
    text = "\n  \n03/05/2024\n$12.00\nTotal 12.00\n  Corner Deli  \n"
    assert extract_vendor(text) == "Corner Deli"


def test_vendor_only_scans_leading_lines():
    filler = "\n".join(f"Page {i}" for i in range(VENDOR_SCAN_LINES))
    assert extract_vendor(filler + "\nLate Vendor\n") is None
    short = "\n".join(f"Page {i}" for i in range(VENDOR_SCAN_LINES - 1))
    assert extract_vendor(short + "\nLate Vendor\n") == "Late Vendor"


def test_vendor_none_for_empty_text():
    assert extract_vendor("") is None
