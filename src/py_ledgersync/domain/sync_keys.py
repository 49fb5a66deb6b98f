"""Content-derived idempotency keys and source-document detection for sync.

A key is ``date | reference-or-entry-number | account | debit | credit``
followed by optional discriminators. It depends only on row content, so the
same row produces the same key in every scan and after every restart.
"""
from __future__ import annotations

import re
from enum import Enum

from .rows import LedgerRow

__all__ = [
    "INVOICE_LOOKUP",
    "build_sync_key",
    "DocumentKind",
    "detect_document_kind",
]

INVOICE_LOOKUP = "inv-lookup"


def build_sync_key(row: LedgerRow, *extra: str) -> str:
    parts = [
        row.date.isoformat(),
        row.document_number,
        row.account,
        f"{row.debit:f}",
        f"{row.credit:f}",
    ]
    parts.extend(str(x) for x in extra if x not in (None, ""))
    return "|".join(parts)


class DocumentKind(str, Enum):
    SALES = "sales"
    PURCHASE = "purchase"


_SALES_REF = re.compile(r"^INV-\d{8}-\d{3,}$", re.IGNORECASE)
_PURCHASE_REF = re.compile(r"^(BILL|AP)-\d{8}-\d{3,}$", re.IGNORECASE)
_SALES_ACCOUNT = re.compile(r"^4\d{3}$")
_PURCHASE_ACCOUNT = re.compile(r"^(1200|2000|5\d{3})$")


def detect_document_kind(row: LedgerRow) -> DocumentKind | None:
    """Sales or purchase document implied by the row, by reference pattern first, then by account."""
    reference = row.reference.strip()
    if not reference:
        return None
    if _SALES_REF.match(reference):
        return DocumentKind.SALES
    if _PURCHASE_REF.match(reference):
        return DocumentKind.PURCHASE
    if _SALES_ACCOUNT.match(row.account):
        return DocumentKind.SALES
    if _PURCHASE_ACCOUNT.match(row.account):
        return DocumentKind.PURCHASE
    return None
