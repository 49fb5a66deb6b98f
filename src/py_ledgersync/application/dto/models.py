from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from py_ledgersync.domain.quantize import ZERO, to_decimal

# Explicit public export surface for DTOs
__all__ = [
    "StockMovePayload",
    "CreatedMovementDTO",
    "SourceDocumentLineDTO",
    "SourceDocumentDTO",
    "SyncOutcome",
    "RowSyncResult",
    "SyncReport",
]


@dataclass(slots=True)
class StockMovePayload:
    """Stock movement handed to the inventory service.

    ``sync_key`` is the idempotency key the movement was created under; services
    that deduplicate on their side may use it.
    """

    date: date
    reference: str
    item_sku: str
    quantity: Decimal
    unit_cost: Decimal = ZERO
    uom: str = "pcs"
    from_warehouse: str | None = None
    to_warehouse: str | None = None
    status: str = "approved"
    memo: str = ""
    prepared_by: str = ""
    approved_by: str = ""
    move_number: str = ""
    sync_key: str = ""

    def to_mapping(self) -> dict[str, Any]:
        """camelCase wire form expected by inventory services."""
        return {
            "date": self.date.isoformat(),
            "reference": self.reference,
            "moveNo": self.move_number,
            "itemSku": self.item_sku,
            "qty": str(self.quantity),
            "uom": self.uom,
            "unitCost": str(self.unit_cost),
            "fromWhCode": self.from_warehouse,
            "toWhCode": self.to_warehouse,
            "status": self.status,
            "memo": self.memo,
            "participants": {
                "preparedBy": {"name": self.prepared_by},
                "approvedBy": {"name": self.approved_by},
            },
            "syncKey": self.sync_key,
        }


@dataclass(slots=True)
class CreatedMovementDTO:
    """Confirmation returned by the inventory service for a created movement."""

    id: str


@dataclass(slots=True)
class SourceDocumentLineDTO:
    sku: str
    quantity: Decimal
    unit_cost: Decimal = ZERO
    uom: str | None = None
    from_warehouse: str | None = None
    to_warehouse: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, purchase: bool = False) -> SourceDocumentLineDTO:
        item = data.get("item") if isinstance(data.get("item"), Mapping) else {}
        sku = data.get("sku") or data.get("itemSku") or item.get("sku") or ""
        cost = data.get("unitCost", data.get("cost"))
        if cost is None:
            cost = data.get("price") if purchase else data.get("cogs")
        return cls(
            sku=str(sku).strip(),
            quantity=abs(to_decimal(data.get("qty", data.get("quantity")))),
            unit_cost=abs(to_decimal(cost)),
            uom=(str(data["uom"]) if data.get("uom") else None),
            from_warehouse=(str(data["fromWhCode"]) if data.get("fromWhCode") else None),
            to_warehouse=(str(data["toWhCode"]) if data.get("toWhCode") else None),
        )


@dataclass(slots=True)
class SourceDocumentDTO:
    """Sales or purchase document (invoice/bill) a ledger row refers to."""

    number: str
    lines: list[SourceDocumentLineDTO] = field(default_factory=list)
    warehouse: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, purchase: bool = False) -> SourceDocumentDTO:
        return cls(
            number=str(data.get("number") or data.get("invoiceNo") or data.get("reference") or ""),
            lines=[SourceDocumentLineDTO.from_mapping(li, purchase=purchase) for li in data.get("lines") or []],
            warehouse=(str(data.get("warehouseCode") or data.get("warehouse") or "") or None),
        )


class SyncOutcome(str, Enum):
    CREATED = "created"
    ALREADY_APPLIED = "already_applied"
    IN_FLIGHT = "in_flight"
    FAILED = "failed"
    NOT_CANDIDATE = "not_candidate"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class RowSyncResult:
    key: str
    outcome: SyncOutcome
    movement_id: str | None = None
    posted: bool = False
    error: str | None = None


@dataclass(slots=True)
class SyncReport:
    """Outcome of one scan; failures are listed here instead of being raised."""

    results: list[RowSyncResult] = field(default_factory=list)
    cancelled: bool = False

    def _count(self, outcome: SyncOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def created(self) -> int:
        return self._count(SyncOutcome.CREATED)

    @property
    def skipped(self) -> int:
        return self._count(SyncOutcome.ALREADY_APPLIED) + self._count(SyncOutcome.IN_FLIGHT)

    @property
    def failed(self) -> int:
        return self._count(SyncOutcome.FAILED)

    @property
    def post_failures(self) -> int:
        return sum(1 for r in self.results if r.outcome is SyncOutcome.CREATED and r.error)
