from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from py_ledgersync.application.dto.models import (
    CreatedMovementDTO,
    RowSyncResult,
    SourceDocumentDTO,
    StockMovePayload,
    SyncOutcome,
    SyncReport,
)
from py_ledgersync.application.ports import DocumentResolver, InventoryMovementService, SyncKeyStore
from py_ledgersync.application.use_cases_async.sequences import AsyncSequenceGenerator
from py_ledgersync.domain.directives import InventoryDirective, MovementKind, normalize_directive, parse_row_directive
from py_ledgersync.domain.rows import LedgerRow
from py_ledgersync.domain.sync_keys import INVOICE_LOOKUP, DocumentKind, build_sync_key, detect_document_kind
from py_ledgersync.infrastructure.config.settings import get_settings
from py_ledgersync.infrastructure.logging.config import get_logger

__all__ = ["CancellationToken", "AsyncInventorySync"]

_DEFAULT_MEMO = {
    MovementKind.ISSUE: "Auto from GL (sale)",
    MovementKind.RECEIPT: "Auto from GL (purchase)",
    MovementKind.TRANSFER: "Auto from GL (transfer)",
}


@dataclass(slots=True)
class CancellationToken:
    """Set once the row set a scan works on has been superseded."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


def _movement_id(created: CreatedMovementDTO | Mapping[str, Any] | None) -> str:
    if isinstance(created, CreatedMovementDTO):
        value: Any = created.id
    elif isinstance(created, Mapping):
        value = created.get("id") or created.get("_id")
    else:
        value = getattr(created, "id", None)
    if not value:
        raise ValueError("Inventory service did not return a movement id")
    return str(value)


@dataclass(slots=True)
class AsyncInventorySync:
    """Scan ledger rows and create the inventory movements they imply, at most once each.

    Contract:
      AsyncInventorySync(movements, sync_keys, resolver=None, sequences=None)(rows, token=None) -> SyncReport

    Per row:
      1. Parse a directive from the memo, then the reference. A complete
         directive yields one movement keyed by the row content plus the
         directive discriminator (item, quantity, cost, warehouses).
      2. Without a directive, a reference naming a sales/purchase document
         (or an account implying one) is resolved and every document line
         becomes a movement with its own per-line key. The row-level lookup
         key is recorded once all lines are applied.
      3. Recorded keys are skipped. The key is recorded right after the
         inventory service confirms creation, before the optional post call,
         so a failing post never leads to a second movement. A failed create
         leaves the key unrecorded and the next scan retries.

    Failures are logged and listed in the report; they never propagate.
    The token is checked after every awaited step; once cancelled the scan
    issues no further calls.
    """

    movements: InventoryMovementService
    sync_keys: SyncKeyStore
    resolver: DocumentResolver | None = None
    sequences: AsyncSequenceGenerator | None = None
    actor: str | None = None
    default_warehouse: str | None = None
    default_uom: str | None = None
    auto_post: bool | None = None
    remember_missing_documents: bool | None = None
    _in_flight: set[str] = field(default_factory=set, repr=False)
    _log: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        s = get_settings()
        self.actor = self.actor or s.sync_actor
        self.default_warehouse = self.default_warehouse or s.default_warehouse
        self.default_uom = self.default_uom or s.default_uom
        if self.auto_post is None:
            self.auto_post = s.sync_auto_post
        if self.remember_missing_documents is None:
            self.remember_missing_documents = s.sync_remember_missing_documents
        self._log = get_logger("py_ledgersync.sync")

    async def __call__(self, rows: Iterable[LedgerRow], token: CancellationToken | None = None) -> SyncReport:
        token = token or CancellationToken()
        report = SyncReport()
        for row in tuple(rows):
            if token.cancelled:
                break
            directive = normalize_directive(
                parse_row_directive(row.memo, row.reference),
                default_warehouse=self.default_warehouse or "MAIN",
            )
            if directive is not None:
                await self._sync_directive(row, directive, token, report)
            else:
                await self._sync_document(row, token, report)
        if token.cancelled:
            report.cancelled = True
            self._log.info("inventory_sync.cancelled", processed=len(report.results))
        return report

    async def _sync_directive(
        self, row: LedgerRow, directive: InventoryDirective, token: CancellationToken, report: SyncReport
    ) -> None:
        key = build_sync_key(row, directive.discriminator)

        async def payload() -> StockMovePayload:
            return StockMovePayload(
                date=row.date,
                reference=row.document_number,
                item_sku=directive.item_sku,
                quantity=directive.quantity,
                unit_cost=directive.unit_cost,
                uom=directive.uom or self.default_uom or "pcs",
                from_warehouse=directive.from_warehouse,
                to_warehouse=directive.to_warehouse,
                memo=directive.memo or _DEFAULT_MEMO[directive.kind],
                prepared_by=directive.prepared_by or self.actor or "",
                approved_by=directive.approved_by or self.actor or "",
                move_number=await self._move_number(row),
                sync_key=key,
            )

        await self._apply(key, payload, token, report)

    async def _sync_document(self, row: LedgerRow, token: CancellationToken, report: SyncReport) -> None:
        kind = detect_document_kind(row)
        if kind is None or self.resolver is None:
            return
        lookup_key = build_sync_key(row, INVOICE_LOOKUP)
        if lookup_key in self._in_flight:
            report.results.append(RowSyncResult(lookup_key, SyncOutcome.IN_FLIGHT))
            return
        # claimed before the first await so an overlapping scan sees it
        self._in_flight.add(lookup_key)
        try:
            if await self.sync_keys.contains(lookup_key):
                report.results.append(RowSyncResult(lookup_key, SyncOutcome.ALREADY_APPLIED))
                return
            if token.cancelled:
                return
            try:
                raw = await self.resolver.get_document_by_reference(row.reference)
            except Exception as exc:
                self._log.warning("inventory_sync.resolve_failed", key=lookup_key, reference=row.reference, error=str(exc))
                report.results.append(RowSyncResult(lookup_key, SyncOutcome.FAILED, error=str(exc)))
                return
            if token.cancelled:
                return
            if raw is None:
                self._log.debug("inventory_sync.document_missing", reference=row.reference)
                if self.remember_missing_documents:
                    await self.sync_keys.add(lookup_key)
                report.results.append(RowSyncResult(lookup_key, SyncOutcome.NOT_CANDIDATE))
                return
            purchase = kind is DocumentKind.PURCHASE
            doc = raw if isinstance(raw, SourceDocumentDTO) else SourceDocumentDTO.from_mapping(raw, purchase=purchase)
            number = doc.number or row.reference
            complete = True
            for line in doc.lines:
                if token.cancelled:
                    complete = False
                    break
                if not line.sku or line.quantity == 0:
                    continue
                warehouse = doc.warehouse or self.default_warehouse
                if purchase:
                    source, target = line.from_warehouse, line.to_warehouse or warehouse
                else:
                    source, target = line.from_warehouse or warehouse, line.to_warehouse
                discriminator = f"{line.sku}:{line.quantity.normalize():f}:{line.unit_cost.normalize():f}:{source or ''}:{target or ''}"
                line_key = build_sync_key(row, discriminator)

                async def payload(line=line, source=source, target=target, line_key=line_key) -> StockMovePayload:
                    return StockMovePayload(
                        date=row.date,
                        reference=number,
                        item_sku=line.sku,
                        quantity=line.quantity,
                        unit_cost=line.unit_cost,
                        uom=line.uom or self.default_uom or "pcs",
                        from_warehouse=source,
                        to_warehouse=target,
                        memo=f"{'Purchase' if purchase else 'Sales'} invoice {number}",
                        prepared_by=self.actor or "",
                        approved_by=self.actor or "",
                        move_number=await self._move_number(row),
                        sync_key=line_key,
                    )

                applied = await self._apply(line_key, payload, token, report)
                complete = complete and applied
            if complete and not token.cancelled:
                await self.sync_keys.add(lookup_key)
        finally:
            self._in_flight.discard(lookup_key)

    async def _move_number(self, row: LedgerRow) -> str:
        if self.sequences is None:
            return ""
        return await self.sequences.movement_number(row.date)

    async def _apply(
        self,
        key: str,
        build_payload: Callable[[], Awaitable[StockMovePayload]],
        token: CancellationToken,
        report: SyncReport,
    ) -> bool:
        """Create (and post) one movement under ``key``; True once the effect exists."""
        if key in self._in_flight:
            report.results.append(RowSyncResult(key, SyncOutcome.IN_FLIGHT))
            return False
        self._in_flight.add(key)
        try:
            if await self.sync_keys.contains(key):
                self._log.debug("inventory_sync.skip_applied", key=key)
                report.results.append(RowSyncResult(key, SyncOutcome.ALREADY_APPLIED))
                return True
            if token.cancelled:
                report.results.append(RowSyncResult(key, SyncOutcome.CANCELLED))
                return False
            try:
                payload = await build_payload()
                if token.cancelled:
                    report.results.append(RowSyncResult(key, SyncOutcome.CANCELLED))
                    return False
                movement_id = _movement_id(await self.movements.create_movement(payload))
            except Exception as exc:
                self._log.warning("inventory_sync.create_failed", key=key, error=str(exc))
                report.results.append(RowSyncResult(key, SyncOutcome.FAILED, error=str(exc)))
                return False
            try:
                await self.sync_keys.add(key)
            except Exception as exc:
                self._log.error("inventory_sync.record_failed", key=key, movement_id=movement_id, error=str(exc))
                report.results.append(RowSyncResult(key, SyncOutcome.FAILED, movement_id=movement_id, error=str(exc)))
                return False
            result = RowSyncResult(key, SyncOutcome.CREATED, movement_id=movement_id)
            report.results.append(result)
            self._log.info(
                "inventory_sync.created",
                key=key,
                movement_id=movement_id,
                sku=payload.item_sku,
                qty=str(payload.quantity),
                from_wh=payload.from_warehouse,
                to_wh=payload.to_warehouse,
            )
            if token.cancelled or not self.auto_post:
                return True
            try:
                await self.movements.post_movement(movement_id, self.actor or "")
                result.posted = True
            except Exception as exc:
                result.error = str(exc)
                self._log.warning("inventory_sync.post_failed", key=key, movement_id=movement_id, error=str(exc))
            return True
        finally:
            self._in_flight.discard(key)
