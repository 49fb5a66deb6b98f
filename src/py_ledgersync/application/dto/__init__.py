from .models import (
    CreatedMovementDTO,
    RowSyncResult,
    SourceDocumentDTO,
    SourceDocumentLineDTO,
    StockMovePayload,
    SyncOutcome,
    SyncReport,
)

__all__ = [
    "CreatedMovementDTO",
    "RowSyncResult",
    "SourceDocumentDTO",
    "SourceDocumentLineDTO",
    "StockMovePayload",
    "SyncOutcome",
    "SyncReport",
]
