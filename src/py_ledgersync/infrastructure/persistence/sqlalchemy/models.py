"""
SQLAlchemy ORM schema declarations only (tables, columns, indexes).
No business logic, helpers, or factory functions should live here.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CounterORM(Base):
    """Sequence counters and issued display numbers, keyed by scope."""

    __tablename__ = "ledger_counters"
    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=func.now(), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class SyncRecordORM(Base):
    """Idempotency markers of applied cross-module effects (append-only)."""

    __tablename__ = "sync_records"
    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=func.now(), server_default=func.now(), nullable=False
    )
