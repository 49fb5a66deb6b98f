from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from py_ledgersync.application.ports import Clock


class SystemClock(Clock):  # type: ignore[misc]
    """Wall clock in UTC; participant stamps and default entry dates come from here."""

    def now(self) -> datetime:
        return datetime.now(UTC)


@dataclass
class FixedClock(Clock):  # type: ignore[misc]
    """Clock frozen at ``at`` until moved with ``advance``."""

    at: datetime

    def now(self) -> datetime:
        return self.at

    def advance(self, delta: timedelta) -> datetime:
        self.at = self.at + delta
        return self.at
