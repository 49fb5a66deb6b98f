from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from datetime import date

from py_ledgersync.application.ports import SequenceStore
from py_ledgersync.domain.errors import ValidationError

__all__ = ["AsyncSequenceGenerator", "strip_unique_tail"]

_PREFIX_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_UNIQUE_TAIL_RE = re.compile(r"-\d{2}$")


def strip_unique_tail(entry_number: str) -> str:
    """``JE-20250110-0001-03`` -> ``JE-20250110-0001``; other numbers are returned unchanged."""
    if entry_number.count("-") >= 3:
        return _UNIQUE_TAIL_RE.sub("", entry_number)
    return entry_number


def _as_int(value: str | None) -> int:
    if value is None or not str(value).strip():
        return 0
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"Sequence store holds a non-numeric counter: {value!r}") from exc


@dataclass(slots=True)
class AsyncSequenceGenerator:
    """Deterministic document and reference numbers backed by a SequenceStore.

    Counters are per ``(prefix, calendar day)``; the store keeps them across
    restarts. A lock serializes read-increment-write so interleaved coroutines
    never receive the same number from one generator.

    Key layout in the store:
    - ``seq:{PREFIX}:{YYYYMMDD}`` day counter used by ``next``/``doc_number``
    - ``display:{scope}:{YYYYMMDD}`` shared display number of the day
    - ``tail:{scope}:{YYYYMMDD}`` per-entry suffix counter
    - ``year:{PREFIX}:{YYYY}`` yearly counter for journal numbers
    """

    store: SequenceStore
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @staticmethod
    def _prefix(prefix: str) -> str:
        p = (prefix or "").strip().upper()
        if not _PREFIX_RE.match(p):
            raise ValidationError(f"Invalid sequence prefix: {prefix!r}")
        return p

    async def _increment(self, key: str) -> int:
        async with self._lock:
            value = _as_int(await self.store.get(key)) + 1
            await self.store.set(key, str(value))
            return value

    async def next(self, prefix: str, day: date) -> int:
        """Next integer for ``(prefix, day)``, starting at 1."""
        return await self._increment(f"seq:{self._prefix(prefix)}:{day:%Y%m%d}")

    async def doc_number(self, prefix: str, day: date) -> str:
        """``{PREFIX}-{YYYYMMDD}-{seq:04d}``"""
        p = self._prefix(prefix)
        seq = await self.next(p, day)
        return f"{p}-{day:%Y%m%d}-{seq:04d}"

    async def reference_number(self, day: date) -> str:
        return await self.doc_number("REF", day)

    async def movement_number(self, day: date) -> str:
        return await self.doc_number("MOV", day)

    async def display_number(self, scope: str, day: date, prefix: str = "JE") -> str:
        """One number per ``(scope, day)``: issued on first request, then returned unchanged."""
        key = f"display:{scope}:{day:%Y%m%d}"
        async with self._lock:
            existing = await self.store.get(key)
            if existing:
                return existing
        number = await self.doc_number(prefix, day)
        async with self._lock:
            # another coroutine may have issued the day's number meanwhile
            existing = await self.store.get(key)
            if existing:
                return existing
            await self.store.set(key, number)
            return number

    async def unique_tail(self, scope: str, day: date) -> str:
        value = await self._increment(f"tail:{scope}:{day:%Y%m%d}")
        return f"{value:02d}"

    async def entry_number(self, scope: str, day: date, prefix: str = "JE") -> str:
        """Display number plus unique tail, e.g. ``JE-20250110-0001-02``."""
        display = await self.display_number(scope, day, prefix)
        tail = await self.unique_tail(scope, day)
        return f"{display}-{tail}"

    async def journal_number(self, year: int, prefix: str = "J") -> str:
        """Yearly journal number ``J-{YYYY}-{seq:05d}``."""
        p = self._prefix(prefix)
        seq = await self._increment(f"year:{p}:{year:04d}")
        return f"{p}-{year:04d}-{seq:05d}"
