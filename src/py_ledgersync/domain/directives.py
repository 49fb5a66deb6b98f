"""Inventory directives embedded in memo/reference text.

Two encodings are recognised, tried in this order:

- ``INV { "sku": "A-1", "qty": 5, "fromWh": "MAIN", "toWh": "B" }`` (JSON
  object literal; bare keys and single quotes are tolerated)
- ``INV: sku=A-1; qty=5; dir=out`` (pairs separated by ``;``, ``|`` or ``,``)

Parsing yields a tagged union: NoDirective, JsonDirective or
KeyValueDirective. Malformed text is never an error, just NoDirective.
``normalize_directive`` maps either variant to one InventoryDirective.
"""
from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from .quantize import ZERO, to_decimal

__all__ = [
    "NoDirective",
    "JsonDirective",
    "KeyValueDirective",
    "ParsedDirective",
    "NO_DIRECTIVE",
    "Direction",
    "MovementKind",
    "InventoryDirective",
    "parse_directive",
    "parse_row_directive",
    "normalize_directive",
]


@dataclass(slots=True, frozen=True)
class NoDirective:
    pass


@dataclass(slots=True, frozen=True)
class JsonDirective:
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class KeyValueDirective:
    fields: Mapping[str, str] = field(default_factory=dict)


ParsedDirective = NoDirective | JsonDirective | KeyValueDirective

NO_DIRECTIVE = NoDirective()

_JSON_TAG = re.compile(r"INV\s*\{([^}]*)\}", re.IGNORECASE)
_KV_TAG = re.compile(r"INV\s*:\s*(.+)$", re.IGNORECASE | re.DOTALL)
_KV_SPLIT = re.compile(r"[;|,]")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")


def _load_object(body: str) -> dict[str, Any] | None:
    text = "{" + body + "}"
    candidates = (text, _BARE_KEY.sub(r'\1"\2":', text.replace("'", '"')))
    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except ValueError:
            continue
        return value if isinstance(value, dict) else None
    return None


def parse_directive(text: str | None) -> ParsedDirective:
    if not text or "INV" not in text.upper():
        return NO_DIRECTIVE
    m = _JSON_TAG.search(text)
    if m:
        obj = _load_object(m.group(1))
        if obj:
            return JsonDirective(fields=obj)
    m = _KV_TAG.search(text)
    if m:
        pairs: dict[str, str] = {}
        for chunk in _KV_SPLIT.split(m.group(1)):
            key, sep, value = chunk.partition("=")
            key, value = key.strip(), value.strip()
            if not sep or not key or not value:
                continue
            pairs[key] = value
        if pairs:
            return KeyValueDirective(fields=pairs)
    return NO_DIRECTIVE


def parse_row_directive(memo: str | None, reference: str | None) -> ParsedDirective:
    """Memo first, then reference; the first text carrying a directive wins."""
    parsed = parse_directive(memo)
    if isinstance(parsed, NoDirective):
        parsed = parse_directive(reference)
    return parsed


class Direction(str, Enum):
    IN = "in"
    OUT = "out"


class MovementKind(str, Enum):
    RECEIPT = "receipt"
    ISSUE = "issue"
    TRANSFER = "transfer"


@dataclass(slots=True, frozen=True)
class InventoryDirective:
    item_sku: str
    quantity: Decimal
    unit_cost: Decimal = ZERO
    from_warehouse: str | None = None
    to_warehouse: str | None = None
    uom: str | None = None
    memo: str | None = None
    prepared_by: str | None = None
    approved_by: str | None = None

    @property
    def kind(self) -> MovementKind:
        if self.from_warehouse and self.to_warehouse:
            return MovementKind.TRANSFER
        if self.from_warehouse:
            return MovementKind.ISSUE
        return MovementKind.RECEIPT

    @property
    def direction(self) -> Direction | None:
        kind = self.kind
        if kind is MovementKind.ISSUE:
            return Direction.OUT
        if kind is MovementKind.RECEIPT:
            return Direction.IN
        return None

    @property
    def discriminator(self) -> str:
        """Directive-specific part of the idempotency key."""
        return f"{self.item_sku}:{self.quantity.normalize():f}:{self.unit_cost.normalize():f}:{self.from_warehouse or ''}:{self.to_warehouse or ''}"


def _pick(fields: Mapping[str, Any], *names: str) -> str | None:
    for name in names:
        value = fields.get(name.lower())
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def normalize_directive(parsed: ParsedDirective, *, default_warehouse: str = "MAIN") -> InventoryDirective | None:
    """Canonical directive, or None when item, quantity or a warehouse cannot be resolved.

    ``dir=out`` issues from ``fromWh``/``from``/``wh`` (default warehouse if none);
    ``dir=in`` receives into ``toWh``/``to``/``wh``. Without ``dir`` the explicit
    ``fromWh``/``toWh`` pair decides: both set is a transfer.
    """
    if isinstance(parsed, NoDirective):
        return None
    fields = {str(k).strip().lower(): v for k, v in parsed.fields.items()}
    sku = _pick(fields, "sku", "item", "itemSku")
    quantity = abs(to_decimal(_pick(fields, "qty", "quantity")))
    if not sku or quantity == 0:
        return None
    direction = (_pick(fields, "dir", "direction") or "").lower()
    wh = _pick(fields, "wh", "warehouse")
    explicit_from = _pick(fields, "fromWh", "from")
    explicit_to = _pick(fields, "toWh", "to")
    if direction == Direction.OUT.value:
        source, target = explicit_from or wh or default_warehouse, explicit_to
    elif direction == Direction.IN.value:
        source, target = explicit_from, explicit_to or wh or default_warehouse
    else:
        source, target = explicit_from, explicit_to
    if not source and not target:
        return None
    return InventoryDirective(
        item_sku=sku,
        quantity=quantity,
        unit_cost=abs(to_decimal(_pick(fields, "cost", "unitCost"))),
        from_warehouse=source,
        to_warehouse=target,
        uom=_pick(fields, "uom"),
        memo=_pick(fields, "memo"),
        prepared_by=_pick(fields, "preparedBy"),
        approved_by=_pick(fields, "approvedBy"),
    )
