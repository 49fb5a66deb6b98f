"""JSON presenter for the py_ledgersync SDK.

- to_dict(obj): convert nested structures to JSON-safe forms.
  Decimal -> str (quantization preserved), date -> ISO date,
  datetime -> UTC ISO8601 with ``Z``, Enum -> value, dataclasses -> dict.
- to_json(data): json.dumps with ensure_ascii=False, compact separators, stable key order.
"""
from __future__ import annotations

import json as _json
from dataclasses import fields, is_dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

__all__ = ["to_dict", "to_json"]


def _is_primitive(x: Any) -> bool:
    return isinstance(x, (str, int, float, bool)) or x is None


def _serialize_datetime(dt: datetime) -> str:
    """Serialize datetime to UTC ISO8601 with trailing 'Z'. Naive -> UTC."""
    dt = dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)
    dt = dt.replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def to_dict(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if _is_primitive(obj):
        return obj
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return _serialize_datetime(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_dict(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): to_dict(v) for k, v in obj.items()}
    if is_dataclass(obj) and not isinstance(obj, type):
        # fields() instead of asdict(): slotted frozen dataclasses may hold mappingproxy-like values
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj) if not f.name.startswith("_")}
    if hasattr(obj, "__dict__"):
        return {k: to_dict(v) for k, v in vars(obj).items() if not k.startswith("_")}
    return str(obj)


def to_json(data: Any) -> str:
    """Dump input as deterministic JSON string using to_dict normalization."""
    return _json.dumps(to_dict(data), ensure_ascii=False, separators=(",", ":"), sort_keys=True)
