"""Money quantization and lenient amount coercion.

money_quantize follows MONEY_SCALE / ROUNDING from settings. to_amount turns
wire values (numbers, numeric strings, None, garbage) into non-negative
Decimals without raising; callers decide whether zero is meaningful.
"""
from __future__ import annotations

import decimal as dec
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from py_ledgersync.infrastructure.config.settings import get_settings

__all__ = [
    "ZERO",
    "money_quantize",
    "to_decimal",
    "to_amount",
    "balance_epsilon",
    "format_amount",
]

ZERO = Decimal("0")


def _make_quant(scale: int) -> Decimal:
    # Decimal tuple: sign=0, digits=(1,), exponent=-scale -> 10^-scale
    return Decimal((0, (1,), -scale))


def money_quantize(value: Decimal) -> Decimal:
    s = get_settings()
    quant = _make_quant(s.money_scale)
    rounding_mode = getattr(dec, s.rounding, ROUND_HALF_UP)
    return value.quantize(quant, rounding=rounding_mode)


def balance_epsilon() -> Decimal:
    """Absolute tolerance used by every balance comparison."""
    return get_settings().balance_epsilon


def to_decimal(value: Any) -> Decimal:
    """Convert to a finite Decimal; anything unparsable becomes zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        d = value
    else:
        text = str(value).strip().replace(" ", "")
        if not text:
            return ZERO
        # "1.234,50" and "1234,50" style inputs
        if "," in text and "." in text:
            text = text.replace(".", "").replace(",", ".")
        elif "," in text:
            text = text.replace(",", ".")
        try:
            d = Decimal(text)
        except InvalidOperation:
            return ZERO
    if not d.is_finite():
        return ZERO
    return d


def to_amount(value: Any) -> Decimal:
    """Non-negative amount; negatives clamp to zero."""
    d = to_decimal(value)
    return d if d > 0 else ZERO


def format_amount(value: Decimal) -> str:
    """Two decimals with a comma decimal separator, e.g. ``1234,50``."""
    return f"{money_quantize(value):.2f}".replace(".", ",")
