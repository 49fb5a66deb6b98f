from __future__ import annotations

from decimal import Decimal

import pytest

from py_ledgersync.domain.errors import UnbalancedEntryError, ValidationError
from py_ledgersync.domain.ledger import DoubleEntryValidator, EntryLine


def _lines(*specs: tuple[str | None, str, str]) -> list[EntryLine]:
    return [EntryLine(account=a, debit=Decimal(d), credit=Decimal(c)) for a, d, c in specs]


def test_balanced_entry_is_accepted() -> None:
    result = DoubleEntryValidator().validate(_lines(("6000", "250", "0"), ("1000", "0", "250")))
    assert result.ok
    assert result.totals is not None
    assert result.totals.debit == Decimal("250")
    assert result.totals.difference == 0


def test_unbalanced_entry_is_rejected_with_reason() -> None:
    result = DoubleEntryValidator().validate(_lines(("6000", "250", "0"), ("1000", "0", "200")))
    assert not result
    assert "not balanced" in (result.reason or "")


def test_difference_below_epsilon_passes() -> None:
    lines = _lines(("6000", "100.004", "0"), ("1000", "0", "100"))
    assert DoubleEntryValidator().validate(lines).ok
    assert not DoubleEntryValidator(epsilon=Decimal("0.001")).validate(lines).ok


def test_line_with_both_sides_is_rejected() -> None:
    result = DoubleEntryValidator().validate(_lines(("6000", "10", "10"), ("1000", "0", "0")))
    assert not result.ok
    assert "both debit and credit" in (result.reason or "")


def test_amount_without_account_is_rejected() -> None:
    result = DoubleEntryValidator().validate(_lines((None, "10", "0"), ("1000", "0", "10")))
    assert not result.ok
    assert "account is required" in (result.reason or "")


def test_blank_lines_are_ignored_but_two_amount_lines_required() -> None:
    validator = DoubleEntryValidator()
    assert validator.validate(_lines(("6000", "5", "0"), (None, "0", "0"), ("1000", "0", "5"))).ok
    assert not validator.validate(_lines(("6000", "0", "0"), ("1000", "0", "0"))).ok


def test_negative_amounts_clamp_to_zero() -> None:
    lines = [
        {"account": "6000", "debit": "-50"},
        {"account": "1000", "credit": "50"},
        {"account": "2000", "debit": "50"},
    ]
    assert DoubleEntryValidator().validate(lines).ok


def test_foreign_currency_checked_in_base_currency() -> None:
    validator = DoubleEntryValidator(base_currency="DKK")
    lines = [
        {"account": "1100", "debit": "100", "currency": "EUR", "fxRate": "7.46"},
        {"account": "4000", "credit": "746"},
    ]
    result = validator.validate(lines)
    # debit 100 vs credit 746 in transaction units
    assert not result.ok

    balanced = [
        {"account": "1100", "debit": "100", "fxRate": "7.46"},
        {"account": "4000", "credit": "100", "fxRate": "7.45"},
    ]
    result = validator.validate(balanced)
    assert not result.ok
    assert "DKK" in (result.reason or "")


def test_entry_rate_applies_to_lines_without_own_rate() -> None:
    result = DoubleEntryValidator().validate(
        [{"account": "1100", "debit": "10"}, {"account": "4000", "credit": "10"}],
        entry_rate="7.5",
        currency="eur",
    )
    assert result.ok
    assert result.totals is not None
    assert result.totals.base_debit == Decimal("75.00")
    assert all(line.currency == "EUR" for line in result.lines)


def test_non_positive_rate_rejected() -> None:
    validator = DoubleEntryValidator()
    lines = [{"account": "1100", "debit": "10"}, {"account": "4000", "credit": "10"}]
    assert not validator.validate(lines, entry_rate="0").ok
    bad_line = [{"account": "1100", "debit": "10", "fxRate": "-1"}, {"account": "4000", "credit": "10"}]
    assert not validator.validate(bad_line).ok


def test_ensure_valid_raises_typed_errors() -> None:
    validator = DoubleEntryValidator()
    with pytest.raises(UnbalancedEntryError):
        validator.ensure_valid(_lines(("6000", "10", "0"), ("1000", "0", "9")))
    with pytest.raises(ValidationError):
        validator.ensure_valid(_lines(("6000", "10", "0")))


def test_quick_entry_produces_balanced_pair() -> None:
    lines = DoubleEntryValidator.quick_entry("6000 Rent", "1000", "1200")
    assert [(li.account, li.debit, li.credit) for li in lines] == [
        ("6000", Decimal("1200"), Decimal("0")),
        ("1000", Decimal("0"), Decimal("1200")),
    ]
    assert DoubleEntryValidator().validate(lines).ok


def test_amount_rounding_to_zero_is_rejected() -> None:
    lines = _lines(("1000", "10", "0"), ("4000", "0", "10"), ("1100", "0.001", "0"), ("4100", "0", "0.001"))
    result = DoubleEntryValidator().validate(lines)
    assert not result.ok
    assert "Line 3" in (result.reason or "")
    assert "rounds to zero" in (result.reason or "")
    with pytest.raises(ValidationError):
        DoubleEntryValidator().ensure_valid(lines)
