from __future__ import annotations

import pytest

from py_ledgersync.domain.accounts import (
    Account,
    AccountCategory,
    ChartOfAccounts,
    EntrySide,
    default_chart,
    extract_account_number,
    infer_category,
)
from py_ledgersync.domain.errors import ValidationError


@pytest.mark.parametrize(
    "code,expected",
    [
        ("1000", AccountCategory.ASSET),
        ("2100", AccountCategory.LIABILITY),
        ("3000", AccountCategory.EQUITY),
        ("4000", AccountCategory.REVENUE),
        ("6000", AccountCategory.EXPENSE),
        ("9999", AccountCategory.EXPENSE),
        ("Misc", AccountCategory.EXPENSE),
    ],
)
def test_infer_category_by_leading_digit(code: str, expected: AccountCategory) -> None:
    assert infer_category(code) is expected


def test_extract_account_number_from_labels() -> None:
    assert extract_account_number("1000 Cash") == "1000"
    assert extract_account_number(" 4000") == "4000"
    assert extract_account_number("Misc ") == "Misc"
    assert extract_account_number(None) == ""


def test_explicit_category_overrides_leading_digit() -> None:
    chart = ChartOfAccounts([Account("9000", "Suspense", category=AccountCategory.ASSET)])
    assert chart.category_of("9000") is AccountCategory.ASSET
    # codes missing from the catalog still resolve
    assert chart.category_of("5000") is AccountCategory.EXPENSE
    assert chart.name_of("5000") == ""


def test_current_and_non_current_split_by_code_range() -> None:
    chart = default_chart()
    assert chart.is_current("1100") is True
    assert chart.is_current("1500") is False
    assert chart.is_current("2000") is True
    assert chart.is_current("2600") is False
    assert chart.is_current("3000") is False


def test_limits_can_be_overridden() -> None:
    chart = ChartOfAccounts(current_asset_limit=1600)
    assert chart.is_current("1500") is True


def test_from_mappings_and_sorted_iteration() -> None:
    chart = ChartOfAccounts.from_mappings(
        [
            {"number": "7777", "name": "Odd", "type": "liability"},
            {"code": "1000", "name": "Cash"},
        ]
    )
    assert [a.code for a in chart] == ["1000", "7777"]
    assert chart.get("7777").resolved_category is AccountCategory.LIABILITY  # type: ignore[union-attr]
    assert chart.name_of("1000 Cash") == "Cash"
    assert "1000" in chart
    assert len(chart) == 2


def test_default_chart_contains_cash_like_accounts() -> None:
    chart = default_chart()
    assert {"1000", "1010", "1100", "1200", "2000", "3000"} <= {a.code for a in chart}
    assert chart.get("2200").description == "Udskudt indtægt"  # type: ignore[union-attr]


def test_entry_side_parse() -> None:
    assert EntrySide.parse("Dr") is EntrySide.DEBIT
    assert EntrySide.parse("credit") is EntrySide.CREDIT
    assert EntrySide.DEBIT.opposite is EntrySide.CREDIT
    with pytest.raises(ValidationError):
        EntrySide.parse("sideways")


def test_account_requires_code() -> None:
    with pytest.raises(ValidationError):
        Account("  ")
