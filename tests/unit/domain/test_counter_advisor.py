from __future__ import annotations

from py_ledgersync.domain.accounts import AccountCategory, EntrySide, default_chart
from py_ledgersync.domain.advisor import COUNTER_RULES, CounterAccountAdvisor


def test_expense_debit_permits_assets_and_liabilities_only() -> None:
    advisor = CounterAccountAdvisor(default_chart())
    assert advisor.permitted_categories("6000", EntrySide.DEBIT) == (AccountCategory.ASSET, AccountCategory.LIABILITY)
    assert advisor.is_permitted("6000", "debit", "1000")
    assert advisor.is_permitted("6000", "debit", "2000")
    assert not advisor.is_permitted("6000", "debit", "3000")
    assert not advisor.is_permitted("6000", "debit", "4000")


def test_rules_cover_every_side_and_category() -> None:
    for side in EntrySide:
        assert set(COUNTER_RULES[side]) == set(AccountCategory)


def test_ranking_prefers_curated_codes() -> None:
    advice = CounterAccountAdvisor(default_chart()).advise("6000 Rent", "debit")
    assert advice.account == "6000"
    assert advice.category is AccountCategory.EXPENSE
    assert [s.account.code for s in advice.primary] == ["1000", "1010", "1100", "2000"]
    assert [s.score for s in advice.primary] == [10, 10, 10, 9]
    plausible = [s.account.code for s in advice.also_plausible]
    assert "1200" in plausible
    assert plausible == sorted(plausible, key=int)
    codes = {s.account.code for s in advice.suggestions}
    assert "3000" not in codes
    assert "4000" not in codes
    assert "6000" not in codes
    assert list(advice.groups) == ["primary suggestions", "also plausible"]


def test_revenue_credit_prefers_receivables_then_cash() -> None:
    advice = CounterAccountAdvisor(default_chart()).advise("4000", EntrySide.CREDIT)
    assert advice.primary[0].account.code in {"1000", "1010", "1100"}
    scores = {s.account.code: s.score for s in advice.primary}
    assert scores["1200"] == 9


def test_name_match_scores_below_code_match() -> None:
    chart = default_chart()
    from py_ledgersync.domain.accounts import Account

    chart.add(Account("1150", "Savings bank"))
    advice = CounterAccountAdvisor(chart).advise("6000", "debit")
    scores = {s.account.code: s.score for s in advice.primary}
    assert scores["1150"] == 6
    assert scores["1100"] == 10


def test_options_for_open_line_needs_single_anchor() -> None:
    advisor = CounterAccountAdvisor(default_chart())
    lines = [{"account": "6000", "debit": "100"}, {"account": "", "credit": ""}]
    advice = advisor.options_for_open_line(lines, 1)
    assert advice is not None
    assert advice.account == "6000"
    assert advice.side is EntrySide.DEBIT

    two_anchors = lines + [{"account": "2000", "credit": "50"}]
    assert advisor.options_for_open_line(two_anchors, 1) is None
    assert advisor.options_for_open_line([{"account": "", "debit": ""}], 0) is None


def test_equity_never_offset_against_revenue_debit() -> None:
    advisor = CounterAccountAdvisor(default_chart())
    assert not advisor.is_permitted("4000", "debit", "3000")
    assert advisor.permitted_categories("4000", EntrySide.DEBIT) == (AccountCategory.ASSET, AccountCategory.LIABILITY)
    codes = {s.account.code for s in advisor.advise("4000", "debit").suggestions}
    assert "3000" not in codes
    assert "3100" not in codes

    assert advisor.permitted_categories("3000", EntrySide.CREDIT) == (AccountCategory.ASSET,)
    assert advisor.is_permitted("3000", "credit", "1100")
    assert not advisor.is_permitted("3000", "credit", "6000")
    assert not advisor.is_permitted("3000", "credit", "2000")


def test_credit_to_liability_keeps_unmatched_accounts_plausible() -> None:
    advice = CounterAccountAdvisor(default_chart()).advise("2600", EntrySide.CREDIT)
    assert [s.account.code for s in advice.primary][:3] == ["1000", "1010", "1100"]
    plausible = {s.account.code for s in advice.also_plausible}
    assert {"1200", "1300", "5000", "6000"} <= plausible
    assert all(s.score == 0 for s in advice.also_plausible)
    assert all(s.score > 0 for s in advice.primary)
