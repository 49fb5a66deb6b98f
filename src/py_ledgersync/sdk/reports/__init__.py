"""Report exports: CSV writers and JSON-ready projections of the report views."""

from .csv_export import (
    BALANCE_SHEET_HEADER,
    GENERAL_LEDGER_HEADER,
    PROFIT_AND_LOSS_HEADER,
    TRIAL_BALANCE_HEADER,
    balance_sheet_csv,
    general_ledger_csv,
    profit_and_loss_csv,
    trial_balance_csv,
)
from .views import (
    balance_sheet_view,
    cash_report_view,
    profit_and_loss_view,
    summary_view,
    trial_balance_view,
)

__all__ = [
    "BALANCE_SHEET_HEADER",
    "GENERAL_LEDGER_HEADER",
    "PROFIT_AND_LOSS_HEADER",
    "TRIAL_BALANCE_HEADER",
    "balance_sheet_csv",
    "general_ledger_csv",
    "profit_and_loss_csv",
    "trial_balance_csv",
    "balance_sheet_view",
    "cash_report_view",
    "profit_and_loss_view",
    "summary_view",
    "trial_balance_view",
]
