"""Mini README: Balance computation package for Shuttlefund.

``engine`` holds the pure balance reducer; ``summary`` builds the rounded
figures used by the overview endpoints and the CLI.
"""

from .engine import (
    BalanceReport,
    compute_balances,
    compute_member_balances,
    compute_total_fund,
)
from .summary import out_of_pocket_payers, session_total, summarise_ledger

__all__ = [
    "BalanceReport",
    "compute_balances",
    "compute_member_balances",
    "compute_total_fund",
    "out_of_pocket_payers",
    "session_total",
    "summarise_ledger",
]
