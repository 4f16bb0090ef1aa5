"""Mini README: Balance engine deriving fund and member positions from a snapshot.

Structure:
    * BalanceReport - total fund plus read-only member balances.
    * compute_total_fund - remaining money in the communal fund.
    * compute_member_balances - signed net position of every roster member.
    * compute_balances - memoised combination of both for one snapshot.

Accounting rules:
    Contributions raise the fund and credit the contributor. Prepaid
    purchases lower the fund whoever paid; a member who fronted the money is
    credited with it and the cost is shared by the whole current roster.
    Expenses only lower the fund when the fund paid them. Session costs are
    shared by the session's participants, or by the whole roster for older
    records without attendance. Names no longer on the roster are never
    credited or charged. Nothing is rounded here.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Mapping

from ..ledger.models import AppState, TransactionType
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class BalanceReport:
    """Result of a balance computation for one snapshot."""

    total_fund: float
    member_balances: Mapping[str, float]

    def as_dict(self) -> Dict[str, object]:
        return {
            "totalFund": self.total_fund,
            "memberBalances": dict(self.member_balances),
        }


def compute_total_fund(state: AppState) -> float:
    """Return the amount left in the communal fund."""

    total = 0.0
    for transaction in state.fund_transactions:
        if transaction.transaction_type is TransactionType.CONTRIBUTION:
            total += transaction.amount
        elif transaction.transaction_type is TransactionType.PREPAID_PURCHASE:
            total -= transaction.amount
        elif transaction.transaction_type is TransactionType.EXPENSE and transaction.payer.is_fund:
            total -= transaction.amount
    return total


def compute_member_balances(state: AppState) -> Dict[str, float]:
    """Return each roster member's net balance; positive means the group owes them."""

    roster = state.members
    balances: Dict[str, float] = {member: 0.0 for member in roster}
    member_count = len(roster)

    for transaction in state.fund_transactions:
        payer = transaction.payer
        if transaction.transaction_type is TransactionType.CONTRIBUTION:
            if not payer.is_fund and payer.label in balances:
                balances[payer.label] += transaction.amount
        elif transaction.transaction_type is TransactionType.PREPAID_PURCHASE:
            if member_count == 0:
                LOGGER.debug("Skipping prepaid split for %s: empty roster", transaction.transaction_id)
                continue
            if not payer.is_fund and payer.label in balances:
                balances[payer.label] += transaction.amount
            share = transaction.amount / member_count
            for member in roster:
                balances[member] -= share

    for session in state.sessions:
        participants = session.participants or roster
        if not participants:
            LOGGER.debug("Skipping session %s: nobody to share costs", session.session_id)
            continue
        share = session.total_cost / len(participants)
        for participant in participants:
            if participant in balances:
                balances[participant] -= share

    return balances


@lru_cache(maxsize=64)
def compute_balances(state: AppState) -> BalanceReport:
    """Compute the fund total and member balances for a snapshot."""

    report = BalanceReport(
        total_fund=compute_total_fund(state),
        member_balances=MappingProxyType(compute_member_balances(state)),
    )
    LOGGER.debug(
        "Computed balances for %s members over %s sessions and %s transactions",
        len(state.members),
        len(state.sessions),
        len(state.fund_transactions),
    )
    return report
