"""Mini README: Dashboard summaries built on top of the balance engine.

Structure:
    * session_total - total cost of one session.
    * out_of_pocket_payers - members who paid any item of a session themselves.
    * summarise_ledger - aggregate figures for the overview screen.

Figures here are rounded to whole currency units for display; the engine
itself never rounds.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List

from ..ledger.models import AppState, CostItem, Session, TransactionType
from .engine import compute_balances

RECENT_SESSION_LIMIT = 3


def session_total(session: Session) -> float:
    """Return court + water + shuttle for a session."""

    return session.costs.total


def out_of_pocket_payers(session: Session) -> List[str]:
    """List the members who paid at least one item of the session, in item order."""

    names: List[str] = []
    for item in CostItem:
        payer = session.payers.payer(item)
        if not payer.is_fund and payer.label not in names:
            names.append(payer.label)
    return names


def summarise_ledger(state: AppState, *, recent_limit: int = RECENT_SESSION_LIMIT) -> Dict[str, Any]:
    """Aggregate the snapshot into the figures shown on the overview screen."""

    report = compute_balances(state)
    type_counts = Counter(
        transaction.transaction_type.value for transaction in state.fund_transactions
    )
    recent_sessions = [
        {
            "id": session.session_id,
            "date": session.played_on.isoformat(),
            "total": round(session_total(session)),
            "paid_by": ", ".join(out_of_pocket_payers(session)) or "from fund",
        }
        for session in state.sessions[:recent_limit]
    ]
    return {
        "total_fund": round(report.total_fund),
        "member_balances": {
            member: round(balance) for member, balance in report.member_balances.items()
        },
        "member_count": len(state.members),
        "session_count": len(state.sessions),
        "total_session_spending": round(sum(session_total(session) for session in state.sessions)),
        "transaction_counts": {
            transaction_type.value: type_counts.get(transaction_type.value, 0)
            for transaction_type in TransactionType
        },
        "recent_sessions": recent_sessions,
    }
