"""Mini README: Pure mutation rules for the ledger snapshot.

Structure:
    * Confirmation - injected capability deciding whether a removal proceeds.
    * add_member / remove_member - roster maintenance.
    * derive_session_expense - the fund outflow implied by a session.
    * add_or_update_session / remove_session - session lifecycle with the
      derived EXPENSE entry kept in step.
    * add_fund_transaction / remove_fund_transaction - fund ledger entries.

Each reducer takes an ``AppState`` and returns a new one; the input is never
modified. Ignored requests (removing the fund, duplicate members, denied
confirmations) return the original snapshot object unchanged.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..logging_utils import get_logger
from .models import (
    DERIVED_ID_PREFIX,
    FUND,
    AppState,
    CostItem,
    FundPayer,
    FundTransaction,
    Session,
    TransactionCategory,
    TransactionType,
    is_fund_label,
)

LOGGER = get_logger(__name__)

Confirmation = Callable[[str], bool]


def always_confirm(_prompt: str) -> bool:
    """Confirmation capability that approves every removal."""

    return True


def _confirmed(confirm: Optional[Confirmation], prompt: str) -> bool:
    approved = (confirm or always_confirm)(prompt)
    if not approved:
        LOGGER.info("Removal declined: %s", prompt)
    return approved


def add_member(state: AppState, name: str) -> AppState:
    """Append a trimmed name to the roster unless empty, duplicate or the fund."""

    trimmed = (name or "").strip()
    if not trimmed or trimmed in state.members:
        LOGGER.debug("Ignoring member addition %r", name)
        return state
    if is_fund_label(trimmed):
        LOGGER.warning("The fund label %r cannot be added as a member", trimmed)
        return state
    LOGGER.info("Adding member %s", trimmed)
    return state.with_changes(members=state.members + (trimmed,))


def remove_member(
    state: AppState, name: str, confirm: Optional[Confirmation] = None
) -> AppState:
    """Drop a member from the roster; history that mentions them is kept."""

    if is_fund_label(name):
        LOGGER.debug("The fund cannot be removed from the roster")
        return state
    if not _confirmed(confirm, f"Remove {name}?"):
        return state
    LOGGER.info("Removing member %s", name)
    return state.with_changes(members=[member for member in state.members if member != name])


def derived_transaction_id(session_id: str) -> str:
    """Identifier used for the EXPENSE entry generated from a session."""

    return f"{DERIVED_ID_PREFIX}{session_id}"


def session_cash_out(session: Session) -> float:
    """Sum the cost items paid by the fund or flagged as prepaid."""

    total = 0.0
    for item in CostItem:
        if session.payers.payer(item).is_fund or session.prepaid.is_prepaid(item):
            total += session.costs.amount(item)
    return total


def derive_session_expense(session: Session, fund_payer: FundPayer = FUND) -> FundTransaction:
    """Build the EXPENSE entry recording the cash that left the fund for a session."""

    return FundTransaction(
        transaction_id=derived_transaction_id(session.session_id),
        transaction_type=TransactionType.EXPENSE,
        amount=session_cash_out(session),
        payer=fund_payer,
        occurred_on=session.played_on,
        description=f"Fund expense for session on {session.played_on.isoformat()}",
        category=TransactionCategory.GENERAL,
        source_session_id=session.session_id,
    )


def add_or_update_session(state: AppState, session: Session, is_edit: bool = False) -> AppState:
    """Record a new session or replace an edited one, refreshing its derived expense.

    Editing a session id that is not in the snapshot leaves the snapshot
    untouched.
    """

    expense = derive_session_expense(session, state.fund_payer)
    if not is_edit:
        LOGGER.info(
            "Recording session %s on %s (fund outflow %.2f)",
            session.session_id,
            session.played_on.isoformat(),
            expense.amount,
        )
        transactions = state.fund_transactions
        if expense.amount > 0:
            transactions = (expense,) + transactions
        return state.with_changes(
            sessions=(session,) + state.sessions,
            fund_transactions=transactions,
        )

    if not any(existing.session_id == session.session_id for existing in state.sessions):
        LOGGER.warning("Cannot edit unknown session %s", session.session_id)
        return state

    LOGGER.info("Updating session %s (fund outflow %.2f)", session.session_id, expense.amount)
    sessions = [
        session if existing.session_id == session.session_id else existing
        for existing in state.sessions
    ]
    transactions = [
        transaction
        for transaction in state.fund_transactions
        if transaction.linked_session_id != session.session_id
    ]
    if expense.amount > 0:
        transactions.insert(0, expense)
    return state.with_changes(sessions=sessions, fund_transactions=transactions)


def remove_session(
    state: AppState, session_id: str, confirm: Optional[Confirmation] = None
) -> AppState:
    """Delete a session together with the expense entry derived from it."""

    if not _confirmed(confirm, f"Delete session {session_id}?"):
        return state
    LOGGER.info("Removing session %s", session_id)
    return state.with_changes(
        sessions=[session for session in state.sessions if session.session_id != session_id],
        fund_transactions=[
            transaction
            for transaction in state.fund_transactions
            if transaction.linked_session_id != session_id
        ],
    )


def add_fund_transaction(state: AppState, transaction: FundTransaction) -> AppState:
    """Prepend a fund ledger entry."""

    LOGGER.info(
        "Adding %s %s of %.2f paid by %s",
        transaction.transaction_type.value,
        transaction.transaction_id,
        transaction.amount,
        transaction.payer.label,
    )
    return state.with_changes(fund_transactions=(transaction,) + state.fund_transactions)


def remove_fund_transaction(
    state: AppState, transaction_id: str, confirm: Optional[Confirmation] = None
) -> AppState:
    """Delete a fund ledger entry by id, derived session expenses included."""

    if not _confirmed(confirm, f"Delete transaction {transaction_id}?"):
        return state
    remaining = []
    for transaction in state.fund_transactions:
        if transaction.transaction_id != transaction_id:
            remaining.append(transaction)
        elif transaction.is_derived:
            LOGGER.warning(
                "Removing derived expense %s; session %s keeps its costs without a fund entry",
                transaction_id,
                transaction.linked_session_id,
            )
    LOGGER.info("Removing fund transaction %s", transaction_id)
    return state.with_changes(fund_transactions=remaining)
