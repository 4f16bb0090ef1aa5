"""Mini README: Ledger data model and mutation rules for Shuttlefund.

``models`` defines the immutable snapshot types and their JSON record
format; ``reducers`` holds the pure functions that turn one snapshot into
the next.
"""

from .models import (
    FUND,
    FUND_LABEL,
    AppState,
    CostBreakdown,
    CostItem,
    FundPayer,
    FundTransaction,
    ItemPayers,
    MemberPayer,
    Payer,
    PrepaidFlags,
    Session,
    TransactionCategory,
    TransactionType,
    payer_from_label,
)
from .reducers import (
    Confirmation,
    add_fund_transaction,
    add_member,
    add_or_update_session,
    always_confirm,
    derive_session_expense,
    derived_transaction_id,
    remove_fund_transaction,
    remove_member,
    remove_session,
    session_cash_out,
)

__all__ = [
    "FUND",
    "FUND_LABEL",
    "AppState",
    "Confirmation",
    "CostBreakdown",
    "CostItem",
    "FundPayer",
    "FundTransaction",
    "ItemPayers",
    "MemberPayer",
    "Payer",
    "PrepaidFlags",
    "Session",
    "TransactionCategory",
    "TransactionType",
    "add_fund_transaction",
    "add_member",
    "add_or_update_session",
    "always_confirm",
    "derive_session_expense",
    "derived_transaction_id",
    "payer_from_label",
    "remove_fund_transaction",
    "remove_member",
    "remove_session",
    "session_cash_out",
]
