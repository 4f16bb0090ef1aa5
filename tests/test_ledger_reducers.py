"""Mini README: Tests for the pure ledger mutation rules.

Covers roster maintenance, the derived fund expense generated from sessions,
session edits and deletions, fund transaction add/remove symmetry, and ledgers
written with the older localized fund token.
"""

from __future__ import annotations

from datetime import date

from shuttlefund.ledger import (
    FUND,
    AppState,
    CostBreakdown,
    FundTransaction,
    ItemPayers,
    MemberPayer,
    PrepaidFlags,
    Session,
    TransactionType,
    add_fund_transaction,
    add_member,
    add_or_update_session,
    derive_session_expense,
    remove_fund_transaction,
    remove_member,
    remove_session,
)


def _session(session_id: str = "s1", **overrides: object) -> Session:
    fields = {
        "session_id": session_id,
        "played_on": date(2024, 6, 1),
        "costs": CostBreakdown(court=100000.0),
        "payers": ItemPayers(),
        "prepaid": PrepaidFlags(),
        "participants": ("A", "B"),
    }
    fields.update(overrides)
    return Session(**fields)  # type: ignore[arg-type]


def _contribution(transaction_id: str, amount: float = 50000.0, payer: str = "A") -> FundTransaction:
    return FundTransaction(
        transaction_id=transaction_id,
        transaction_type=TransactionType.CONTRIBUTION,
        amount=amount,
        payer=MemberPayer(payer),
        occurred_on=date(2024, 5, 1),
        description="Monthly contribution",
    )


def test_add_member_trims_and_ignores_duplicates() -> None:
    """Names are trimmed; blanks, duplicates and the fund label are ignored."""

    state = AppState(members=("A",))

    updated = add_member(state, "  B ")
    assert updated.members == ("A", "B")
    assert add_member(updated, "B") is updated
    assert add_member(updated, "   ") is updated
    assert add_member(updated, "Fund") is updated
    assert state.members == ("A",)


def test_remove_member_protects_fund_and_keeps_history() -> None:
    """The fund cannot be removed; removing a member leaves past records intact."""

    state = add_or_update_session(AppState(members=("A", "B")), _session())

    assert remove_member(state, "Fund") is state
    updated = remove_member(state, "B")
    assert updated.members == ("A",)
    assert updated.sessions[0].participants == ("A", "B")


def test_removals_respect_confirmation_capability() -> None:
    """A declined confirmation leaves the snapshot untouched."""

    state = add_or_update_session(AppState(members=("A", "B")), _session())
    prompts = []

    def deny(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    assert remove_member(state, "A", deny) is state
    assert remove_session(state, "s1", deny) is state
    assert remove_fund_transaction(state, "tx-session-s1", deny) is state
    assert len(prompts) == 3


def test_fund_paid_session_creates_derived_expense() -> None:
    """Fund-paid items become one EXPENSE entry linked to the session."""

    state = add_or_update_session(AppState(members=("A", "B")), _session())

    assert [session.session_id for session in state.sessions] == ["s1"]
    expense = state.fund_transactions[0]
    assert expense.transaction_id == "tx-session-s1"
    assert expense.source_session_id == "s1"
    assert expense.transaction_type is TransactionType.EXPENSE
    assert expense.payer is FUND
    assert expense.amount == 100000.0
    assert "2024-06-01" in expense.description


def test_prepaid_items_count_as_fund_outflow() -> None:
    """Items flagged prepaid count toward the derived expense whoever paid them."""

    session = _session(
        costs=CostBreakdown(court=80000.0, water=12000.0, shuttle=40000.0),
        payers=ItemPayers(court=MemberPayer("A"), water=MemberPayer("B"), shuttle=MemberPayer("A")),
        prepaid=PrepaidFlags(shuttle=True),
    )

    assert derive_session_expense(session).amount == 40000.0


def test_session_without_fund_outflow_has_no_derived_expense() -> None:
    """Zero costs or member-paid items do not produce a fund entry."""

    member_paid = _session(
        payers=ItemPayers(court=MemberPayer("A"), water=MemberPayer("A"), shuttle=MemberPayer("A"))
    )
    free = _session("s2", costs=CostBreakdown())
    state = AppState(members=("A", "B"))

    state = add_or_update_session(state, member_paid)
    state = add_or_update_session(state, free)

    assert [session.session_id for session in state.sessions] == ["s2", "s1"]
    assert state.fund_transactions == ()


def test_new_sessions_are_prepended() -> None:
    """Sessions and derived entries are stored newest first."""

    state = AppState(members=("A",), fund_transactions=(_contribution("c1"),))
    state = add_or_update_session(state, _session("s1"))
    state = add_or_update_session(state, _session("s2"))

    assert [session.session_id for session in state.sessions] == ["s2", "s1"]
    assert [tx.transaction_id for tx in state.fund_transactions] == [
        "tx-session-s2",
        "tx-session-s1",
        "c1",
    ]


def test_editing_replaces_only_matching_session() -> None:
    """Edits keep the session count and refresh the derived entry."""

    state = AppState(members=("A", "B"))
    for session_id in ("s1", "s2", "s3"):
        state = add_or_update_session(state, _session(session_id))

    edited = _session("s2", costs=CostBreakdown(court=150000.0, water=10000.0))
    updated = add_or_update_session(state, edited, is_edit=True)

    assert [session.session_id for session in updated.sessions] == ["s3", "s2", "s1"]
    assert updated.sessions[1] == edited
    assert updated.sessions[0] == state.sessions[0]
    derived = [tx for tx in updated.fund_transactions if tx.source_session_id == "s2"]
    assert len(derived) == 1
    assert derived[0].amount == 160000.0
    assert updated.fund_transactions[0] is derived[0]
    assert len(updated.fund_transactions) == 3


def test_editing_to_member_paid_drops_derived_expense() -> None:
    """An edit leaving nothing fund-paid removes the stale derived entry."""

    state = add_or_update_session(AppState(members=("A", "B")), _session())
    edited = _session(payers=ItemPayers(court=MemberPayer("B")))

    updated = add_or_update_session(state, edited, is_edit=True)

    assert updated.fund_transactions == ()
    assert len(updated.sessions) == 1


def test_editing_unknown_session_is_ignored() -> None:
    """Editing an id that is not recorded leaves the snapshot as it was."""

    state = add_or_update_session(AppState(members=("A",)), _session("s1"))

    assert add_or_update_session(state, _session("missing"), is_edit=True) is state


def test_remove_session_drops_exactly_its_derived_expense() -> None:
    """Deleting a session removes its own derived entry and nothing else."""

    state = AppState(members=("A", "B"), fund_transactions=(_contribution("c1"),))
    state = add_or_update_session(state, _session("s1"))
    state = add_or_update_session(state, _session("s2"))

    updated = remove_session(state, "s1")

    assert [session.session_id for session in updated.sessions] == ["s2"]
    assert [tx.transaction_id for tx in updated.fund_transactions] == ["tx-session-s2", "c1"]


def test_add_then_remove_fund_transaction_restores_collection() -> None:
    """Adding and removing the same transaction is an inverse pair."""

    state = AppState(
        members=("A",),
        fund_transactions=(_contribution("c2", 10000.0), _contribution("c1")),
    )
    added = add_fund_transaction(state, _contribution("c3", 75000.0, "B"))

    assert added.fund_transactions[0].transaction_id == "c3"
    assert remove_fund_transaction(added, "c3").fund_transactions == state.fund_transactions


def test_removing_derived_expense_keeps_session() -> None:
    """A derived entry can be removed on its own; the session stays recorded."""

    state = add_or_update_session(AppState(members=("A", "B")), _session())

    updated = remove_fund_transaction(state, "tx-session-s1")

    assert updated.fund_transactions == ()
    assert len(updated.sessions) == 1


def test_legacy_ledger_keeps_its_fund_token_and_links() -> None:
    """A ledger written with the localized fund token keeps using it for new entries."""

    state = AppState.from_dict(
        {
            "sessions": [
                {
                    "id": "old",
                    "date": "2023-12-02",
                    "payers": {"court": "Quỹ", "water": "Quỹ", "shuttle": "Quỹ"},
                    "costs": {"court": 90000, "water": 0, "shuttle": 0},
                    "isPrepaid": {"court": False, "water": False, "shuttle": False},
                }
            ],
            "fundTransactions": [
                {
                    "id": "tx-session-old",
                    "date": "2023-12-02",
                    "amount": 90000,
                    "payer": "Quỹ",
                    "type": "EXPENSE",
                }
            ],
            "members": ["A", "B"],
        }
    )

    updated = add_or_update_session(state, _session("new"))
    expense = updated.fund_transactions[0]
    assert expense.transaction_id == "tx-session-new"
    assert expense.payer.is_fund
    assert expense.as_dict()["payer"] == "Quỹ"

    without_old = remove_session(updated, "old")
    assert [tx.transaction_id for tx in without_old.fund_transactions] == ["tx-session-new"]
    assert [session.session_id for session in without_old.sessions] == ["new"]
