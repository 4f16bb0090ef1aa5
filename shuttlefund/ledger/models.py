"""Mini README: Immutable data model for the group fund ledger.

Structure:
    * FundPayer / MemberPayer - tagged payer variant (the fund or a named member).
    * CostItem - enum of the three per-session cost items.
    * CostBreakdown / ItemPayers / PrepaidFlags - per-item values of a session.
    * Session - one played occasion with its costs, payers and participants.
    * TransactionType / TransactionCategory - enums for fund ledger entries.
    * FundTransaction - one fund ledger entry, optionally linked to a session.
    * AppState - the whole snapshot (sessions, fund transactions, roster).

Every type is a frozen, slotted dataclass holding tuples rather than lists,
so a snapshot is hashable and can key memoised computations. ``as_dict`` and
``from_dict`` convert to and from the camelCase JSON record exchanged with
storage collaborators. Records written by older clients (localized fund
token, no participants, no category, derived entries linked only through
their id) are interpreted on read but written back exactly as they came in;
malformed records raise ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
import math
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

FUND_LABEL = "Fund"
LEGACY_FUND_LABELS = frozenset({"Quỹ"})
DERIVED_ID_PREFIX = "tx-session-"


@dataclass(frozen=True, slots=True)
class FundPayer:
    """The communal fund acting as a payer.

    ``label`` is the token written for the fund; records from older clients
    keep their localized token so they are written back unchanged.
    """

    label: str = FUND_LABEL

    @property
    def is_fund(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class MemberPayer:
    """A named member who paid out of pocket."""

    name: str

    @property
    def label(self) -> str:
        return self.name

    @property
    def is_fund(self) -> bool:
        return False


Payer = Union[FundPayer, MemberPayer]
FUND = FundPayer()


def is_fund_label(value: str) -> bool:
    """Return True when a stored payer string denotes the fund."""

    return value == FUND_LABEL or value in LEGACY_FUND_LABELS


def payer_from_label(value: object) -> Payer:
    """Coerce a stored payer string into the tagged payer variant."""

    if isinstance(value, (FundPayer, MemberPayer)):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Payer must be a non-empty string, got {value!r}")
    if value == FUND_LABEL:
        return FUND
    if value in LEGACY_FUND_LABELS:
        return FundPayer(label=value)
    return MemberPayer(value)


class CostItem(str, Enum):
    """The three cost items recorded for every session."""

    COURT = "court"
    WATER = "water"
    SHUTTLE = "shuttle"


class TransactionType(str, Enum):
    """Enumerate the supported fund ledger entry kinds."""

    CONTRIBUTION = "CONTRIBUTION"
    PREPAID_PURCHASE = "PREPAID_PURCHASE"
    EXPENSE = "EXPENSE"

    @classmethod
    def from_str(cls, value: str) -> "TransactionType":
        """Coerce arbitrary casing into a valid transaction type."""

        try:
            normalised = value.strip().upper()
            return cls(normalised)
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported transaction type: {value}") from error


class TransactionCategory(str, Enum):
    """Cost item a fund transaction relates to, ``general`` when none."""

    COURT = "court"
    WATER = "water"
    SHUTTLE = "shuttle"
    GENERAL = "general"

    @classmethod
    def from_str(cls, value: Optional[str]) -> "TransactionCategory":
        """Coerce stored categories, defaulting missing values to general."""

        if value is None or value == "":
            return cls.GENERAL
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported transaction category: {value}") from error


def _parse_date(value: object) -> date:
    """Parse ISO formatted strings or date objects safely."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as error:
            raise ValueError(f"Invalid ISO date: {value!r}") from error
    raise ValueError("Dates must be provided as ISO strings or date/datetime instances.")


def _parse_amount(value: object, label: str) -> float:
    """Validate a finite, non-negative monetary amount.

    Integers stay integers so stored records are written back as they were read.
    """

    if isinstance(value, bool):
        raise ValueError(f"{label} must be a number, got {value!r}")
    if isinstance(value, int):
        amount: float = value
    else:
        try:
            amount = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as error:
            raise ValueError(f"{label} must be a number, got {value!r}") from error
        if not math.isfinite(amount):
            raise ValueError(f"{label} must be a finite number, got {value!r}")
    if amount < 0:
        raise ValueError(f"{label} must not be negative, got {amount}")
    return amount


def _require(payload: Mapping[str, Any], key: str) -> Any:
    if key not in payload:
        raise ValueError(f"Missing required field '{key}'")
    return payload[key]


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Return a nested object of a record, rejecting values of the wrong shape."""

    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Field '{key}' must be an object, got {type(value).__name__}")
    return value


def _records(payload: Mapping[str, Any], key: str) -> Tuple[Any, ...]:
    """Return a list field of a record, rejecting scalars and objects."""

    value = payload.get(key)
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Field '{key}' must be a list, got {type(value).__name__}")
    return tuple(value)


def _ensure_mapping(payload: object, label: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValueError(f"{label} must be a JSON object.")
    return payload


@dataclass(frozen=True, slots=True)
class CostBreakdown:
    """Non-negative amounts for court hire, water and shuttlecocks."""

    court: float = 0.0
    water: float = 0.0
    shuttle: float = 0.0

    def __post_init__(self) -> None:
        for item in CostItem:
            amount = _parse_amount(getattr(self, item.value), f"Cost '{item.value}'")
            object.__setattr__(self, item.value, amount)

    def amount(self, item: CostItem) -> float:
        return getattr(self, item.value)

    @property
    def total(self) -> float:
        return self.court + self.water + self.shuttle

    def as_dict(self) -> Dict[str, float]:
        return {item.value: self.amount(item) for item in CostItem}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CostBreakdown":
        return cls(**{item.value: payload.get(item.value, 0.0) for item in CostItem})


@dataclass(frozen=True, slots=True)
class ItemPayers:
    """Who paid each cost item; defaults to the fund for all three."""

    court: Payer = FUND
    water: Payer = FUND
    shuttle: Payer = FUND

    def payer(self, item: CostItem) -> Payer:
        return getattr(self, item.value)

    def as_dict(self) -> Dict[str, str]:
        return {item.value: self.payer(item).label for item in CostItem}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ItemPayers":
        return cls(
            **{item.value: payer_from_label(payload.get(item.value, FUND_LABEL)) for item in CostItem}
        )


@dataclass(frozen=True, slots=True)
class PrepaidFlags:
    """Whether each cost item was already paid for before the session."""

    court: bool = False
    water: bool = False
    shuttle: bool = False

    def is_prepaid(self, item: CostItem) -> bool:
        return getattr(self, item.value)

    def as_dict(self) -> Dict[str, bool]:
        return {item.value: self.is_prepaid(item) for item in CostItem}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PrepaidFlags":
        return cls(**{item.value: bool(payload.get(item.value, False)) for item in CostItem})


@dataclass(frozen=True, slots=True)
class Session:
    """One played occasion and how its costs were covered.

    Empty or missing ``participants`` mean everybody on the roster at the
    time balances are computed, which is how records created before
    attendance tracking existed are interpreted. ``None`` marks a record
    that never had the field, so it is written back without it.
    """

    session_id: str
    played_on: date
    costs: CostBreakdown = field(default_factory=CostBreakdown)
    payers: ItemPayers = field(default_factory=ItemPayers)
    prepaid: PrepaidFlags = field(default_factory=PrepaidFlags)
    participants: Optional[Tuple[str, ...]] = ()
    note: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "played_on", _parse_date(self.played_on))
        if self.participants is not None:
            object.__setattr__(self, "participants", tuple(self.participants))

    @property
    def total_cost(self) -> float:
        return self.costs.total

    def as_dict(self) -> Dict[str, object]:
        """Export the session as the stored camelCase record."""

        record: Dict[str, object] = {
            "id": self.session_id,
            "date": self.played_on.isoformat(),
            "payers": self.payers.as_dict(),
            "costs": self.costs.as_dict(),
            "isPrepaid": self.prepaid.as_dict(),
        }
        if self.participants is not None:
            record["participants"] = list(self.participants)
        if self.note is not None:
            record["note"] = self.note
        return record

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Session":
        """Build a session from a stored record, tolerating legacy gaps."""

        payload = _ensure_mapping(payload, "Session")
        participants: Optional[Tuple[str, ...]] = None
        if payload.get("participants") is not None:
            participants = tuple(str(name) for name in _records(payload, "participants"))
        return cls(
            session_id=str(_require(payload, "id")),
            played_on=_parse_date(_require(payload, "date")),
            costs=CostBreakdown.from_dict(_section(payload, "costs")),
            payers=ItemPayers.from_dict(_section(payload, "payers")),
            prepaid=PrepaidFlags.from_dict(_section(payload, "isPrepaid")),
            participants=participants,
            note=payload.get("note"),
        )


@dataclass(frozen=True, slots=True)
class FundTransaction:
    """A fund ledger entry.

    ``source_session_id`` is set on EXPENSE entries generated from a session
    and names the session they were derived from. ``description`` and
    ``category`` are ``None`` only for stored records that lacked them.
    """

    transaction_id: str
    transaction_type: TransactionType
    amount: float
    payer: Payer
    occurred_on: date
    description: Optional[str] = ""
    category: Optional[TransactionCategory] = TransactionCategory.GENERAL
    source_session_id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _parse_amount(self.amount, "Amount"))
        object.__setattr__(self, "occurred_on", _parse_date(self.occurred_on))
        if not isinstance(self.transaction_type, TransactionType):
            coerced_type = TransactionType.from_str(str(self.transaction_type))
            object.__setattr__(self, "transaction_type", coerced_type)
        if self.category is not None and not isinstance(self.category, TransactionCategory):
            coerced_category = TransactionCategory.from_str(self.category)
            object.__setattr__(self, "category", coerced_category)
        object.__setattr__(self, "payer", payer_from_label(self.payer))

    @property
    def linked_session_id(self) -> Optional[str]:
        """Session this entry was derived from.

        Derived expenses written before the explicit back-reference existed
        are recognised by their ``tx-session-<id>`` identifier.
        """

        if self.source_session_id is not None:
            return self.source_session_id
        if (
            self.transaction_type is TransactionType.EXPENSE
            and self.transaction_id.startswith(DERIVED_ID_PREFIX)
        ):
            return self.transaction_id[len(DERIVED_ID_PREFIX):]
        return None

    @property
    def is_derived(self) -> bool:
        return self.linked_session_id is not None

    @property
    def effective_category(self) -> TransactionCategory:
        return self.category or TransactionCategory.GENERAL

    def as_dict(self) -> Dict[str, object]:
        """Export the transaction as the stored camelCase record."""

        record: Dict[str, object] = {
            "id": self.transaction_id,
            "date": self.occurred_on.isoformat(),
            "amount": self.amount,
            "payer": self.payer.label,
            "type": self.transaction_type.value,
        }
        if self.description is not None:
            record["description"] = self.description
        if self.category is not None:
            record["category"] = self.category.value
        if self.source_session_id is not None:
            record["sourceSessionId"] = self.source_session_id
        return record

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "FundTransaction":
        """Build a transaction from a stored record, keeping absent fields absent."""

        payload = _ensure_mapping(payload, "Fund transaction")
        description = payload.get("description")
        category = payload.get("category")
        return cls(
            transaction_id=str(_require(payload, "id")),
            transaction_type=TransactionType.from_str(str(_require(payload, "type"))),
            amount=_require(payload, "amount"),
            payer=payer_from_label(_require(payload, "payer")),
            occurred_on=_parse_date(_require(payload, "date")),
            description=None if description is None else str(description),
            category=None if category is None else TransactionCategory.from_str(category),
            source_session_id=payload.get("sourceSessionId"),
        )


@dataclass(frozen=True, slots=True)
class AppState:
    """Aggregate snapshot: sessions and fund entries newest first, roster in order."""

    sessions: Tuple[Session, ...] = ()
    fund_transactions: Tuple[FundTransaction, ...] = ()
    members: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sessions", tuple(self.sessions))
        object.__setattr__(self, "fund_transactions", tuple(self.fund_transactions))
        object.__setattr__(self, "members", tuple(self.members))

    def with_changes(
        self,
        *,
        sessions: Optional[Iterable[Session]] = None,
        fund_transactions: Optional[Iterable[FundTransaction]] = None,
        members: Optional[Iterable[str]] = None,
    ) -> "AppState":
        """Return a new snapshot replacing only the given collections."""

        changes: Dict[str, object] = {}
        if sessions is not None:
            changes["sessions"] = tuple(sessions)
        if fund_transactions is not None:
            changes["fund_transactions"] = tuple(fund_transactions)
        if members is not None:
            changes["members"] = tuple(members)
        return replace(self, **changes)

    @property
    def fund_payer(self) -> FundPayer:
        """Fund token this ledger already uses, newest record first."""

        for transaction in self.fund_transactions:
            if isinstance(transaction.payer, FundPayer):
                return transaction.payer
        for session in self.sessions:
            for item in CostItem:
                payer = session.payers.payer(item)
                if isinstance(payer, FundPayer):
                    return payer
        return FUND

    def has_session(self, session_id: str) -> bool:
        return any(session.session_id == session_id for session in self.sessions)

    def has_transaction(self, transaction_id: str) -> bool:
        return any(
            transaction.transaction_id == transaction_id for transaction in self.fund_transactions
        )

    def get_session(self, session_id: str) -> Session:
        """Retrieve a session, raising informative errors when missing."""

        for session in self.sessions:
            if session.session_id == session_id:
                return session
        raise KeyError(f"Session {session_id} not found")

    def as_dict(self) -> Dict[str, object]:
        return {
            "sessions": [session.as_dict() for session in self.sessions],
            "fundTransactions": [transaction.as_dict() for transaction in self.fund_transactions],
            "members": list(self.members),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AppState":
        payload = _ensure_mapping(payload, "Ledger snapshot")
        return cls(
            sessions=tuple(Session.from_dict(item) for item in _records(payload, "sessions")),
            fund_transactions=tuple(
                FundTransaction.from_dict(item) for item in _records(payload, "fundTransactions")
            ),
            members=tuple(str(name) for name in _records(payload, "members")),
        )
