"""Mini README: Stateful ledger service wrapping the pure reducers.

Structure:
    * LedgerStore - holds the current snapshot, applies reducers, and keeps an
      optional storage repository in step.

Every mutation computes the new snapshot locally first and only then pushes
it to the repository. A failed push is logged and reflected in
``sync_status`` but never rolls the local snapshot back: local state is
authoritative and syncing is best effort.

With ``defer_push=True`` mutations only mark the newest snapshot as pending;
``push_pending`` later writes it. Pushes are serialised by one lock and take
the latest pending snapshot while holding it, so a slow backend never sees
snapshots out of order. Marking a snapshot pending only takes a short second
lock and never waits on the backend.

After a failed pull nothing is pushed until a pull succeeds, so an outage
while loading cannot replace the stored ledger with a partial local one.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, Optional

from .balances import BalanceReport, compute_balances, summarise_ledger
from .ledger import reducers
from .ledger.models import AppState, FundTransaction, Session
from .logging_utils import get_logger
from .sync import SnapshotRepository, SnapshotStoreError

LOGGER = get_logger(__name__)

SYNC_IDLE = "idle"
SYNC_SUCCESS = "success"
SYNC_ERROR = "error"


class LedgerStore:
    """Manage the group's ledger snapshot and its storage round trips."""

    def __init__(
        self,
        repository: Optional[SnapshotRepository] = None,
        *,
        state: Optional[AppState] = None,
        initial_members: Iterable[str] = (),
        confirm: Optional[reducers.Confirmation] = None,
        defer_push: bool = False,
    ) -> None:
        self.repository = repository
        self.confirm = confirm or reducers.always_confirm
        self.defer_push = defer_push
        self.sync_status = SYNC_IDLE
        self._state = state if state is not None else AppState(members=tuple(initial_members))
        self._pending: Optional[AppState] = None
        self._pull_failed = False
        self._push_lock = threading.Lock()
        self._pending_lock = threading.Lock()
        LOGGER.debug(
            "Ledger store initialised with %s members, %s sessions, %s transactions",
            len(self._state.members),
            len(self._state.sessions),
            len(self._state.fund_transactions),
        )

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def has_pending_push(self) -> bool:
        return self._pending is not None

    def pull(self) -> AppState:
        """Replace the local snapshot with the stored one.

        When nothing is stored yet the local snapshot is pushed instead, so
        the first client to connect seeds the backend.
        """

        if self.repository is None:
            return self._state
        with self._push_lock:
            try:
                stored = self.repository.load()
            except SnapshotStoreError as error:
                LOGGER.warning("Pull failed, keeping local snapshot: %s", error)
                self._pull_failed = True
                self.sync_status = SYNC_ERROR
                return self._state
            self._pull_failed = False
            with self._pending_lock:
                self._pending = None
            if stored is None:
                self._save(self._state)
            else:
                self._state = stored
                self.sync_status = SYNC_SUCCESS
        return self._state

    def push_pending(self) -> None:
        """Write the newest deferred snapshot, if any, to the repository."""

        with self._push_lock:
            with self._pending_lock:
                state, self._pending = self._pending, None
            if state is not None:
                self._save(state)

    def _save(self, state: AppState) -> None:
        if self.repository is None:
            LOGGER.debug("No repository configured, snapshot kept locally only")
            return
        if self._pull_failed:
            LOGGER.error(
                "Not pushing to %s: the last pull failed and the stored ledger would be "
                "overwritten. Pull again once the backend is reachable.",
                self.repository.backend_name,
            )
            self.sync_status = SYNC_ERROR
            return
        try:
            self.repository.save(state)
        except SnapshotStoreError as error:
            LOGGER.warning("Push failed, snapshot kept locally: %s", error)
            self.sync_status = SYNC_ERROR
            return
        self.sync_status = SYNC_SUCCESS

    def _commit(self, state: AppState) -> AppState:
        if state is self._state:
            return state
        self._state = state
        if self.defer_push:
            with self._pending_lock:
                self._pending = state
        else:
            with self._push_lock:
                self._save(state)
        return state

    def add_member(self, name: str) -> AppState:
        return self._commit(reducers.add_member(self._state, name))

    def remove_member(self, name: str) -> AppState:
        return self._commit(reducers.remove_member(self._state, name, self.confirm))

    def add_or_update_session(self, session: Session, *, is_edit: bool = False) -> AppState:
        return self._commit(reducers.add_or_update_session(self._state, session, is_edit))

    def remove_session(self, session_id: str) -> AppState:
        return self._commit(reducers.remove_session(self._state, session_id, self.confirm))

    def add_fund_transaction(self, transaction: FundTransaction) -> AppState:
        return self._commit(reducers.add_fund_transaction(self._state, transaction))

    def remove_fund_transaction(self, transaction_id: str) -> AppState:
        return self._commit(
            reducers.remove_fund_transaction(self._state, transaction_id, self.confirm)
        )

    def balances(self) -> BalanceReport:
        return compute_balances(self._state)

    def summary(self) -> Dict[str, Any]:
        summary = summarise_ledger(self._state)
        summary["sync_status"] = self.sync_status
        return summary
