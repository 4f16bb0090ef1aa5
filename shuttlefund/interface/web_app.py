"""Mini README: FastAPI service exposing the group ledger over JSON.

Structure:
    * create_application - application factory wiring routes to a LedgerStore.

Routes return the full snapshot record after each mutation together with
the recomputed balances, mirroring how clients replace their whole local
copy. A DELETE request counts as the user's confirmation. Malformed payloads
are rejected with 400, unknown identifiers with 404 and identifiers that are
already recorded with 409.

The local snapshot changes before the response is sent; the storage push runs
as a background task after it, so a slow backend never stalls the event loop.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import BackgroundTasks, Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from ..configuration import get_settings
from ..ledger.models import FundTransaction, Session
from ..logging_utils import configure_root_logger, get_logger
from ..service import LedgerStore
from ..sync import REGISTRY

LOGGER = get_logger(__name__)


def _build_default_store() -> LedgerStore:
    """Create a store backed by the configured repository and pull its snapshot."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    repository = REGISTRY.create(settings.storage_backend, settings)
    store = LedgerStore(repository, initial_members=settings.initial_members, defer_push=True)
    store.pull()
    return store


def _with_defaults(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in the identifier and date a client may leave out."""

    record = dict(payload)
    record.setdefault("id", str(uuid4()))
    record.setdefault("date", date.today().isoformat())
    return record


def create_application(store: Optional[LedgerStore] = None) -> FastAPI:
    """Create the FastAPI application with routes bound to a ledger store."""

    app = FastAPI(title="Shuttlefund Ledger", version="0.1.0")
    ledger_store = store if store is not None else _build_default_store()

    def snapshot_response(status_code: int = 200) -> JSONResponse:
        return JSONResponse(
            {
                "state": ledger_store.state.as_dict(),
                "balances": ledger_store.balances().as_dict(),
                "sync_status": ledger_store.sync_status,
            },
            status_code=status_code,
        )

    @app.get("/health")
    async def health() -> JSONResponse:
        """Report liveness and the storage backend in use."""

        backend = ledger_store.repository.metadata() if ledger_store.repository else {}
        return JSONResponse({"status": "ok", "version": app.version, "storage": backend})

    @app.get("/state")
    async def read_state() -> JSONResponse:
        return JSONResponse(ledger_store.state.as_dict())

    @app.get("/balances")
    async def read_balances() -> JSONResponse:
        return JSONResponse(ledger_store.balances().as_dict())

    @app.get("/summary")
    async def read_summary() -> JSONResponse:
        return JSONResponse(ledger_store.summary())

    @app.post("/members")
    async def add_member(
        background_tasks: BackgroundTasks, payload: Dict[str, Any] = Body(...)
    ) -> JSONResponse:
        """Add a member; blank or duplicate names are ignored."""

        name = payload.get("name")
        if not isinstance(name, str):
            raise HTTPException(status_code=400, detail="Field 'name' must be a string.")
        ledger_store.add_member(name)
        background_tasks.add_task(ledger_store.push_pending)
        return snapshot_response()

    @app.delete("/members/{name}")
    async def remove_member(name: str, background_tasks: BackgroundTasks) -> JSONResponse:
        if name not in ledger_store.state.members:
            raise HTTPException(status_code=404, detail=f"Member {name} not found")
        ledger_store.remove_member(name)
        background_tasks.add_task(ledger_store.push_pending)
        return snapshot_response()

    @app.post("/sessions")
    async def add_session(
        background_tasks: BackgroundTasks, payload: Dict[str, Any] = Body(...)
    ) -> JSONResponse:
        """Record a new session and its derived fund expense."""

        try:
            session = Session.from_dict(_with_defaults(payload))
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        if ledger_store.state.has_session(session.session_id):
            raise HTTPException(
                status_code=409, detail=f"Session {session.session_id} already exists"
            )
        ledger_store.add_or_update_session(session, is_edit=False)
        background_tasks.add_task(ledger_store.push_pending)
        LOGGER.info("Session %s recorded via API", session.session_id)
        return snapshot_response(status_code=201)

    @app.put("/sessions/{session_id}")
    async def update_session(
        session_id: str, background_tasks: BackgroundTasks, payload: Dict[str, Any] = Body(...)
    ) -> JSONResponse:
        """Replace an existing session wholesale."""

        if payload.get("id", session_id) != session_id:
            raise HTTPException(status_code=400, detail="Session id in body does not match the URL.")
        try:
            ledger_store.state.get_session(session_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        try:
            session = Session.from_dict({**payload, "id": session_id})
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        ledger_store.add_or_update_session(session, is_edit=True)
        background_tasks.add_task(ledger_store.push_pending)
        return snapshot_response()

    @app.delete("/sessions/{session_id}")
    async def remove_session(session_id: str, background_tasks: BackgroundTasks) -> JSONResponse:
        try:
            ledger_store.state.get_session(session_id)
        except KeyError as error:
            raise HTTPException(status_code=404, detail=str(error)) from error
        ledger_store.remove_session(session_id)
        background_tasks.add_task(ledger_store.push_pending)
        return snapshot_response()

    @app.post("/fund-transactions")
    async def add_fund_transaction(
        background_tasks: BackgroundTasks, payload: Dict[str, Any] = Body(...)
    ) -> JSONResponse:
        """Record a contribution, prepaid purchase or manual expense."""

        try:
            transaction = FundTransaction.from_dict(_with_defaults(payload))
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        if ledger_store.state.has_transaction(transaction.transaction_id):
            raise HTTPException(
                status_code=409,
                detail=f"Transaction {transaction.transaction_id} already exists",
            )
        ledger_store.add_fund_transaction(transaction)
        background_tasks.add_task(ledger_store.push_pending)
        return snapshot_response(status_code=201)

    @app.delete("/fund-transactions/{transaction_id}")
    async def remove_fund_transaction(
        transaction_id: str, background_tasks: BackgroundTasks
    ) -> JSONResponse:
        if not ledger_store.state.has_transaction(transaction_id):
            raise HTTPException(status_code=404, detail=f"Transaction {transaction_id} not found")
        ledger_store.remove_fund_transaction(transaction_id)
        background_tasks.add_task(ledger_store.push_pending)
        return snapshot_response()

    @app.post("/sync/pull")
    def pull_snapshot() -> JSONResponse:
        """Reload the snapshot from storage; runs in the threadpool as it blocks on I/O."""

        ledger_store.pull()
        return snapshot_response()

    return app
