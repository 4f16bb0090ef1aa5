"""Mini README: Tests for the FastAPI ledger routes.

Most tests create the application over an in-memory LedgerStore (no
repository) and exercise routing, payload validation and status codes. One
test uses a recording repository to check the background push.
"""

from __future__ import annotations

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from shuttlefund.interface import create_application
from shuttlefund.ledger import AppState
from shuttlefund.service import LedgerStore
from shuttlefund.sync import SnapshotRepository

SESSION = {
    "id": "s1",
    "date": "2024-06-01",
    "payers": {"court": "Fund", "water": "A", "shuttle": "Fund"},
    "costs": {"court": 100000, "water": 10000, "shuttle": 0},
    "isPrepaid": {"court": False, "water": False, "shuttle": False},
    "participants": ["A", "B"],
}


@pytest.fixture()
def client() -> TestClient:
    """Create a test client over a fresh two-member store."""

    return TestClient(create_application(LedgerStore(initial_members=("A", "B"))))


def test_health_endpoint(client: TestClient) -> None:
    """Health endpoint should return status and version."""

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_session_lifecycle(client: TestClient) -> None:
    """Sessions can be created, edited and deleted with their derived expense."""

    created = client.post("/sessions", json=SESSION)
    assert created.status_code == 201
    body = created.json()
    assert body["state"]["fundTransactions"][0]["amount"] == 100000
    assert body["balances"] == {"totalFund": -100000, "memberBalances": {"A": -55000, "B": -55000}}

    edited = client.put("/sessions/s1", json={**SESSION, "costs": {"court": 80000, "water": 0, "shuttle": 0}})
    assert edited.status_code == 200
    assert len(edited.json()["state"]["sessions"]) == 1
    assert edited.json()["state"]["fundTransactions"][0]["amount"] == 80000

    deleted = client.delete("/sessions/s1")
    assert deleted.status_code == 200
    assert deleted.json()["state"]["sessions"] == []
    assert deleted.json()["state"]["fundTransactions"] == []


def test_session_routes_validate_input(client: TestClient) -> None:
    """Bad payloads give 400 and unknown sessions 404."""

    bad_costs = {**SESSION, "costs": {"court": -1, "water": 0, "shuttle": 0}}
    assert client.post("/sessions", json=bad_costs).status_code == 400
    assert client.put("/sessions/missing", json=SESSION | {"id": "missing"}).status_code == 404
    assert client.put("/sessions/s1", json=SESSION | {"id": "other"}).status_code == 400
    assert client.delete("/sessions/missing").status_code == 404


def test_members_and_fund_transactions(client: TestClient) -> None:
    """Members and fund entries flow through to balances and the summary."""

    client.post("/members", json={"name": "  C "})
    response = client.post(
        "/fund-transactions",
        json={"id": "p1", "date": "2024-06-02", "amount": 60000, "payer": "A", "type": "PREPAID_PURCHASE"},
    )
    assert response.status_code == 201
    assert response.json()["balances"]["memberBalances"] == {"A": 40000, "B": -20000, "C": -20000}

    summary = client.get("/summary").json()
    assert summary["member_count"] == 3
    assert summary["transaction_counts"]["PREPAID_PURCHASE"] == 1

    assert client.delete("/fund-transactions/p1").status_code == 200
    assert client.get("/balances").json() == {"totalFund": 0, "memberBalances": {"A": 0, "B": 0, "C": 0}}
    assert client.delete("/fund-transactions/p1").status_code == 404


def test_member_routes(client: TestClient) -> None:
    """Removing unknown members is 404; the fund label cannot be added."""

    assert client.post("/members", json={"name": 5}).status_code == 400
    client.post("/members", json={"name": "Fund"})
    assert client.get("/state").json()["members"] == ["A", "B"]
    assert client.delete("/members/Z").status_code == 404
    assert client.delete("/members/B").json()["state"]["members"] == ["A"]


def test_generated_ids_for_new_records(client: TestClient) -> None:
    """Records posted without an id or date receive defaults."""

    response = client.post("/fund-transactions", json={"amount": 1000, "payer": "B", "type": "contribution"})

    transaction = response.json()["state"]["fundTransactions"][0]
    assert transaction["id"]
    assert transaction["date"]
    assert transaction["type"] == "CONTRIBUTION"


@pytest.mark.parametrize("amount", ["NaN", "Infinity", "-inf"])
def test_non_finite_amounts_are_rejected(client: TestClient, amount: str) -> None:
    """Amounts that are not finite numbers give 400 and leave the ledger usable."""

    before = client.get("/state").json()

    response = client.post(
        "/fund-transactions",
        json={"id": "bad", "date": "2024-06-02", "amount": amount, "payer": "A", "type": "CONTRIBUTION"},
    )
    bad_session = client.post("/sessions", json={**SESSION, "costs": {"court": amount}})

    assert response.status_code == 400
    assert bad_session.status_code == 400
    assert client.get("/state").json() == before
    assert client.get("/balances").status_code == 200
    assert client.get("/summary").status_code == 200


def test_wrongly_shaped_session_payload_is_rejected(client: TestClient) -> None:
    """A list where the cost object belongs gives 400 rather than a server error."""

    response = client.post("/sessions", json={**SESSION, "costs": []})

    assert response.status_code == 400
    assert client.get("/state").json()["sessions"] == []


def test_duplicate_ids_are_rejected_with_conflict(client: TestClient) -> None:
    """Posting an id that is already recorded gives 409 and changes nothing."""

    assert client.post("/sessions", json=SESSION).status_code == 201
    duplicate = client.post("/sessions", json={**SESSION, "costs": {"court": 50000, "water": 0, "shuttle": 0}})

    assert duplicate.status_code == 409
    state = client.get("/state").json()
    assert [session["id"] for session in state["sessions"]] == ["s1"]
    assert [tx["id"] for tx in state["fundTransactions"]] == ["tx-session-s1"]
    assert client.get("/balances").json()["totalFund"] == -100000

    contribution = {"id": "c1", "date": "2024-06-02", "amount": 20000, "payer": "A", "type": "CONTRIBUTION"}
    assert client.post("/fund-transactions", json=contribution).status_code == 201
    assert client.post("/fund-transactions", json=contribution).status_code == 409
    assert client.post("/fund-transactions", json={**contribution, "id": "tx-session-s1"}).status_code == 409
    assert len(client.get("/state").json()["fundTransactions"]) == 2


class _RecordingRepository(SnapshotRepository):
    backend_name = "memory"

    def __init__(self) -> None:
        self.saved: List[AppState] = []

    def load(self) -> Optional[AppState]:
        return self.saved[-1] if self.saved else None

    def save(self, state: AppState) -> None:
        self.saved.append(state)


def test_deferred_store_pushes_after_each_mutation() -> None:
    """With a deferred store the snapshot is saved by the background push."""

    repository = _RecordingRepository()
    store = LedgerStore(repository, initial_members=("A", "B"), defer_push=True)
    client = TestClient(create_application(store))

    client.post("/members", json={"name": "C"})
    client.post("/sessions", json=SESSION)

    assert [state.members for state in repository.saved] == [("A", "B", "C"), ("A", "B", "C")]
    assert repository.saved[-1] == store.state
    assert not store.has_pending_push

    assert client.post("/sync/pull").json()["sync_status"] == "success"
    assert len(repository.saved) == 2
