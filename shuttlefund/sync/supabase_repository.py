"""Mini README: Supabase-backed storage for ledger snapshots.

Structure:
    * build_supabase_client - create a client from settings.
    * SupabaseRepository - one row per group in the sync table.

Each group's snapshot lives in a single row ``{id, data, updated_at}``
where ``data`` holds the JSON record and ``id`` is the configured group
identifier. Saving upserts the row; loading selects its ``data`` column.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from postgrest import APIError
from supabase import Client, create_client

from ..configuration import ShuttlefundSettings
from ..ledger.models import AppState
from ..logging_utils import get_logger
from .base import MALFORMED_SNAPSHOT_ERRORS, SnapshotRepository, SnapshotStoreError

LOGGER = get_logger(__name__)


def build_supabase_client(settings: ShuttlefundSettings) -> Client:
    """Create a Supabase client, failing clearly when credentials are missing."""

    if not settings.supabase_url or not settings.supabase_key:
        raise SnapshotStoreError(
            "Supabase backend selected but SHUTTLEFUND_SUPABASE_URL and "
            "SHUTTLEFUND_SUPABASE_KEY are not both set."
        )
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseRepository(SnapshotRepository):
    """Store the snapshot in a Supabase table row keyed by group id."""

    backend_name = "supabase"

    def __init__(self, client: Client, *, table: str, group_id: str) -> None:
        self.client = client
        self.table = table
        self.group_id = group_id

    def _execute(self, query: Any) -> Any:
        try:
            return query.execute()
        except APIError as error:
            message = getattr(error, "message", None) or str(error)
            raise SnapshotStoreError(f"Supabase request failed: {message}") from error

    def load(self) -> Optional[AppState]:
        response = self._execute(
            self.client.table(self.table).select("data").eq("id", self.group_id).limit(1)
        )
        rows = response.data or []
        if not rows:
            LOGGER.info("No snapshot stored for group %s", self.group_id)
            return None
        try:
            state = AppState.from_dict(rows[0]["data"])
        except MALFORMED_SNAPSHOT_ERRORS as error:
            raise SnapshotStoreError(
                f"Stored snapshot for {self.group_id} is malformed: {error}"
            ) from error
        LOGGER.info("Pulled snapshot for group %s", self.group_id)
        return state

    def save(self, state: AppState) -> None:
        row = {
            "id": self.group_id,
            "data": state.as_dict(),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        self._execute(self.client.table(self.table).upsert(row))
        LOGGER.info("Pushed snapshot for group %s", self.group_id)

    def metadata(self) -> Dict[str, str]:
        return {"backend": self.backend_name, "table": self.table, "group_id": self.group_id}
