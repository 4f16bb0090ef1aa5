"""Mini README: Local JSON file storage for ledger snapshots.

The whole snapshot is written to a temporary sibling file and then moved
over the target, so a crash mid-write never leaves a truncated ledger.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional

from ..ledger.models import AppState
from ..logging_utils import get_logger
from .base import MALFORMED_SNAPSHOT_ERRORS, SnapshotRepository, SnapshotStoreError

LOGGER = get_logger(__name__)


class JsonFileRepository(SnapshotRepository):
    """Store the snapshot as a single JSON document on disk."""

    backend_name = "json"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[AppState]:
        if not self.path.exists():
            LOGGER.debug("No snapshot at %s", self.path)
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            state = AppState.from_dict(payload)
        except (OSError, *MALFORMED_SNAPSHOT_ERRORS) as error:
            raise SnapshotStoreError(f"Could not read snapshot {self.path}: {error}") from error
        LOGGER.info(
            "Loaded snapshot from %s (%s sessions, %s transactions)",
            self.path,
            len(state.sessions),
            len(state.fund_transactions),
        )
        return state

    def save(self, state: AppState) -> None:
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(state.as_dict(), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            os.replace(temp_path, self.path)
        except OSError as error:
            raise SnapshotStoreError(f"Could not write snapshot {self.path}: {error}") from error
        LOGGER.debug("Saved snapshot to %s", self.path)

    def metadata(self) -> Dict[str, str]:
        return {"backend": self.backend_name, "path": str(self.path)}
