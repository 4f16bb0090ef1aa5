"""Mini README: Abstract storage port for ledger snapshots.

Structure:
    * SnapshotStoreError - raised when a backend cannot load or save.
    * MALFORMED_SNAPSHOT_ERRORS - parse failures reported as SnapshotStoreError.
    * SnapshotRepository - abstract interface implemented by storage backends.

The ledger core never talks to storage directly. The ``LedgerStore``
service calls ``load`` on start-up or on an explicit pull and ``save`` after
each mutation. Backends exchange the snapshot as the camelCase JSON record
produced by ``AppState.as_dict``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..ledger.models import AppState
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

# Errors raised while turning a stored payload into a snapshot.
MALFORMED_SNAPSHOT_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


class SnapshotStoreError(RuntimeError):
    """A storage backend failed to read or write the snapshot."""


class SnapshotRepository(ABC):
    """Base interface for snapshot storage backends."""

    backend_name: str = "generic"

    @abstractmethod
    def load(self) -> Optional[AppState]:
        """Return the last stored snapshot, or ``None`` when nothing is stored."""

    @abstractmethod
    def save(self, state: AppState) -> None:
        """Replace the stored snapshot with ``state``."""

    def metadata(self) -> Dict[str, str]:
        """Return diagnostic metadata for status displays."""

        return {"backend": self.backend_name}
