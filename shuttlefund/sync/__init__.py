"""Mini README: Snapshot storage collaborators for Shuttlefund.

Exposes the abstract repository port, the local JSON and Supabase
implementations, and the registry that picks one from settings.
"""

from .base import SnapshotRepository, SnapshotStoreError
from .json_repository import JsonFileRepository
from .registry import REGISTRY, RepositoryRegistry
from .supabase_repository import SupabaseRepository, build_supabase_client

__all__ = [
    "JsonFileRepository",
    "REGISTRY",
    "RepositoryRegistry",
    "SnapshotRepository",
    "SnapshotStoreError",
    "SupabaseRepository",
    "build_supabase_client",
]
