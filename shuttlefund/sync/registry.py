"""Mini README: Registry mapping storage backend names to repository factories.

Structure:
    * RepositoryRegistry - registers factories and builds repositories from settings.
    * REGISTRY - process-wide registry preloaded with the json and supabase backends.

A factory receives the settings object and returns a ready repository, so
backends needing clients or paths can build them from configuration.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable

from ..configuration import ShuttlefundSettings
from ..logging_utils import get_logger
from .base import SnapshotRepository
from .json_repository import JsonFileRepository
from .supabase_repository import SupabaseRepository, build_supabase_client

LOGGER = get_logger(__name__)

RepositoryFactory = Callable[[ShuttlefundSettings], SnapshotRepository]


class RepositoryRegistry:
    """Simple registry for mapping backend identifiers to factories."""

    def __init__(self) -> None:
        self._factories: Dict[str, RepositoryFactory] = {}

    def register(self, name: str, factory: RepositoryFactory) -> None:
        """Register a factory under a backend name."""

        identifier = name.lower()
        LOGGER.debug("Registering storage backend '%s'", identifier)
        self._factories[identifier] = factory

    def available_backends(self) -> Iterable[str]:
        """Return backend identifiers for display."""

        return sorted(self._factories.keys())

    def create(self, identifier: str, settings: ShuttlefundSettings) -> SnapshotRepository:
        """Instantiate the repository registered under ``identifier``."""

        factory = self._factories.get(identifier.lower())
        if not factory:
            raise KeyError(f"Unknown storage backend '{identifier}'")
        LOGGER.info("Creating storage backend '%s'", identifier)
        return factory(settings)


def _json_factory(settings: ShuttlefundSettings) -> SnapshotRepository:
    return JsonFileRepository(settings.snapshot_path)


def _supabase_factory(settings: ShuttlefundSettings) -> SnapshotRepository:
    return SupabaseRepository(
        build_supabase_client(settings),
        table=settings.sync_table,
        group_id=settings.sync_group_id,
    )


REGISTRY = RepositoryRegistry()
REGISTRY.register("json", _json_factory)
REGISTRY.register("supabase", _supabase_factory)
