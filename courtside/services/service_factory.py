"""
Service Factory for dependency injection.

This module wires the storage backend into the typed stores and services, so
that the rotation engine only ever sees injected collaborators.
"""
import logging
from typing import Callable, Optional

from .game_session import GameSession
from .persistence_service import PersistenceService
from .storage import JsonFileStore, KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating service instances over one storage backend.

    The backend is a JSON directory when ``data_dir`` is given and an
    in-memory store otherwise.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.data_dir = data_dir
        self.clock = clock
        self._store: Optional[KeyValueStore] = None
        self._persistence_service: Optional[PersistenceService] = None

    def create_game_session(self) -> GameSession:
        """
        Create a GameSession over the shared store.

        Returns:
            GameSession that has not loaded a game yet
        """
        return GameSession(self._get_store(), clock=self.clock)

    def create_persistence_service(self) -> PersistenceService:
        return self._get_persistence_service()

    def _get_store(self) -> KeyValueStore:
        """Get singleton storage backend."""
        if self._store is None:
            if self.data_dir:
                logger.info("Storing records in %s", self.data_dir)
                self._store = JsonFileStore(self.data_dir)
            else:
                logger.info("No data directory configured, records are kept in memory")
                self._store = MemoryStore()
        return self._store

    def _get_persistence_service(self) -> PersistenceService:
        """Get singleton persistence service."""
        if self._persistence_service is None:
            self._persistence_service = PersistenceService(self._get_store())
        return self._persistence_service

    def configure_custom_store(self, store: KeyValueStore) -> None:
        """Use a custom storage backend for every service created afterwards."""
        self._store = store
        self._persistence_service = None
