"""
Persistence service for the Courtside rotation timer.

This module handles saving and loading the ongoing game snapshot, archiving
finished games and publishing the live statistics preview.
"""
import logging
from typing import Optional

from ..models import ArchivedGame
from ..utils import SNAPSHOT_VERSION, StorageKeys
from .rotation_service import RotationService
from .storage import HistoryStore, KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class PersistenceService:
    """
    Service for persisting the live game.

    Every write is preceded by a clock flush so the stored snapshot never lags
    behind the in-memory state. Storage failures are logged and reported as a
    ``False``/``None`` result; the in-memory game stays authoritative.
    """

    def __init__(self, store: KeyValueStore, history: Optional[HistoryStore] = None):
        self.store = store
        self.history = history or HistoryStore(store)

    # ---------- Ongoing game snapshot ---------- #

    def save_snapshot(self, rotation: RotationService) -> bool:
        """
        Save the ongoing game, or delete the record once the game has ended.

        Args:
            rotation: Live game to persist

        Returns:
            True if storage was updated
        """
        rotation.clock.flush()
        gs = rotation.game_state
        try:
            if gs.game_ended:
                self.store.remove(StorageKeys.ONGOING_GAME)
            else:
                self.store.save(StorageKeys.ONGOING_GAME, gs.to_json(rotation.clock.now()))
            return True
        except StorageError as e:
            logger.warning("Could not save ongoing game: %s", e)
            return False

    def load_snapshot(self) -> Optional[dict]:
        """
        Load a snapshot that can be resumed.

        Records with a missing or different version, non-object records and
        finished games are discarded; finished games are also deleted.

        Returns:
            Snapshot dictionary, or None when there is nothing to resume
        """
        try:
            data = self.store.load(StorageKeys.ONGOING_GAME, None)
        except StorageError as e:
            logger.warning("Could not read ongoing game: %s", e)
            return None

        if data is None:
            return None
        if not isinstance(data, dict):
            logger.warning("Discarding malformed ongoing game record")
            return None
        if data.get("version") != SNAPSHOT_VERSION:
            logger.warning("Discarding ongoing game with version %r", data.get("version"))
            return None
        if data.get("gameEnded"):
            logger.info("Removing snapshot of a finished game")
            self.delete_snapshot()
            return None
        return data

    def delete_snapshot(self) -> bool:
        try:
            self.store.remove(StorageKeys.ONGOING_GAME)
            return True
        except StorageError as e:
            logger.warning("Could not delete ongoing game: %s", e)
            return False

    def has_unfinished_game(self) -> bool:
        """Whether a resumable game is waiting (used by the home screen)."""
        try:
            data = self.store.load(StorageKeys.ONGOING_GAME, None)
        except StorageError as e:
            logger.warning("Could not read ongoing game: %s", e)
            return False
        return (
            isinstance(data, dict)
            and data.get("version") == SNAPSHOT_VERSION
            and not data.get("gameEnded")
        )

    # ---------- History archive ---------- #

    def archive_game(self, archive: ArchivedGame) -> Optional[str]:
        """
        Prepend a finished game to the history and drop the live records.

        Returns:
            The archive id, or None if the history could not be written
        """
        try:
            self.history.prepend(archive)
        except StorageError as e:
            logger.warning("Could not archive game %s: %s", archive.id, e)
            return None

        try:
            self.store.remove(StorageKeys.ONGOING_GAME)
            self.history.clear_live_preview()
        except StorageError as e:
            logger.warning("Archived game %s but could not clear live records: %s", archive.id, e)
        logger.info(
            "Archived game %s (%ds, %d players)",
            archive.id, archive.total_game_seconds, len(archive.players),
        )
        return archive.id

    # ---------- Live statistics preview ---------- #

    def save_live_preview(self, rotation: RotationService) -> Optional[ArchivedGame]:
        """
        Publish the statistics so far under the ``live`` id.

        The ongoing game record is left alone.

        Returns:
            The preview that was stored, or None
        """
        preview = rotation.build_live_snapshot()
        if preview is None:
            return None
        try:
            self.history.save_live_preview(preview)
        except StorageError as e:
            logger.warning("Could not save live preview: %s", e)
            return None
        return preview

    def clear_live_preview(self) -> bool:
        try:
            self.history.clear_live_preview()
            return True
        except StorageError as e:
            logger.warning("Could not clear live preview: %s", e)
            return False

    def auto_save(self, rotation: RotationService) -> bool:
        """Periodic save; never raises."""
        if rotation.is_ended:
            return False
        return self.save_snapshot(rotation)
