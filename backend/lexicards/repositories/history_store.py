"""Translation history: the most recent translations of one user, newest first."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from pydantic import TypeAdapter, ValidationError

from lexicards.models import TranslationHistoryCreate, TranslationHistoryEntry
from lexicards.srs.time import utc_now_ms
from lexicards.storage import KeyValueStorage, StorageError, get_storage

from .card_store import PersistenceError
from .locks import KeyLock, lock_for

logger = logging.getLogger(__name__)

TRANSLATION_HISTORY_KEY = "translation-history"

# Older entries are dropped once the history grows past this
HISTORY_LIMIT = 100

_entry_list = TypeAdapter(list[TranslationHistoryEntry])


class HistoryStore:
    """Capped list of TranslationHistoryEntry records on top of a KeyValueStorage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = TRANSLATION_HISTORY_KEY,
        clock: Callable[[], int] = utc_now_ms,
        lock: KeyLock | None = None,
        limit: int = HISTORY_LIMIT,
    ):
        self._storage = storage
        self.key = key
        self._clock = clock
        self._lock = lock if lock is not None else threading.Lock()
        self.limit = limit

    def list(self) -> list[TranslationHistoryEntry]:
        """Return the history, newest first. Read failures yield an empty list."""
        try:
            raw = self._storage.get(self.key)
        except StorageError as e:
            logger.warning(f"Reading {self.key} failed, treating as empty: {e}")
            return []
        return self._decode(raw)

    def add(self, translation: TranslationHistoryCreate) -> TranslationHistoryEntry:
        """Prepend a translation, keeping only the newest `limit` entries.

        Raises:
            PersistenceError: If the history cannot be read or written
        """
        entry = TranslationHistoryEntry(**translation.model_dump(), timestamp=self._clock())
        with self._lock:
            try:
                raw = self._storage.get(self.key)
            except StorageError as e:
                logger.error(f"Reading {self.key} before write failed: {e}")
                raise PersistenceError(f"Could not read {self.key}") from e

            entries = [entry, *self._decode(raw)][: self.limit]
            try:
                self._storage.set(self.key, _entry_list.dump_json(entries).decode("utf-8"))
            except StorageError as e:
                logger.error(f"Writing {self.key} failed: {e}")
                raise PersistenceError(f"Could not write {self.key}") from e

        logger.info(
            f"Translation recorded: store={self.key}, "
            f"pair={entry.sourceLanguage}->{entry.targetLanguage}"
        )
        return entry

    def clear(self) -> None:
        """Remove the whole history.

        Raises:
            PersistenceError: If the history cannot be removed
        """
        with self._lock:
            try:
                self._storage.remove(self.key)
            except StorageError as e:
                logger.error(f"Clearing {self.key} failed: {e}")
                raise PersistenceError(f"Could not clear {self.key}") from e

        logger.info(f"Translation history cleared: store={self.key}")

    def _decode(self, raw: str | None) -> list[TranslationHistoryEntry]:
        if raw is None:
            return []
        try:
            return _entry_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Stored payload for {self.key} is corrupt, treating as empty: {e}")
            return []


def get_history_store(user_id: str) -> HistoryStore:
    """Build a store over this user's translation history."""
    key = f"{TRANSLATION_HISTORY_KEY}:{user_id}"
    return HistoryStore(get_storage(), key=key, lock=lock_for(key))
