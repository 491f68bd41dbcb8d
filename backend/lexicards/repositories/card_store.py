"""Card store: durable get-or-create collection of study cards.

The whole collection is persisted as one JSON array under a single storage
key. Every mutation reads the current snapshot, builds the next one and
writes it back in a single `set`, serialised by the lock of its storage key.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from lexicards.models import StudyCard, StudyCardCreate, StudyCardUpdate, dedup_key
from lexicards.srs.time import add_hours_ms, utc_now_ms
from lexicards.storage import KeyValueStorage, StorageError, get_storage

from .locks import KeyLock, lock_for, reset_locks

logger = logging.getLogger(__name__)

STUDY_CARDS_KEY = "study-cards"

# New cards become due one day after creation
FIRST_REVIEW_DELAY_HOURS = 24

IMMUTABLE_FIELDS = frozenset({"id", "createdAt"})

_card_list = TypeAdapter(list[StudyCard])


class PersistenceError(Exception):
    """Raised when a stored collection cannot be read for writing or written."""

    pass


class DuplicateCardError(Exception):
    """Raised when an edit would give a card another card's (text, source, target) triple."""

    def __init__(self, card_id: str, existing_id: str):
        self.card_id = card_id
        self.existing_id = existing_id
        super().__init__(f"Card {card_id} would duplicate card {existing_id}")


@dataclass(frozen=True)
class _Snapshot:
    """Immutable view of the collection plus its lookup indexes."""

    cards: tuple[StudyCard, ...] = ()
    by_id: dict[str, StudyCard] = field(default_factory=dict)
    by_dedup_key: dict[tuple[str, str, str], str] = field(default_factory=dict)

    @classmethod
    def build(cls, cards: list[StudyCard]) -> _Snapshot:
        by_id: dict[str, StudyCard] = {}
        by_dedup_key: dict[tuple[str, str, str], str] = {}
        for card in cards:
            by_id.setdefault(card.id, card)
            # Newest card wins if legacy data holds duplicates
            by_dedup_key.setdefault(card.dedup_key, card.id)
        return cls(cards=tuple(cards), by_id=by_id, by_dedup_key=by_dedup_key)


_EMPTY = _Snapshot()


class CardStore:
    """Keyed collection of StudyCard records on top of a KeyValueStorage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STUDY_CARDS_KEY,
        clock: Callable[[], int] = utc_now_ms,
        lock: KeyLock | None = None,
    ):
        self._storage = storage
        self.key = key
        self._clock = clock
        self._lock = lock if lock is not None else threading.Lock()
        # (raw payload, decoded snapshot) of the last read or write
        self._cache: tuple[str, _Snapshot] | None = None

    # -- reads ---------------------------------------------------------------

    def list(self) -> list[StudyCard]:
        """Return all cards, newest first. Read failures yield an empty list."""
        return [card.model_copy() for card in self._read().cards]

    def get(self, card_id: str) -> StudyCard | None:
        card = self._read().by_id.get(card_id)
        return card.model_copy() if card is not None else None

    # -- writes --------------------------------------------------------------

    def create(self, draft: StudyCardCreate) -> StudyCard:
        """Get-or-create a card for the draft's (text, source, target) triple.

        If a card with the same text (case-insensitive) and language pair
        exists it is returned unchanged. Otherwise a new card is inserted at
        the front of the collection, due FIRST_REVIEW_DELAY_HOURS from now.

        Raises:
            PersistenceError: If the collection cannot be read or written
        """
        card, _ = self.get_or_create(draft)
        return card

    def get_or_create(self, draft: StudyCardCreate) -> tuple[StudyCard, bool]:
        """Like create(), also reporting whether a new card was inserted."""
        with self._lock:
            snapshot = self._read_for_write()
            key = dedup_key(draft.originalText, draft.sourceLanguage, draft.targetLanguage)
            existing_id = snapshot.by_dedup_key.get(key)
            if existing_id is not None:
                logger.info(f"Card already exists: store={self.key}, card={existing_id}")
                return snapshot.by_id[existing_id].model_copy(), False

            now = self._clock()
            card = StudyCard(
                **draft.model_dump(),
                createdAt=now,
                reviewCount=0,
                nextReview=add_hours_ms(now, FIRST_REVIEW_DELAY_HOURS),
            )
            self._write([card, *snapshot.cards])

        logger.info(
            f"Card created: store={self.key}, card={card.id}, "
            f"pair={card.sourceLanguage}->{card.targetLanguage}"
        )
        return card.model_copy(), True

    def update(self, card_id: str, fields: StudyCardUpdate | Mapping[str, Any]) -> None:
        """Merge fields into the card with this id.

        Unknown ids are a no-op. `id` and `createdAt` are ignored.

        Raises:
            ValueError: If the merged card is invalid or rewinds reviewCount or lastReviewed
            DuplicateCardError: If the edit collides with another card's triple
            PersistenceError: If the collection cannot be read or written
        """
        with self._lock:
            self._apply(card_id, lambda card: fields)

    def modify(
        self,
        card_id: str,
        change: Callable[[StudyCard], StudyCardUpdate | Mapping[str, Any]],
    ) -> StudyCard | None:
        """Atomically compute and merge fields from the current card.

        `change` receives a copy of the card as currently stored and returns
        the fields to merge. Returns the updated card, or None if absent.
        """
        with self._lock:
            return self._apply(card_id, change)

    def delete(self, card_id: str) -> None:
        """Remove the card with this id; unknown ids are a no-op."""
        with self._lock:
            snapshot = self._read_for_write()
            if card_id not in snapshot.by_id:
                return
            self._write([card for card in snapshot.cards if card.id != card_id])

        logger.info(f"Card deleted: store={self.key}, card={card_id}")

    # -- internals -----------------------------------------------------------

    def _apply(
        self,
        card_id: str,
        change: Callable[[StudyCard], StudyCardUpdate | Mapping[str, Any]],
    ) -> StudyCard | None:
        snapshot = self._read_for_write()
        current = snapshot.by_id.get(card_id)
        if current is None:
            return None

        changes = _clean_fields(change(current.model_copy()))
        if not changes:
            return current.model_copy()

        updated = StudyCard.model_validate({**current.model_dump(), **changes})
        _check_progress(current, updated)
        owner = snapshot.by_dedup_key.get(updated.dedup_key)
        if owner is not None and owner != card_id:
            raise DuplicateCardError(card_id, owner)

        self._write([updated if card.id == card_id else card for card in snapshot.cards])
        return updated.model_copy()

    def _read(self) -> _Snapshot:
        try:
            raw = self._storage.get(self.key)
        except StorageError as e:
            logger.warning(f"Reading {self.key} failed, treating as empty: {e}")
            return _EMPTY
        return self._decode(raw)

    def _read_for_write(self) -> _Snapshot:
        try:
            raw = self._storage.get(self.key)
        except StorageError as e:
            logger.error(f"Reading {self.key} before write failed: {e}")
            raise PersistenceError(f"Could not read {self.key}") from e
        return self._decode(raw)

    def _decode(self, raw: str | None) -> _Snapshot:
        if raw is None:
            return _EMPTY

        cache = self._cache
        if cache is not None and cache[0] == raw:
            return cache[1]

        try:
            cards = _card_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Stored payload for {self.key} is corrupt, treating as empty: {e}")
            return _EMPTY

        snapshot = _Snapshot.build(cards)
        self._cache = (raw, snapshot)
        return snapshot

    def _write(self, cards: list[StudyCard]) -> None:
        try:
            raw = _card_list.dump_json(cards, exclude_none=True).decode("utf-8")
        except PydanticSerializationError as e:
            logger.error(f"Serializing {self.key} failed: {e}")
            raise PersistenceError(f"Could not serialize {self.key}") from e

        try:
            self._storage.set(self.key, raw)
        except StorageError as e:
            logger.error(f"Writing {self.key} failed: {e}")
            raise PersistenceError(f"Could not write {self.key}") from e

        self._cache = (raw, _Snapshot.build(cards))


def _check_progress(current: StudyCard, updated: StudyCard) -> None:
    """Reject edits that rewind a card's review history."""
    if updated.reviewCount < current.reviewCount:
        raise ValueError(
            f"reviewCount cannot decrease ({current.reviewCount} -> {updated.reviewCount})"
        )
    if current.lastReviewed is not None and (
        updated.lastReviewed is None or updated.lastReviewed < current.lastReviewed
    ):
        raise ValueError(
            f"lastReviewed cannot move backwards ({current.lastReviewed} -> {updated.lastReviewed})"
        )


def _clean_fields(fields: StudyCardUpdate | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(fields, StudyCardUpdate):
        data = fields.model_dump(exclude_unset=True)
    else:
        data = dict(fields)
    return {key: value for key, value in data.items() if key not in IMMUTABLE_FIELDS}


def get_card_store(user_id: str) -> CardStore:
    """Build a store over this user's collection.

    Stores are cheap and not cached; writers to the same collection still
    serialise on the shared per-key lock.
    """
    key = f"{STUDY_CARDS_KEY}:{user_id}"
    return CardStore(get_storage(), key=key, lock=lock_for(key))


def reset_card_stores() -> None:
    """Forget the per-key locks of all stores (for testing)."""
    reset_locks()
