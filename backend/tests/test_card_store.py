"""Tests for the card store (get-or-create, updates, persistence failures)."""

import gc
import json
import threading

import pytest

from lexicards.models import StudyCardCreate, StudyCardUpdate
from lexicards.repositories.locks import active_lock_count
from lexicards.repositories import (
    STUDY_CARDS_KEY,
    CardStore,
    DuplicateCardError,
    PersistenceError,
    get_card_store,
)
from lexicards.srs import review_update, select_due
from lexicards.srs.scheduler import INTERVAL_TABLE, Difficulty
from lexicards.srs.time import DAY_MS, HOUR_MS
from lexicards.storage import MemoryStorage, StorageError


def draft(text="hello", translated="привет", source="en", target="ru", **extra) -> StudyCardCreate:
    return StudyCardCreate(
        originalText=text,
        translatedText=translated,
        sourceLanguage=source,
        targetLanguage=target,
        **extra,
    )


class FlakyStorage(MemoryStorage):
    """Memory storage whose reads or writes can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key):
        if self.fail_reads:
            raise StorageError("storage offline")
        return super().get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise StorageError("disk full")
        super().set(key, value)


@pytest.fixture
def flaky():
    return FlakyStorage()


@pytest.fixture
def flaky_store(flaky, clock):
    return CardStore(flaky, clock=clock)


class TestCreate:
    """Tests for card creation."""

    def test_assigns_identity_and_schedule(self, store, clock):
        card = store.create(draft())

        assert card.id
        assert card.createdAt == clock.now
        assert card.reviewCount == 0
        assert card.lastReviewed is None
        assert card.nextReview == card.createdAt + DAY_MS
        assert card.difficulty is Difficulty.MEDIUM
        assert card.imageUrl is None

    def test_keeps_draft_difficulty_and_image(self, store):
        card = store.create(draft(difficulty="hard", imageUrl="https://img.example/cat.png"))
        assert card.difficulty is Difficulty.HARD
        assert card.imageUrl == "https://img.example/cat.png"

    def test_new_cards_are_prepended(self, store, clock):
        first = store.create(draft("one", "один"))
        clock.advance(1000)
        second = store.create(draft("two", "два"))

        assert [card.id for card in store.list()] == [second.id, first.id]

    def test_create_is_idempotent_case_insensitive(self, store, clock):
        first = store.create(draft("Hello", "привет"))
        clock.advance(5000)
        again = store.create(draft("hELLO", "здравствуйте"))

        assert again.id == first.id
        # Existing record is returned unchanged
        assert again.translatedText == "привет"
        assert again.createdAt == first.createdAt
        assert len(store.list()) == 1

    def test_get_or_create_reports_creation(self, store):
        _, created = store.get_or_create(draft())
        _, created_again = store.get_or_create(draft())
        assert created is True
        assert created_again is False

    def test_cards_differing_by_target_language_are_distinct(self, store):
        ru = store.create(draft("hello", "привет", "en", "ru"))
        es = store.create(draft("hello", "hola", "en", "es"))

        assert ru.id != es.id
        assert {card.targetLanguage for card in store.list()} == {"ru", "es"}

    def test_cards_differing_by_source_language_are_distinct(self, store):
        store.create(draft("chat", "кот", "fr", "ru"))
        store.create(draft("chat", "беседа", "en", "ru"))
        assert len(store.list()) == 2


class TestReads:
    """Tests for list/get."""

    def test_get_returns_card_or_none(self, store):
        card = store.create(draft())
        assert store.get(card.id) == card
        assert store.get("missing") is None

    def test_list_returns_copies(self, store):
        store.create(draft())
        listed = store.list()
        listed[0].reviewCount = 99
        assert store.list()[0].reviewCount == 0

    def test_new_store_reads_persisted_cards(self, store, storage, clock):
        card = store.create(draft())
        reopened = CardStore(storage, clock=clock)
        assert reopened.list() == [card]


class TestUpdate:
    """Tests for partial updates."""

    def test_merges_fields(self, store):
        card = store.create(draft())
        store.update(card.id, {"translatedText": "здравствуй", "imageUrl": "https://img/x.png"})

        updated = store.get(card.id)
        assert updated.translatedText == "здравствуй"
        assert updated.imageUrl == "https://img/x.png"
        assert updated.reviewCount == card.reviewCount

    def test_accepts_update_model_with_only_set_fields(self, store):
        card = store.create(draft())
        store.update(card.id, StudyCardUpdate(imageUrl="https://img/y.png"))

        updated = store.get(card.id)
        assert updated.imageUrl == "https://img/y.png"
        assert updated.translatedText == "привет"

    def test_ignores_identity_and_creation_time(self, store):
        card = store.create(draft())
        store.update(card.id, {"id": "hijacked", "createdAt": 0, "translatedText": "мир"})

        assert store.get("hijacked") is None
        updated = store.get(card.id)
        assert updated.createdAt == card.createdAt
        assert updated.translatedText == "мир"

    def test_unknown_id_leaves_collection_unchanged(self, store, storage):
        store.create(draft("one", "один"))
        store.create(draft("two", "два"))
        raw_before = storage.get(STUDY_CARDS_KEY)

        store.update("missing", {"translatedText": "x"})

        assert storage.get(STUDY_CARDS_KEY) == raw_before
        assert len(store.list()) == 2

    def test_invalid_difficulty_is_rejected(self, store):
        card = store.create(draft())
        with pytest.raises(ValueError):
            store.update(card.id, {"difficulty": "impossible"})
        assert store.get(card.id).difficulty is Difficulty.MEDIUM

    def test_review_count_cannot_decrease(self, store, clock):
        card = store.create(draft())
        for _ in range(3):
            store.modify(card.id, lambda current: review_update(current, "easy", clock()))

        with pytest.raises(ValueError, match="reviewCount cannot decrease"):
            store.update(card.id, {"reviewCount": 0})
        assert store.get(card.id).reviewCount == 3

    def test_last_reviewed_cannot_move_backwards(self, store, clock):
        card = store.create(draft())
        store.modify(card.id, lambda current: review_update(current, "easy", clock()))

        with pytest.raises(ValueError, match="lastReviewed cannot move backwards"):
            store.update(card.id, {"lastReviewed": 1})
        with pytest.raises(ValueError, match="lastReviewed cannot move backwards"):
            store.update(card.id, StudyCardUpdate(lastReviewed=None))
        assert store.get(card.id).lastReviewed == clock.now

    def test_progress_fields_may_move_forward(self, store, clock):
        card = store.create(draft())
        store.update(card.id, {"reviewCount": 4, "lastReviewed": clock.now})
        store.update(card.id, {"lastReviewed": clock.now + 1000})

        updated = store.get(card.id)
        assert updated.reviewCount == 4
        assert updated.lastReviewed == clock.now + 1000

    def test_edit_colliding_with_another_card_is_rejected(self, store):
        store.create(draft("cat", "кот"))
        dog = store.create(draft("dog", "собака"))

        with pytest.raises(DuplicateCardError):
            store.update(dog.id, {"originalText": "CAT"})
        assert store.get(dog.id).originalText == "dog"

    def test_edit_keeping_own_triple_is_allowed(self, store):
        card = store.create(draft("cat", "кот"))
        store.update(card.id, {"originalText": "Cat"})
        assert store.get(card.id).originalText == "Cat"

    def test_modify_returns_none_for_unknown_id(self, store):
        assert store.modify("missing", lambda card: {"reviewCount": 5}) is None


class TestDelete:
    """Tests for deletion."""

    def test_removes_card(self, store):
        card = store.create(draft())
        store.delete(card.id)
        assert store.list() == []
        assert store.get(card.id) is None

    def test_unknown_id_leaves_collection_unchanged(self, store, storage):
        store.create(draft())
        raw_before = storage.get(STUDY_CARDS_KEY)

        store.delete("missing")

        assert storage.get(STUDY_CARDS_KEY) == raw_before

    def test_deleted_triple_can_be_created_again(self, store):
        card = store.create(draft())
        store.delete(card.id)
        recreated = store.create(draft())
        assert recreated.id != card.id


class TestPersistedLayout:
    """The stored JSON keeps the original field names and integer timestamps."""

    def test_fields_and_types(self, store, storage):
        store.create(draft())
        [record] = json.loads(storage.get(STUDY_CARDS_KEY))

        assert set(record) == {
            "id",
            "originalText",
            "translatedText",
            "sourceLanguage",
            "targetLanguage",
            "createdAt",
            "reviewCount",
            "difficulty",
            "nextReview",
        }
        assert isinstance(record["createdAt"], int)
        assert isinstance(record["nextReview"], int)
        assert record["difficulty"] == "medium"

    def test_optional_fields_written_when_present(self, store, storage, clock):
        card = store.create(draft(imageUrl="https://img/z.png"))
        store.modify(card.id, lambda current: review_update(current, "easy", clock()))
        [record] = json.loads(storage.get(STUDY_CARDS_KEY))

        assert record["imageUrl"] == "https://img/z.png"
        assert record["lastReviewed"] == clock.now
        assert record["reviewCount"] == 1

    def test_reads_existing_payload(self, storage, clock):
        payload = [
            {
                "id": "legacy-1",
                "originalText": "house",
                "translatedText": "дом",
                "sourceLanguage": "en",
                "targetLanguage": "ru",
                "createdAt": 1_700_000_000_000,
                "reviewCount": 2,
                "difficulty": "hard",
                "nextReview": 1_700_100_000_000,
                "lastReviewed": 1_700_050_000_000,
            }
        ]
        storage.set(STUDY_CARDS_KEY, json.dumps(payload))

        [card] = CardStore(storage, clock=clock).list()
        assert card.id == "legacy-1"
        assert card.difficulty is Difficulty.HARD
        assert card.lastReviewed == 1_700_050_000_000


class TestFailures:
    """Persistence failures never corrupt committed state."""

    def test_read_failure_degrades_to_empty(self, flaky_store, flaky):
        flaky_store.create(draft())
        flaky.fail_reads = True

        assert flaky_store.list() == []
        assert flaky_store.get("anything") is None

    def test_mutation_with_unreadable_storage_raises(self, flaky_store, flaky):
        flaky_store.create(draft())
        flaky.fail_reads = True

        with pytest.raises(PersistenceError):
            flaky_store.create(draft("two", "два"))

        flaky.fail_reads = False
        assert len(flaky_store.list()) == 1

    def test_failed_write_leaves_prior_state(self, flaky_store, flaky):
        first = flaky_store.create(draft())
        raw_before = flaky.get(STUDY_CARDS_KEY)
        flaky.fail_writes = True

        with pytest.raises(PersistenceError):
            flaky_store.create(draft("two", "два"))
        with pytest.raises(PersistenceError):
            flaky_store.update(first.id, {"translatedText": "мир"})
        with pytest.raises(PersistenceError):
            flaky_store.delete(first.id)

        assert flaky.get(STUDY_CARDS_KEY) == raw_before
        assert flaky_store.list() == [first]

    def test_corrupt_payload_is_treated_as_empty(self, store, storage):
        storage.set(STUDY_CARDS_KEY, "{not json")
        assert store.list() == []

        card = store.create(draft())
        assert store.list() == [card]

    def test_invalid_records_are_treated_as_empty(self, store, storage):
        storage.set(STUDY_CARDS_KEY, json.dumps([{"id": "x", "difficulty": "trivial"}]))
        assert store.list() == []


class TestUserStores:
    """Per-user stores are built on demand and share one lock per collection."""

    def test_stores_for_same_user_share_lock(self):
        first = get_card_store("learner-1")
        second = get_card_store("learner-1")
        other = get_card_store("learner-2")

        assert first is not second
        assert first._lock is second._lock
        assert other._lock is not first._lock

    def test_stores_see_each_others_writes(self):
        card = get_card_store("learner-1").create(draft())
        assert get_card_store("learner-1").get(card.id) == card
        assert get_card_store("learner-2").list() == []

    def test_locks_are_dropped_with_their_stores(self):
        for i in range(500):
            get_card_store(f"learner-{i}").list()
        gc.collect()

        assert active_lock_count() == 0

    def test_concurrent_creates_through_fresh_stores(self):
        words = [f"word-{i}" for i in range(20)]

        def create_word(word):
            get_card_store("learner-1").create(draft(word, word.upper()))

        threads = [threading.Thread(target=create_word, args=(word,)) for word in words]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(get_card_store("learner-1").list()) == len(words)


def test_concurrent_creates_are_all_kept(store):
    words = [f"word-{i}" for i in range(20)]

    threads = [threading.Thread(target=store.create, args=(draft(word, word.upper()),)) for word in words]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(card.originalText for card in store.list()) == sorted(words)


def test_concurrent_gradings_count_every_review(store, clock):
    card = store.create(draft())

    def grade():
        store.modify(card.id, lambda current: review_update(current, "medium", clock()))

    threads = [threading.Thread(target=grade) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.get(card.id).reviewCount == 10


class TestReviewScenarios:
    """End-to-end create / grade / select flows."""

    def test_first_easy_grading_schedules_three_days(self, store, clock):
        card = store.create(draft("hello", "привет", "en", "ru"))
        assert card.reviewCount == 0
        assert card.nextReview == card.createdAt + DAY_MS

        clock.advance(DAY_MS)
        graded = store.modify(card.id, lambda current: review_update(current, "easy", clock()))

        assert graded.reviewCount == 1
        assert graded.lastReviewed == clock.now
        assert graded.nextReview == graded.lastReviewed + 3 * DAY_MS
        assert graded.difficulty is Difficulty.EASY

    def test_repeated_hard_gradings_plateau_at_thirty_days(self, store, clock):
        card = store.create(draft())
        store.modify(card.id, lambda current: review_update(current, "easy", clock()))

        hard = INTERVAL_TABLE[Difficulty.HARD]
        for expected_count in range(2, 8):
            clock.advance(HOUR_MS)
            graded = store.modify(card.id, lambda current: review_update(current, "hard", clock()))
            assert graded.reviewCount == expected_count
            expected_days = hard[min(expected_count, len(hard) - 1)]
            assert graded.nextReview - graded.lastReviewed == expected_days * DAY_MS

        assert graded.reviewCount == 7
        assert graded.nextReview - graded.lastReviewed == 30 * DAY_MS

    def test_new_card_becomes_due_after_a_day(self, store):
        card = store.create(draft())

        assert select_due(store.list(), card.createdAt + 23 * HOUR_MS) == []
        assert select_due(store.list(), card.createdAt + 24 * HOUR_MS) == [card]

    def test_graded_card_leaves_due_set(self, store, clock):
        card = store.create(draft())
        clock.advance(DAY_MS)
        assert select_due(store.list(), clock.now) == [store.get(card.id)]

        store.modify(card.id, lambda current: review_update(current, "medium", clock()))
        assert select_due(store.list(), clock.now) == []
