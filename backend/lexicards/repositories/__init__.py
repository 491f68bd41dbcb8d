"""Repositories module for data access layer."""

from .card_store import (
    CardStore,
    DuplicateCardError,
    PersistenceError,
    STUDY_CARDS_KEY,
    get_card_store,
    reset_card_stores,
)
from .history_store import (
    HISTORY_LIMIT,
    HistoryStore,
    TRANSLATION_HISTORY_KEY,
    get_history_store,
)

__all__ = [
    "CardStore",
    "DuplicateCardError",
    "PersistenceError",
    "STUDY_CARDS_KEY",
    "get_card_store",
    "reset_card_stores",
    "HISTORY_LIMIT",
    "HistoryStore",
    "TRANSLATION_HISTORY_KEY",
    "get_history_store",
]
