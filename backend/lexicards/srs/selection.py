"""Queries over a card collection: due set, filters and counters."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, TypedDict

from .scheduler import Difficulty
from .time import ms_to_datetime

if TYPE_CHECKING:
    from lexicards.models.card import StudyCard


class CardStats(TypedDict):
    total: int
    forReview: int
    easy: int
    medium: int
    hard: int


def is_due(card: StudyCard, now_ms: int) -> bool:
    return card.nextReview <= now_ms


def select_due(cards: Iterable[StudyCard], now_ms: int) -> list[StudyCard]:
    """Return the cards with nextReview <= now_ms, preserving input order."""
    return [card for card in cards if is_due(card, now_ms)]


def filter_cards(
    cards: Iterable[StudyCard],
    now_ms: int,
    query: str | None = None,
    difficulty: Difficulty | None = None,
    source_language: str | None = None,
    due_only: bool = False,
) -> list[StudyCard]:
    """Narrow a card list the way the study page does.

    `query` matches case-insensitively against the original and translated text.
    A blank query is ignored; otherwise it is matched as given, untrimmed.
    """
    result = list(cards)

    if query and query.strip():
        needle = query.lower()
        result = [
            card
            for card in result
            if needle in card.originalText.lower() or needle in card.translatedText.lower()
        ]

    if difficulty is not None:
        result = [card for card in result if card.difficulty == difficulty]

    if source_language:
        result = [card for card in result if card.sourceLanguage == source_language]

    if due_only:
        result = select_due(result, now_ms)

    return result


def card_stats(cards: Iterable[StudyCard], now_ms: int) -> CardStats:
    stats = CardStats(total=0, forReview=0, easy=0, medium=0, hard=0)
    for card in cards:
        stats["total"] += 1
        if is_due(card, now_ms):
            stats["forReview"] += 1
        stats[card.difficulty.value] += 1
    return stats


def count_reviewed_on_day(cards: Iterable[StudyCard], now_ms: int) -> int:
    """Count cards last reviewed on the same UTC calendar day as now_ms."""
    today = ms_to_datetime(now_ms).date()
    return sum(
        1
        for card in cards
        if card.lastReviewed is not None and ms_to_datetime(card.lastReviewed).date() == today
    )
