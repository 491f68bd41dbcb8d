"""Grading protocol for a single review event.

The functions here never touch a card; they compute the field values the
caller hands to the card store as one atomic update.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .scheduler import Difficulty, compute_next_review, parse_difficulty

if TYPE_CHECKING:
    from lexicards.models.card import StudyCard


def review_update(card: StudyCard, difficulty: Difficulty | str, now_ms: int) -> dict[str, Any]:
    """Compute the fields to persist after grading a card.

    Rules:
    - reviewCount is incremented by exactly one
    - nextReview is scheduled from the incremented count
    - lastReviewed becomes now, but never moves backwards
    - difficulty records the most recent grade (not an average)

    Raises:
        ValueError: If difficulty is not easy/medium/hard
    """
    grade = parse_difficulty(difficulty)
    review_count = card.reviewCount + 1

    last_reviewed = now_ms
    if card.lastReviewed is not None and card.lastReviewed > now_ms:
        last_reviewed = card.lastReviewed

    return {
        "difficulty": grade,
        "reviewCount": review_count,
        "lastReviewed": last_reviewed,
        "nextReview": compute_next_review(grade, review_count, now_ms),
    }
