"""Fixed-table review scheduling.

Each difficulty owns an ordered sequence of day intervals. The review count
(already incremented for the grading being applied) indexes into it, and the
sequence plateaus at its last value once the count runs past the end.
"""

from __future__ import annotations

from enum import Enum

from .time import add_days_ms, utc_now_ms


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


INTERVAL_TABLE: dict[Difficulty, tuple[int, ...]] = {
    Difficulty.EASY: (1, 3, 7, 14, 30, 60),
    Difficulty.MEDIUM: (1, 2, 5, 10, 21, 45),
    Difficulty.HARD: (1, 1, 3, 7, 14, 30),
}


def parse_difficulty(value: Difficulty | str) -> Difficulty:
    """Coerce a raw value into a Difficulty.

    Raises:
        ValueError: If the value is not one of easy/medium/hard
    """
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(value)
    except ValueError:
        allowed = ", ".join(d.value for d in Difficulty)
        raise ValueError(f"Invalid difficulty: {value!r} (expected one of {allowed})") from None


def interval_days(difficulty: Difficulty | str, review_count: int) -> int:
    """Return the spacing interval in days for a difficulty and review count.

    Raises:
        ValueError: If difficulty is unknown or review_count is negative
    """
    if review_count < 0:
        raise ValueError(f"review_count must be >= 0, got {review_count}")

    intervals = INTERVAL_TABLE[parse_difficulty(difficulty)]
    index = min(review_count, len(intervals) - 1)
    return intervals[index]


def compute_next_review(
    difficulty: Difficulty | str,
    review_count: int,
    now_ms: int | None = None,
) -> int:
    """Compute the next due timestamp (epoch ms).

    Args:
        difficulty: Grade reported for the review
        review_count: Review count *after* incrementing for this grading
        now_ms: Reference time; defaults to the current wall clock

    Returns:
        now_ms plus the selected interval, in milliseconds since the epoch
    """
    days = interval_days(difficulty, review_count)
    if now_ms is None:
        now_ms = utc_now_ms()
    return add_days_ms(now_ms, days)
