"""SRS helpers (fixed interval tables, grading protocol and due selection)."""

from .grading import review_update
from .scheduler import (
    INTERVAL_TABLE,
    Difficulty,
    compute_next_review,
    interval_days,
    parse_difficulty,
)
from .selection import (
    CardStats,
    card_stats,
    count_reviewed_on_day,
    filter_cards,
    is_due,
    select_due,
)
from .time import (
    DAY_MS,
    HOUR_MS,
    add_days_ms,
    add_hours_ms,
    datetime_to_ms,
    ms_to_datetime,
    ms_to_iso_z,
    utc_datetime_to_iso_z,
    utc_now,
    utc_now_ms,
)

__all__ = [
    "Difficulty",
    "INTERVAL_TABLE",
    "compute_next_review",
    "interval_days",
    "parse_difficulty",
    "review_update",
    "CardStats",
    "card_stats",
    "count_reviewed_on_day",
    "filter_cards",
    "is_due",
    "select_due",
    "DAY_MS",
    "HOUR_MS",
    "add_days_ms",
    "add_hours_ms",
    "datetime_to_ms",
    "ms_to_datetime",
    "ms_to_iso_z",
    "utc_datetime_to_iso_z",
    "utc_now",
    "utc_now_ms",
]
