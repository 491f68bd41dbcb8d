"""Scheduling API router."""

from fastapi import APIRouter, Query

from lexicards.models import NextReviewResponse
from lexicards.srs import Difficulty, compute_next_review, interval_days
from lexicards.srs.time import utc_now_ms

router = APIRouter(prefix="/srs", tags=["srs"])


@router.get("/next-review", response_model=NextReviewResponse)
async def next_review(
    difficulty: Difficulty,
    reviewCount: int = Query(..., ge=0, description="Review count after incrementing for this grading"),
    now: int | None = Query(None, ge=0, description="Reference time (ms); defaults to now"),
) -> NextReviewResponse:
    """Preview when a card graded with `difficulty` would be due again."""
    reference = now if now is not None else utc_now_ms()
    return NextReviewResponse(
        difficulty=difficulty,
        reviewCount=reviewCount,
        intervalDays=interval_days(difficulty, reviewCount),
        nextReview=compute_next_review(difficulty, reviewCount, reference),
    )
