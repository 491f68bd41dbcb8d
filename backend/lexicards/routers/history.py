"""Translation history and profile statistics API router."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from lexicards.auth import CurrentUser, get_current_user
from lexicards.models import (
    ProfileStatsResponse,
    TranslationHistoryCreate,
    TranslationHistoryEntry,
    TranslationHistoryListResponse,
)
from lexicards.repositories import PersistenceError, get_card_store, get_history_store
from lexicards.srs import count_reviewed_on_day
from lexicards.srs.time import utc_now_ms

logger = logging.getLogger(__name__)

router = APIRouter(tags=["history"])


def _storage_unavailable(e: PersistenceError) -> HTTPException:
    logger.error(f"History store unavailable: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="History storage is unavailable. Please try again.",
    )


@router.get("/history", response_model=TranslationHistoryListResponse)
async def list_history(
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> TranslationHistoryListResponse:
    """List the caller's recent translations, newest first."""
    entries = get_history_store(user.user_id).list()
    return TranslationHistoryListResponse(entries=entries, count=len(entries))


@router.post("/history", response_model=TranslationHistoryEntry, status_code=status.HTTP_201_CREATED)
async def add_history_entry(
    translation: TranslationHistoryCreate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> TranslationHistoryEntry:
    """Record a completed translation."""
    try:
        return get_history_store(user.user_id).add(translation)
    except PersistenceError as e:
        raise _storage_unavailable(e)


@router.delete("/history", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(user: Annotated[CurrentUser, Depends(get_current_user)]) -> None:
    """Clear the caller's translation history."""
    try:
        get_history_store(user.user_id).clear()
    except PersistenceError as e:
        raise _storage_unavailable(e)


@router.get("/profile/stats", response_model=ProfileStatsResponse)
async def profile_stats(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    now: int | None = Query(None, ge=0, description="Reference time (ms); defaults to now"),
) -> ProfileStatsResponse:
    """Count cards, recorded translations and cards reviewed today (UTC)."""
    reference = now if now is not None else utc_now_ms()
    cards = get_card_store(user.user_id).list()
    return ProfileStatsResponse(
        totalCards=len(cards),
        totalTranslations=len(get_history_store(user.user_id).list()),
        reviewedToday=count_reviewed_on_day(cards, reference),
    )
