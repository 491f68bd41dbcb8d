"""Study cards API router."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from lexicards.auth import CurrentUser, get_current_user
from lexicards.models import (
    CardStatsResponse,
    ReviewRequest,
    StudyCard,
    StudyCardCreate,
    StudyCardListResponse,
    StudyCardResponse,
    StudyCardUpdate,
)
from lexicards.repositories import DuplicateCardError, PersistenceError, get_card_store
from lexicards.srs import Difficulty, card_stats, filter_cards, review_update, select_due
from lexicards.srs.time import utc_now_ms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["cards"])


def _list_response(cards: list[StudyCard]) -> StudyCardListResponse:
    return StudyCardListResponse(
        cards=[StudyCardResponse(**card.model_dump()) for card in cards],
        count=len(cards),
    )


def _storage_unavailable(e: PersistenceError) -> HTTPException:
    logger.error(f"Card store unavailable: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Card storage is unavailable. Please try again.",
    )


@router.get("", response_model=StudyCardListResponse)
async def list_cards(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    q: str | None = Query(None, description="Case-insensitive search in original or translated text"),
    difficulty: Difficulty | None = None,
    sourceLanguage: str | None = None,
    dueOnly: bool = False,
) -> StudyCardListResponse:
    """List the caller's cards, newest first, with optional filters."""
    store = get_card_store(user.user_id)
    cards = filter_cards(
        store.list(),
        utc_now_ms(),
        query=q,
        difficulty=difficulty,
        source_language=sourceLanguage,
        due_only=dueOnly,
    )
    return _list_response(cards)


@router.get("/due", response_model=StudyCardListResponse)
async def list_due_cards(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    now: int | None = Query(None, ge=0, description="Reference time (ms); defaults to now"),
) -> StudyCardListResponse:
    """List cards whose nextReview is at or before `now`, in collection order."""
    store = get_card_store(user.user_id)
    reference = now if now is not None else utc_now_ms()
    return _list_response(select_due(store.list(), reference))


@router.get("/stats", response_model=CardStatsResponse)
async def get_card_stats(
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CardStatsResponse:
    """Count cards in total, due for review, and per difficulty."""
    store = get_card_store(user.user_id)
    return CardStatsResponse(**card_stats(store.list(), utc_now_ms()))


@router.get("/{card_id}", response_model=StudyCardResponse)
async def get_card(
    card_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> StudyCardResponse:
    """Get a specific card by ID."""
    card = get_card_store(user.user_id).get(card_id)
    if card is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card_id} not found",
        )
    return StudyCardResponse(**card.model_dump())


@router.post("", response_model=StudyCardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    card_create: StudyCardCreate,
    response: Response,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> StudyCardResponse:
    """Add a card, or return the existing card for the same word and language pair."""
    store = get_card_store(user.user_id)
    try:
        card, created = store.get_or_create(card_create)
    except PersistenceError as e:
        raise _storage_unavailable(e)

    if not created:
        response.status_code = status.HTTP_200_OK
    return StudyCardResponse(**card.model_dump())


@router.patch("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_card(
    card_id: str,
    card_update: StudyCardUpdate,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> None:
    """Edit card fields. Unknown IDs are ignored."""
    store = get_card_store(user.user_id)
    try:
        store.update(card_id, card_update)
    except DuplicateCardError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Card with ID {e.existing_id} already holds this word and language pair",
        )
    except PersistenceError as e:
        raise _storage_unavailable(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: str, user: Annotated[CurrentUser, Depends(get_current_user)]
) -> None:
    """Delete a card. Unknown IDs are ignored."""
    try:
        get_card_store(user.user_id).delete(card_id)
    except PersistenceError as e:
        raise _storage_unavailable(e)


@router.post("/{card_id}/review", response_model=StudyCardResponse)
async def review_card(
    card_id: str,
    review: ReviewRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> StudyCardResponse:
    """Grade a card and reschedule it.

    The review count is incremented, the next due time is computed from the
    incremented count, and both are saved with lastReviewed in one update.
    """
    store = get_card_store(user.user_id)
    now_ms = utc_now_ms()
    try:
        card = store.modify(card_id, lambda current: review_update(current, review.difficulty, now_ms))
    except PersistenceError as e:
        raise _storage_unavailable(e)

    if card is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card with ID {card_id} not found",
        )

    logger.info(
        f"Card graded: user={user.user_id}, card={card.id}, difficulty={card.difficulty.value}, "
        f"review_count={card.reviewCount}, next_review={card.nextReview}"
    )
    return StudyCardResponse(**card.model_dump())
