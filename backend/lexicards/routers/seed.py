"""Seed API router for populating sample vocabulary."""

from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from lexicards.models import StudyCardCreate
from lexicards.repositories import PersistenceError, get_card_store
from lexicards.auth import get_current_user, CurrentUser

router = APIRouter(prefix="/seed", tags=["seed"])


# Sample data (English -> Russian)
SAMPLE_CARDS = [
    StudyCardCreate(originalText="hello", translatedText="привет", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="world", translatedText="мир", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="cat", translatedText="кот", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="dog", translatedText="собака", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="house", translatedText="дом", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="book", translatedText="книга", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="water", translatedText="вода", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="friend", translatedText="друг", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="family", translatedText="семья", sourceLanguage="en", targetLanguage="ru"),
    StudyCardCreate(originalText="school", translatedText="школа", sourceLanguage="en", targetLanguage="ru"),
]


class SeedResponse(BaseModel):
    """Response from seed operation."""

    message: str
    cards_created: int
    cards_total: int


@router.post("", response_model=SeedResponse, status_code=status.HTTP_201_CREATED)
async def seed_sample_data(
    user: Annotated[CurrentUser, Depends(get_current_user)]
) -> SeedResponse:
    """Add the sample cards to the caller's collection (existing words are kept)."""
    store = get_card_store(user.user_id)

    cards_created = 0
    try:
        for card_create in SAMPLE_CARDS:
            _, created = store.get_or_create(card_create)
            if created:
                cards_created += 1
    except PersistenceError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Card storage is unavailable. Please try again.",
        )

    return SeedResponse(
        message="Sample data created successfully",
        cards_created=cards_created,
        cards_total=len(store.list()),
    )
