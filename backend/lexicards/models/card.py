"""Study card models for storage, API requests and responses."""

from pydantic import BaseModel, Field
from uuid import uuid4

from lexicards.srs.scheduler import Difficulty
from lexicards.srs.time import DAY_MS, utc_now_ms


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class StudyCardBase(BaseModel):
    """Content fields shared by drafts and stored cards."""

    originalText: str = Field(..., min_length=1, max_length=2000, description="Source text")
    translatedText: str = Field(..., min_length=1, max_length=2000, description="Translated text")
    sourceLanguage: str = Field(..., min_length=1, max_length=16, description="Source language code")
    targetLanguage: str = Field(..., min_length=1, max_length=16, description="Target language code")
    imageUrl: str | None = Field(None, description="Optional illustration URL")


class StudyCardCreate(StudyCardBase):
    """Draft for a new card; identity and scheduling state are store-assigned."""

    difficulty: Difficulty = Field(Difficulty.MEDIUM, description="Initial difficulty grade")


class StudyCardUpdate(BaseModel):
    """Partial update of an existing card.

    Note: id and createdAt are intentionally NOT included here as they are immutable.
    """

    originalText: str | None = Field(None, min_length=1, max_length=2000)
    translatedText: str | None = Field(None, min_length=1, max_length=2000)
    sourceLanguage: str | None = Field(None, min_length=1, max_length=16)
    targetLanguage: str | None = Field(None, min_length=1, max_length=16)
    imageUrl: str | None = None
    difficulty: Difficulty | None = None
    lastReviewed: int | None = Field(None, ge=0)
    reviewCount: int | None = Field(None, ge=0)
    nextReview: int | None = Field(None, ge=0)


class StudyCard(StudyCardBase):
    """Full card model as persisted (timestamps in epoch milliseconds)."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    createdAt: int = Field(default_factory=utc_now_ms, description="Creation timestamp (ms)")
    lastReviewed: int | None = Field(None, description="Last review timestamp (ms)")
    reviewCount: int = Field(0, ge=0, description="Number of graded reviews")
    difficulty: Difficulty = Field(Difficulty.MEDIUM, description="Most recent grade")
    nextReview: int = Field(..., description="Next due timestamp (ms)")

    class Config:
        """Pydantic config."""

        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174001",
                "originalText": "hello",
                "translatedText": "привет",
                "sourceLanguage": "en",
                "targetLanguage": "ru",
                "createdAt": 1735689600000,
                "reviewCount": 0,
                "difficulty": "medium",
                "nextReview": 1735689600000 + DAY_MS,
            }
        }

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        """Normalised (text, source, target) triple used for get-or-create."""
        return dedup_key(self.originalText, self.sourceLanguage, self.targetLanguage)


def dedup_key(original_text: str, source_language: str, target_language: str) -> tuple[str, str, str]:
    return (original_text.lower(), source_language, target_language)


class StudyCardResponse(StudyCardBase):
    """Card response model returned by API."""

    id: str
    createdAt: int
    lastReviewed: int | None
    reviewCount: int
    difficulty: Difficulty
    nextReview: int


class StudyCardListResponse(BaseModel):
    """Response containing a list of cards."""

    cards: list[StudyCardResponse]
    count: int


class ReviewRequest(BaseModel):
    """Grade reported by the learner for one card."""

    difficulty: Difficulty


class CardStatsResponse(BaseModel):
    """Counters shown above the study list."""

    total: int
    forReview: int
    easy: int
    medium: int
    hard: int


class NextReviewResponse(BaseModel):
    """Result of a scheduling query."""

    difficulty: Difficulty
    reviewCount: int
    intervalDays: int
    nextReview: int
