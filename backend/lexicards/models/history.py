"""Translation history and profile statistics models."""

from pydantic import BaseModel, Field

from lexicards.models.card import generate_uuid
from lexicards.srs.time import utc_now_ms


class TranslationHistoryCreate(BaseModel):
    """A completed translation reported by the translator page."""

    originalText: str = Field(..., min_length=1, max_length=2000)
    translatedText: str = Field(..., min_length=1, max_length=2000)
    sourceLanguage: str = Field(..., min_length=1, max_length=16)
    targetLanguage: str = Field(..., min_length=1, max_length=16)
    confidence: float = Field(0.5, ge=0.0, le=1.0, description="Translation confidence (0-1)")


class TranslationHistoryEntry(TranslationHistoryCreate):
    """History entry as persisted (timestamp in epoch milliseconds)."""

    id: str = Field(default_factory=generate_uuid, description="Unique identifier")
    timestamp: int = Field(default_factory=utc_now_ms, description="Translation time (ms)")


class TranslationHistoryListResponse(BaseModel):
    """Response containing the history, newest first."""

    entries: list[TranslationHistoryEntry]
    count: int


class ProfileStatsResponse(BaseModel):
    """Counters shown on the profile page."""

    totalCards: int
    totalTranslations: int
    reviewedToday: int
