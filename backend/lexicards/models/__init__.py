"""Models module for Pydantic schemas."""

from .card import (
    StudyCard,
    StudyCardBase,
    StudyCardCreate,
    StudyCardUpdate,
    StudyCardResponse,
    StudyCardListResponse,
    ReviewRequest,
    CardStatsResponse,
    NextReviewResponse,
    dedup_key,
)
from .history import (
    TranslationHistoryCreate,
    TranslationHistoryEntry,
    TranslationHistoryListResponse,
    ProfileStatsResponse,
)
from .image import (
    ImageGenerationRequest,
    GeneratedImage,
    ImageApiStatus,
    SUPPORTED_SIZES,
    SUPPORTED_STYLES,
)

__all__ = [
    "StudyCard",
    "StudyCardBase",
    "StudyCardCreate",
    "StudyCardUpdate",
    "StudyCardResponse",
    "StudyCardListResponse",
    "ReviewRequest",
    "CardStatsResponse",
    "NextReviewResponse",
    "dedup_key",
    "TranslationHistoryCreate",
    "TranslationHistoryEntry",
    "TranslationHistoryListResponse",
    "ProfileStatsResponse",
    "ImageGenerationRequest",
    "GeneratedImage",
    "ImageApiStatus",
    "SUPPORTED_SIZES",
    "SUPPORTED_STYLES",
]
