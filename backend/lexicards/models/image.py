"""Models for the image generation proxy."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


ImageQuality = Literal["standard", "hd"]

SUPPORTED_SIZES: list[str] = ["256x256", "512x512", "1024x1024"]
SUPPORTED_STYLES: list[str] = ["realistic", "cartoon", "minimalist", "artistic"]


class ImageGenerationRequest(BaseModel):
    """Body of POST /images/generate.

    Prompt and size are plain strings; the route reports bad values as 400
    with a readable message.
    """

    prompt: str | None = None
    style: str = "cartoon"
    size: str = "512x512"
    quality: ImageQuality = "standard"


class GeneratedImage(BaseModel):
    """Response of POST /images/generate."""

    url: str
    prompt: str = Field(..., description="Prompt after style enhancement")
    originalPrompt: str
    style: str
    size: str
    quality: str
    generatedAt: int = Field(..., description="Generation timestamp (ms)")


class ImageApiStatus(BaseModel):
    """Response of GET /images/generate."""

    configured: bool
    model: str
    supportedSizes: list[str]
    supportedStyles: list[str]
