"""Pass-through client for the OpenAI image generation API."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from functools import lru_cache

import httpx
from pydantic import BaseModel

from lexicards.models.image import SUPPORTED_SIZES, GeneratedImage
from lexicards.srs.time import utc_now_ms

logger = logging.getLogger(__name__)

MAX_PROMPT_LENGTH = 1000

STYLE_TEMPLATES: dict[str, str] = {
    "realistic": "A high-quality, realistic photograph of {prompt}, clear and detailed",
    "cartoon": (
        "A colorful, friendly cartoon illustration of {prompt}, "
        "educational and appealing style, suitable for language learning"
    ),
    "minimalist": "A clean, minimalist illustration of {prompt}, simple lines and shapes, modern design",
    "artistic": (
        "An artistic, creative interpretation of {prompt}, "
        "beautiful and inspiring, suitable for educational purposes"
    ),
}

PROMPT_SUFFIX = ", high quality, well-lit, clear subject, educational content, safe for all ages"

# Upstream error code -> (status, message)
_UPSTREAM_ERRORS: dict[str, tuple[int, str]] = {
    "content_policy_violation": (400, "Content policy violation. Please try a different prompt."),
    "rate_limit_exceeded": (429, "OpenAI rate limit exceeded. Please try again later."),
    "insufficient_quota": (402, "OpenAI quota exceeded. Please check your billing."),
}


class ImageGenerationError(Exception):
    """Raised when an image cannot be generated."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ImageSettings(BaseModel):
    """Image generation settings loaded from environment variables."""

    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    model: str = "dall-e-3"
    timeout_seconds: float = 60.0
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: float = 60.0

    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.api_key)


@lru_cache()
def get_image_settings() -> ImageSettings:
    """Get cached image generation settings from environment variables."""
    return ImageSettings(
        api_key=os.getenv("OPENAI_API_KEY", ""),
        base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        model=os.getenv("IMAGE_MODEL", "dall-e-3"),
        rate_limit_max_requests=int(os.getenv("IMAGE_RATE_LIMIT_MAX_REQUESTS", "10")),
        rate_limit_window_seconds=float(os.getenv("IMAGE_RATE_LIMIT_WINDOW_SECONDS", "60")),
    )


def enhance_prompt_with_style(prompt: str, style: str) -> str:
    """Wrap the prompt in the style template (unknown styles keep it as is)."""
    template = STYLE_TEMPLATES.get(style)
    base_prompt = template.format(prompt=prompt) if template else prompt
    return f"{base_prompt}{PROMPT_SUFFIX}"


def validate_image_request(prompt: object, size: str) -> str:
    """Check prompt and size, returning the prompt.

    Raises:
        ImageGenerationError: 400 for a missing, non-string or overlong prompt, or an unknown size
    """
    if not prompt or not isinstance(prompt, str):
        raise ImageGenerationError("Prompt is required and must be a string", status_code=400)
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise ImageGenerationError(
            f"Prompt is too long (max {MAX_PROMPT_LENGTH} characters)", status_code=400
        )
    if size not in SUPPORTED_SIZES:
        raise ImageGenerationError(
            "Invalid size. Must be 256x256, 512x512, or 1024x1024", status_code=400
        )
    return prompt


class ImageGenerationClient:
    """Forwards prompts to the upstream images endpoint and returns the image URL."""

    GENERATIONS_PATH = "/images/generations"

    def __init__(
        self,
        settings: ImageSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], int] = utc_now_ms,
    ):
        self.settings = settings
        self._transport = transport
        self._clock = clock

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured()

    async def generate(
        self,
        prompt: str,
        style: str = "cartoon",
        size: str = "512x512",
        quality: str = "standard",
    ) -> GeneratedImage:
        """Generate one image for the prompt.

        Raises:
            ImageGenerationError: With the HTTP status the caller should return
        """
        if not self.is_configured:
            raise ImageGenerationError("OpenAI API key not configured", status_code=500)

        enhanced_prompt = enhance_prompt_with_style(prompt, style)
        payload = {
            "model": self.settings.model,
            "prompt": enhanced_prompt,
            "n": 1,
            "size": size,
            "quality": quality,
            "response_format": "url",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=self.settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.GENERATIONS_PATH,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.settings.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Image API request failed: {e}")
            raise ImageGenerationError("Internal server error", status_code=500) from e

        if response.is_error:
            raise _error_from_response(response)

        url = _extract_url(response)
        if not url:
            logger.error("Image API response did not contain an image URL")
            raise ImageGenerationError("Failed to generate image", status_code=500)

        logger.info(f"Image generated: style={style}, size={size}, quality={quality}")
        return GeneratedImage(
            url=url,
            prompt=enhanced_prompt,
            originalPrompt=prompt,
            style=style,
            size=size,
            quality=quality,
            generatedAt=self._clock(),
        )


def _extract_url(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    items = data.get("data") if isinstance(data, dict) else None
    if not items or not isinstance(items[0], dict):
        return None
    return items[0].get("url")


def _error_from_response(response: httpx.Response) -> ImageGenerationError:
    code = None
    try:
        error = response.json().get("error") or {}
        code = error.get("code") or error.get("type")
    except (ValueError, AttributeError):
        pass

    logger.error(f"Image API error: status={response.status_code}, code={code}")
    if code in _UPSTREAM_ERRORS:
        status_code, message = _UPSTREAM_ERRORS[code]
        return ImageGenerationError(message, status_code=status_code)
    return ImageGenerationError("Internal server error", status_code=500)
