"""Image generation proxy: upstream client and request rate limiting."""

from .client import (
    ImageGenerationClient,
    ImageGenerationError,
    ImageSettings,
    enhance_prompt_with_style,
    get_image_settings,
    validate_image_request,
)
from .rate_limiter import RateLimiter

# Singleton instances
_image_client: ImageGenerationClient | None = None
_rate_limiter: RateLimiter | None = None


def get_image_client() -> ImageGenerationClient:
    """Get the singleton image generation client."""
    global _image_client
    if _image_client is None:
        _image_client = ImageGenerationClient(get_image_settings())
    return _image_client


def get_rate_limiter() -> RateLimiter:
    """Get the rate limiter guarding the image endpoint."""
    global _rate_limiter
    if _rate_limiter is None:
        settings = get_image_settings()
        _rate_limiter = RateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _rate_limiter


def reset_image_services() -> None:
    """Reset the client, the limiter and cached settings (for testing)."""
    global _image_client, _rate_limiter
    _image_client = None
    _rate_limiter = None
    get_image_settings.cache_clear()


__all__ = [
    "ImageGenerationClient",
    "ImageGenerationError",
    "ImageSettings",
    "RateLimiter",
    "enhance_prompt_with_style",
    "get_image_client",
    "get_image_settings",
    "get_rate_limiter",
    "reset_image_services",
    "validate_image_request",
]
