"""Image generation API router."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from lexicards.images import (
    ImageGenerationError,
    get_image_client,
    get_rate_limiter,
    validate_image_request,
)
from lexicards.models import (
    SUPPORTED_SIZES,
    SUPPORTED_STYLES,
    GeneratedImage,
    ImageApiStatus,
    ImageGenerationRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/generate", response_model=ImageApiStatus)
async def image_api_status() -> ImageApiStatus:
    """Report whether image generation is configured and what it accepts."""
    client = get_image_client()
    return ImageApiStatus(
        configured=client.is_configured,
        model=client.settings.model,
        supportedSizes=SUPPORTED_SIZES,
        supportedStyles=SUPPORTED_STYLES,
    )


@router.post("/generate", response_model=GeneratedImage)
async def generate_image(req: ImageGenerationRequest, request: Request) -> GeneratedImage:
    """Generate an illustration for a word or phrase.

    Checks, in order: API key configured (500), per-client rate limit (429),
    prompt and size (400). Upstream failures map to 400/402/429/500.
    """
    client = get_image_client()
    if not client.is_configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="OpenAI API key not configured",
        )

    limiter = get_rate_limiter()
    client_key = request.client.host if request.client else "unknown"
    if not limiter.check(client_key):
        logger.warning(f"Image generation rate limit hit: client={client_key}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Try again later.",
            headers={"Retry-After": str(limiter.retry_after(client_key))},
        )

    try:
        prompt = validate_image_request(req.prompt, req.size)
        return await client.generate(
            prompt=prompt,
            style=req.style,
            size=req.size,
            quality=req.quality,
        )
    except ImageGenerationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
