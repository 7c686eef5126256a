"""
Morning picture endpoints:
- GET /api/generate-image — today's image (cached per day)
- POST /api/regenerate — force a new image for today, optional custom prompt
- GET /api/health — cache directory and whether today's image is cached
Cache outcome is returned in the X-Cache-Status header (HIT | MISS | REGENERATED).
"""
import logging
from fastapi import APIRouter, Body, status
from fastapi.responses import JSONResponse, Response

from app.config import get_settings
from app.core.exceptions import ConfigurationError, GenerationError
from app.schemas.morning_image import (
    IMAGE_MEDIA_TYPE,
    ErrorResponse,
    GenerateImageOptions,
    GenerateImageResult,
    HealthResponse,
    RegenerateRequest,
)
from app.services.artifact_store import resolve_cache_dir, get_artifact_store
from app.services.image_generator import day_key, generate_image, today_in

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["morning-image"])

IMAGE_RESPONSES = {
    200: {"content": {IMAGE_MEDIA_TYPE: {}}, "description": "Today's image; cache outcome in X-Cache-Status"},
    500: {"model": ErrorResponse, "description": "Configuration or unexpected error"},
    502: {"model": ErrorResponse, "description": "Gemini did not return an image"},
}


def _image_response(result: GenerateImageResult) -> Response:
    logger.info(
        "Serving image for %s - status: %s, size: %d KB",
        result.day_key, result.cache_status.value, round(len(result.image_bytes) / 1024),
    )
    return Response(
        content=result.image_bytes,
        media_type=IMAGE_MEDIA_TYPE,
        headers={
            "X-Cache-Status": result.cache_status.value,
            "X-Image-Date": result.day_key,
            "Cache-Control": "no-store",
        },
    )


def _error_response(summary: str, exc: Exception) -> JSONResponse:
    if isinstance(exc, GenerationError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content=ErrorResponse(error=summary, details=str(exc)).model_dump())


def _run(options: GenerateImageOptions, summary: str) -> Response:
    try:
        result = generate_image(options)
    except (ConfigurationError, GenerationError) as e:
        logger.error("%s: %s", summary, e)
        return _error_response(summary, e)
    except Exception as e:
        logger.exception(summary)
        return _error_response(summary, e)
    return _image_response(result)


@router.get("/generate-image", response_class=Response, responses=IMAGE_RESPONSES)
def get_morning_image():
    """Today's image: from cache if present, otherwise generated and cached."""
    return _run(GenerateImageOptions(), "Failed to generate image")


@router.post("/regenerate", response_class=Response, responses=IMAGE_RESPONSES)
def regenerate_morning_image(body: RegenerateRequest | None = Body(None)):
    """Generate a new image for today and replace the cached one. Old image kept if this fails."""
    custom_prompt = body.custom_prompt if body else None
    options = GenerateImageOptions(force_regenerate=True, custom_prompt=custom_prompt)
    return _run(options, "Failed to regenerate image")


@router.get("/health", response_model=HealthResponse)
def health():
    settings = get_settings()
    key = day_key(today_in(settings.day_key_timezone))
    return HealthResponse(
        day_key=key,
        cache_dir=str(resolve_cache_dir(settings)),
        cached_today=get_artifact_store().exists(key),
    )
