import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.prompt_builder import normalize_custom_prompt

# Cached files are PNG; every response is served with this type
IMAGE_MEDIA_TYPE = "image/png"


class CacheStatus(str, enum.Enum):
    HIT = "HIT"  # served from cache, no Gemini calls
    MISS = "MISS"  # nothing cached, generated and stored
    REGENERATED = "REGENERATED"  # forced; replaced today's image


# ---- Core (service layer) ----

class GenerateImageOptions(BaseModel):
    force_regenerate: bool = False
    custom_prompt: str | None = None

    @field_validator("custom_prompt")
    @classmethod
    def strip_custom_prompt(cls, value: str | None) -> str | None:
        return normalize_custom_prompt(value)


class GenerateImageResult(BaseModel):
    image_bytes: bytes
    cache_status: CacheStatus
    day_key: str
    mime_type: str = IMAGE_MEDIA_TYPE


# ---- HTTP ----

class RegenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    custom_prompt: str | None = Field(
        None,
        alias="customPrompt",
        max_length=500,
        description="Extra instruction appended to the image prompt with high priority",
    )

    @field_validator("custom_prompt")
    @classmethod
    def strip_custom_prompt(cls, value: str | None) -> str | None:
        return normalize_custom_prompt(value)


class ErrorResponse(BaseModel):
    error: str
    details: str


class HealthResponse(BaseModel):
    status: str = "ok"
    day_key: str
    cache_dir: str
    cached_today: bool
