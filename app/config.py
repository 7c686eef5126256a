from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    # Gemini (Google AI Studio key; required for generation)
    gemini_api_key: str = ""
    gemini_text_model: str = "gemini-2.5-flash"
    gemini_image_model: str = "gemini-2.0-flash-preview-image-generation"

    # Image cache: "auto" picks /tmp on serverless hosts, project .cache otherwise
    cache_backend: str = "auto"  # auto | local | tmp
    cache_dir: str = ""  # absolute path; empty = derived from cache_backend

    # Calendar day used for the cache key (IANA zone name)
    day_key_timezone: str = "UTC"

    # One generation per day key at a time
    single_flight: bool = True

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # uvicorn (morning-pic command)
    host: str = "127.0.0.1"
    port: int = 8001

    log_level: str = "INFO"

    class Config:
        env_file = ".env"

    @field_validator("day_key_timezone")
    @classmethod
    def check_day_key_timezone(cls, value: str) -> str:
        value = (value or "").strip() or "UTC"
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone {value!r}") from e
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
