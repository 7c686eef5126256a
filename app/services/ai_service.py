"""
Gemini service for the morning picture.
Uses google-genai client with a Gemini API key (GEMINI_API_KEY).

Two sequential calls per generation:
1) text model: what is special about today (day context)
2) image model: picture from the prompt built on that context
"""
import base64
import binascii
import logging
import time
from datetime import date
from typing import Any

from app.config import get_settings
from app.core.exceptions import ConfigurationError, NoCandidates, NoImageData, UpstreamError
from app.services.prompt_builder import build_day_context_prompt

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME_TYPE = "image/png"

# Lazy client to avoid import/credentials errors at import time
_gemini_client = None


def _get_client():
    global _gemini_client
    if _gemini_client is not None:
        return _gemini_client

    settings = get_settings()
    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_API_KEY is not set")

    try:
        from google import genai
    except ImportError as e:
        raise RuntimeError("Google GenAI not installed. pip install google-genai") from e

    logger.info("Gemini client created (key length: %d)", len(settings.gemini_api_key))
    _gemini_client = genai.Client(api_key=settings.gemini_api_key)
    return _gemini_client


def _preview(text: str | None, limit: int = 200) -> str:
    if not text:
        return ""
    return text[:limit] + ("..." if len(text) > limit else "")


# ---- Step 1: day context ----


def fetch_day_context(day: date) -> str:
    """
    Ask the text model about holidays/observances on day. Returns the raw answer.
    Raises UpstreamError on API failure or empty answer (no fallback text).
    """
    client = _get_client()
    settings = get_settings()
    prompt = build_day_context_prompt(day)
    logger.debug("Day context prompt: %s", prompt)

    start = time.monotonic()
    try:
        response = client.models.generate_content(
            model=settings.gemini_text_model,
            contents=prompt,
        )
    except Exception as e:
        raise UpstreamError(f"Day context request failed: {e}") from e
    elapsed_ms = (time.monotonic() - start) * 1000

    text = (getattr(response, "text", None) or "").strip() if response else ""
    if not text:
        raise UpstreamError("Empty day context from model")
    logger.info("Day context received in %.0fms: %s", elapsed_ms, _preview(text))
    return text


# ---- Step 2: image ----


def _decode_inline_data(data: Any) -> bytes:
    """SDK returns bytes; raw JSON transport returns base64 text."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise NoImageData(f"Inline image data is not valid base64: {e}") from e


def extract_image(response: Any) -> tuple[bytes, str]:
    """
    Scan all candidates and all parts in order; return the first inline payload
    that is non-empty as (image_bytes, mime_type).
    Raises NoCandidates if the response has no candidates, NoImageData if no part has data.
    """
    candidates = getattr(response, "candidates", None) or []
    logger.debug("Image response candidates: %d", len(candidates))
    if not candidates:
        raise NoCandidates("No candidates found in response")

    for i, candidate in enumerate(candidates):
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None) or []
        if not parts:
            logger.debug("Candidate %d has no content parts", i)
            continue
        for j, part in enumerate(parts):
            text = getattr(part, "text", None)
            if text:
                logger.debug("Candidate %d, part %d text: %s", i, j, _preview(text, 100))
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if data:
                mime_type = getattr(inline, "mime_type", None) or DEFAULT_IMAGE_MIME_TYPE
                logger.info("Using image from candidate %d, part %d (%s)", i, j, mime_type)
                return _decode_inline_data(data), mime_type

    raise NoImageData("No image data found in response")


def synthesize_image(prompt: str) -> tuple[bytes, str]:
    """
    Generate the picture from prompt with text+image response modalities.
    Returns (image_bytes, mime_type). Raises UpstreamError / NoCandidates / NoImageData.
    """
    client = _get_client()
    settings = get_settings()
    from google.genai.types import GenerateContentConfig

    logger.info("Calling %s for image generation (prompt %d chars)", settings.gemini_image_model, len(prompt))
    start = time.monotonic()
    try:
        response = client.models.generate_content(
            model=settings.gemini_image_model,
            contents=prompt,
            config=GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
        )
    except Exception as e:
        raise UpstreamError(f"Image generation request failed: {e}") from e
    logger.info("Image response in %.0fms", (time.monotonic() - start) * 1000)

    return extract_image(response)
