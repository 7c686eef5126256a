"""
Error taxonomy for the morning picture service.
Generation errors abort the request; ArtifactNotFound is a normal cache-miss signal.
"""


class MorningPicError(Exception):
    """Base class for all service errors."""


class ConfigurationError(MorningPicError):
    """Required configuration (e.g. GEMINI_API_KEY) is missing."""


class ArtifactNotFound(MorningPicError, LookupError):
    """No cached image exists for the requested day key."""

    def __init__(self, key: str):
        super().__init__(f"No cached image for {key}")
        self.key = key


class GenerationError(MorningPicError):
    """Image generation failed; nothing was written to the cache."""


class UpstreamError(GenerationError):
    """Gemini call failed or returned an empty answer."""


class NoCandidates(GenerationError):
    """Image response contained zero candidates."""


class NoImageData(GenerationError):
    """No candidate part carried inline image data."""
