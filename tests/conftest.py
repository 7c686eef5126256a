from datetime import date
from types import SimpleNamespace

import pytest

from app.services.artifact_store import LocalArtifactStore
from app.services.image_generator import ImageGenerator

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-payload"


def make_part(text=None, data=None, mime_type="image/png"):
    inline = SimpleNamespace(data=data, mime_type=mime_type) if data is not None else None
    return SimpleNamespace(text=text, inline_data=inline)


def make_response(*candidate_parts):
    """Each positional arg is the list of parts for one candidate."""
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts)) for parts in candidate_parts]
    )


class FakeGemini:
    """Records calls to the two Gemini steps; errors can be injected per step."""

    def __init__(self, context="New Year's Day", image=PNG_BYTES):
        self.context = context
        self.image = image
        self.context_calls = []
        self.image_prompts = []
        self.context_error = None
        self.image_error = None

    def fetch_day_context(self, day):
        self.context_calls.append(day)
        if self.context_error:
            raise self.context_error
        return self.context

    def synthesize_image(self, prompt):
        self.image_prompts.append(prompt)
        if self.image_error:
            raise self.image_error
        return self.image, "image/png"

    @property
    def total_calls(self):
        return len(self.context_calls) + len(self.image_prompts)


@pytest.fixture
def store(tmp_path):
    return LocalArtifactStore(tmp_path / "cache")


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def new_years_day():
    return date(2024, 1, 1)


@pytest.fixture
def generator(store, gemini, new_years_day):
    return ImageGenerator(
        store=store,
        fetch_day_context=gemini.fetch_day_context,
        synthesize_image=gemini.synthesize_image,
        clock=lambda: new_years_day,
    )
