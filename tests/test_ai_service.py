import base64
from datetime import date
from types import SimpleNamespace

import pytest

from app.config import get_settings
from app.core.exceptions import ConfigurationError, NoCandidates, NoImageData, UpstreamError
from app.services import ai_service

from conftest import PNG_BYTES, make_part, make_response


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def fake_client(monkeypatch):
    def install(response=None, error=None):
        models = FakeModels(response, error)
        monkeypatch.setattr(ai_service, "_get_client", lambda: SimpleNamespace(models=models))
        return models
    return install


# ---- extract_image ----

def test_extract_first_image_across_candidates():
    response = make_response(
        [make_part(text="Here is your picture"), make_part(data=b"")],
        [make_part(text="second"), make_part(data=PNG_BYTES, mime_type="image/png")],
        [make_part(data=b"later-image")],
    )
    assert ai_service.extract_image(response) == (PNG_BYTES, "image/png")


def test_extract_decodes_base64_payload():
    encoded = base64.b64encode(PNG_BYTES).decode()
    response = make_response([make_part(data=encoded, mime_type="image/jpeg")])
    assert ai_service.extract_image(response) == (PNG_BYTES, "image/jpeg")


def test_extract_defaults_mime_type():
    response = make_response([make_part(data=PNG_BYTES, mime_type=None)])
    assert ai_service.extract_image(response)[1] == "image/png"


def test_extract_no_candidates():
    with pytest.raises(NoCandidates):
        ai_service.extract_image(SimpleNamespace(candidates=[]))
    with pytest.raises(NoCandidates):
        ai_service.extract_image(SimpleNamespace(candidates=None))


def test_extract_text_only_response():
    response = make_response([make_part(text="Sorry, I can only describe it")])
    with pytest.raises(NoImageData):
        ai_service.extract_image(response)


def test_extract_candidate_without_content():
    response = SimpleNamespace(candidates=[SimpleNamespace(content=None)])
    with pytest.raises(NoImageData):
        ai_service.extract_image(response)


# ---- fetch_day_context ----

def test_fetch_day_context(fake_client):
    models = fake_client(SimpleNamespace(text="  New Year's Day  "))
    assert ai_service.fetch_day_context(date(2024, 1, 1)) == "New Year's Day"
    assert models.calls[0]["model"] == get_settings().gemini_text_model
    assert "January 1, 2024" in models.calls[0]["contents"]


@pytest.mark.parametrize("response", [SimpleNamespace(text=""), SimpleNamespace(text=None), None])
def test_fetch_day_context_empty_answer(fake_client, response):
    fake_client(response)
    with pytest.raises(UpstreamError):
        ai_service.fetch_day_context(date(2024, 1, 1))


def test_fetch_day_context_api_error(fake_client):
    fake_client(error=RuntimeError("503 unavailable"))
    with pytest.raises(UpstreamError, match="503 unavailable"):
        ai_service.fetch_day_context(date(2024, 1, 1))


# ---- synthesize_image ----

def test_synthesize_image_requests_text_and_image(fake_client):
    models = fake_client(make_response([make_part(text="hi"), make_part(data=PNG_BYTES)]))
    assert ai_service.synthesize_image("draw a sunrise") == (PNG_BYTES, "image/png")
    call = models.calls[0]
    assert call["model"] == get_settings().gemini_image_model
    assert call["contents"] == "draw a sunrise"
    assert [str(getattr(m, "value", m)) for m in call["config"].response_modalities] == ["TEXT", "IMAGE"]


def test_synthesize_image_api_error(fake_client):
    fake_client(error=RuntimeError("quota exceeded"))
    with pytest.raises(UpstreamError):
        ai_service.synthesize_image("prompt")


# ---- configuration ----

def test_missing_api_key_is_configuration_error(monkeypatch):
    monkeypatch.setattr(ai_service, "_gemini_client", None)
    monkeypatch.setattr(ai_service, "get_settings", lambda: SimpleNamespace(gemini_api_key=""))
    with pytest.raises(ConfigurationError):
        ai_service.fetch_day_context(date(2024, 1, 1))


def test_extract_invalid_base64_is_no_image_data():
    response = make_response([make_part(data="not base64 at all!!")])
    with pytest.raises(NoImageData, match="base64"):
        ai_service.extract_image(response)
