"""Tests for vision analysis."""

import pytest

from contextembed.adapters.base import BackendError
from contextembed.schemas.provider import VisionRequest
from contextembed.schemas.vision import VISION_SYSTEM_PROMPT
from contextembed.vision import VisionAnalyzer, detect_media_type


@pytest.mark.parametrize(
    "payload,media_type",
    [
        ("/9j/4AAQSkZJRg", "image/jpeg"),
        ("iVBORw0KGgoAAAA", "image/png"),
        ("UklGRiQAAABXRUJQ", "image/webp"),
        ("R0lGODlhAQABAIAA", "image/gif"),
        ("AAAAIGZ0eXBhdmlm", "image/jpeg"),
    ],
)
def test_detect_media_type(payload, media_type):
    """Test media type sniffing from base64 magic bytes."""
    assert detect_media_type(payload) == media_type


@pytest.mark.asyncio
async def test_analyze_success(make_backend, vision_data):
    """Test a valid response parses into a VisionAnalysis."""
    backend = make_backend(vision_data)
    analyzer = VisionAnalyzer(backend)

    response = await analyzer.analyze(VisionRequest(image_base64="iVBORw0KGgo=", detail_level="low"))

    assert response.success is True
    assert response.analysis.scene.type == "indoor"
    assert response.analysis.location_cues.confidence == "low"
    assert len(response.analysis.subjects) == 2
    assert response.usage.total_tokens == 100

    call = backend.complete_json.call_args
    assert call.args[0] == VISION_SYSTEM_PROMPT
    image = call.kwargs["image"]
    assert image.base64 == "iVBORw0KGgo="
    assert image.media_type == "image/png"
    assert image.detail == "low"


@pytest.mark.asyncio
async def test_analyze_image_url(make_backend, vision_data):
    """Test URL images are passed through unchanged."""
    backend = make_backend(vision_data)
    analyzer = VisionAnalyzer(backend)

    response = await analyzer.analyze(VisionRequest(image_url="https://cdn.example.com/photo.jpg"))

    assert response.success is True
    image = backend.complete_json.call_args.kwargs["image"]
    assert image.url == "https://cdn.example.com/photo.jpg"
    assert image.base64 is None


@pytest.mark.asyncio
async def test_no_image(make_backend):
    """Test a request without an image fails before calling the model."""
    backend = make_backend()
    analyzer = VisionAnalyzer(backend)

    response = await analyzer.analyze(VisionRequest())

    assert response.success is False
    assert response.error.code == "NO_IMAGE"
    assert response.error.retryable is False
    backend.complete_json.assert_not_called()


@pytest.mark.asyncio
async def test_no_content(make_backend):
    """Test an empty completion is a retryable NO_CONTENT error."""
    analyzer = VisionAnalyzer(make_backend(None))

    response = await analyzer.analyze(VisionRequest(image_base64="/9j/4AAQ"))

    assert response.error.code == "NO_CONTENT"
    assert response.error.retryable is True


@pytest.mark.asyncio
async def test_parse_error(make_backend):
    """Test non-JSON text is a PARSE_ERROR."""
    analyzer = VisionAnalyzer(make_backend("I see a wedding."))

    response = await analyzer.analyze(VisionRequest(image_base64="/9j/4AAQ"))

    assert response.error.code == "PARSE_ERROR"


@pytest.mark.asyncio
async def test_deeply_nested_output_is_parse_error(make_backend, deeply_nested_json):
    """Test output too deep to decode is a PARSE_ERROR, not an exception."""
    analyzer = VisionAnalyzer(make_backend(deeply_nested_json))

    response = await analyzer.analyze(VisionRequest(image_base64="/9j/4AAQ"))

    assert response.success is False
    assert response.error.code == "PARSE_ERROR"


@pytest.mark.asyncio
async def test_validation_error(make_backend, vision_data):
    """Test JSON missing required fields is a VALIDATION_ERROR."""
    del vision_data["scene"]
    analyzer = VisionAnalyzer(make_backend(vision_data))

    response = await analyzer.analyze(VisionRequest(image_base64="/9j/4AAQ"))

    assert response.error.code == "VALIDATION_ERROR"
    assert response.error.message == "Schema validation failed: 1 issue(s)"
    assert response.raw_response == vision_data


@pytest.mark.asyncio
async def test_api_error(make_backend):
    """Test provider failures come back as API_ERROR with their retryability."""
    analyzer = VisionAnalyzer(make_backend(BackendError("Service unavailable", status=503, retryable=True)))

    response = await analyzer.analyze(VisionRequest(image_base64="/9j/4AAQ"))

    assert response.error.code == "API_ERROR"
    assert response.error.retryable is True
    assert response.error.details == {"status": 503}


@pytest.mark.asyncio
async def test_unknown_error(make_backend):
    """Test unexpected exceptions are caught as UNKNOWN_ERROR."""
    analyzer = VisionAnalyzer(make_backend(TypeError("unexpected")))

    response = await analyzer.analyze(VisionRequest(image_base64="/9j/4AAQ"))

    assert response.error.code == "UNKNOWN_ERROR"
    assert response.error.retryable is False
