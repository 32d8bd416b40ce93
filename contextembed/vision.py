"""Vision analysis: one image in, one structured VisionAnalysis out."""

import json
import logging

from pydantic import ValidationError

from contextembed.adapters import BackendError, ChatBackend, ImageInput, parse_json_content
from contextembed.config import VISION_MAX_TOKENS, VISION_TEMPERATURE
from contextembed.schemas.provider import (
    ProviderError,
    Timing,
    Usage,
    VisionRequest,
    VisionResponse,
    now,
)
from contextembed.schemas.vision import VISION_SYSTEM_PROMPT, VISION_USER_PROMPT, VisionAnalysis

logger = logging.getLogger(__name__)

# Leading base64 characters of each format's magic bytes
_BASE64_SIGNATURES = (
    ("/9j/", "image/jpeg"),
    ("iVBORw", "image/png"),
    ("UklGR", "image/webp"),
    ("R0lGOD", "image/gif"),
)


def detect_media_type(image_base64: str) -> str:
    """Guess the media type from the start of a base64 payload. Defaults to JPEG."""
    for prefix, media_type in _BASE64_SIGNATURES:
        if image_base64.startswith(prefix):
            return media_type
    return "image/jpeg"


class VisionAnalyzer:
    """Describes images through a vision-capable chat backend."""

    def __init__(
        self,
        backend: ChatBackend,
        *,
        temperature: float = VISION_TEMPERATURE,
        max_tokens: int = VISION_MAX_TOKENS,
    ):
        self.backend = backend
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def analyze(self, request: VisionRequest) -> VisionResponse:
        """Analyze one image.

        Never raises for provider or model failures; they come back as a
        typed error on the response.
        """
        started_at = now()

        if request.image_base64:
            image = ImageInput(
                base64=request.image_base64,
                media_type=detect_media_type(request.image_base64),
                detail=request.detail_level,
            )
        elif request.image_url:
            image = ImageInput(url=request.image_url, detail=request.detail_level)
        else:
            return self._error(started_at, "NO_IMAGE", "No image provided (need imageBase64 or imageUrl)", False)

        try:
            completion = await self.backend.complete_json(
                VISION_SYSTEM_PROMPT,
                VISION_USER_PROMPT,
                image=image,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except BackendError as e:
            logger.warning(f"Vision call failed: {e}")
            return VisionResponse(success=False, error=ProviderError.from_backend(e), timing=Timing.since(started_at))
        except Exception as e:
            logger.error(f"Unexpected vision failure: {e}", exc_info=True)
            return self._error(started_at, "UNKNOWN_ERROR", str(e) or "Unknown error", False)

        if not completion.content:
            return self._error(started_at, "NO_CONTENT", "No content in response", True)

        try:
            parsed = parse_json_content(completion.content)
        except (json.JSONDecodeError, RecursionError):
            return self._error(started_at, "PARSE_ERROR", "Failed to parse JSON response", True)

        try:
            analysis = VisionAnalysis.model_validate(parsed)
        except ValidationError as e:
            return self._error(
                started_at,
                "VALIDATION_ERROR",
                f"Schema validation failed: {e.error_count()} issue(s)",
                True,
                raw_response=parsed,
            )

        usage = completion.usage
        return VisionResponse(
            success=True,
            analysis=analysis,
            raw_response=parsed,
            usage=Usage(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
            ),
            timing=Timing.since(started_at),
        )

    def _error(self, started_at, code: str, message: str, retryable: bool, raw_response=None) -> VisionResponse:
        logger.warning(f"Vision analysis failed with {code}: {message}")
        return VisionResponse(
            success=False,
            raw_response=raw_response,
            error=ProviderError(code=code, message=message, retryable=retryable),
            timing=Timing.since(started_at),
        )
