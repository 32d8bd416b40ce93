"""Request/response envelopes shared by the vision analyzer and the synthesizer."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import Field

from contextembed.schemas.common import CamelModel
from contextembed.schemas.onboarding import EventContext, OnboardingProfile
from contextembed.schemas.synthesis import SynthesizedMetadata
from contextembed.schemas.vision import VisionAnalysis

ErrorCode = Literal[
    "NO_IMAGE",
    "NO_CONTENT",
    "PARSE_ERROR",
    "VALIDATION_ERROR",
    "API_ERROR",
    "UNKNOWN_ERROR",
]


class Usage(CamelModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Timing(CamelModel):
    started_at: datetime
    completed_at: datetime
    duration_ms: int

    @classmethod
    def since(cls, started_at: datetime) -> "Timing":
        completed_at = datetime.now(timezone.utc)
        duration_ms = int((completed_at - started_at).total_seconds() * 1000)
        return cls(started_at=started_at, completed_at=completed_at, duration_ms=duration_ms)


class ProviderError(CamelModel):
    """Typed failure returned in place of a result. ``retryable`` tells the caller whether to try again."""

    code: str
    message: str
    retryable: bool = False
    details: Any = None

    @classmethod
    def from_backend(cls, error) -> "ProviderError":
        """Wrap a BackendError, keeping its status and provider code as details."""
        details = {"status": error.status}
        if error.code != "API_ERROR":
            details["providerCode"] = error.code
        return cls(code="API_ERROR", message=str(error), retryable=error.retryable, details=details)


class VisionRequest(CamelModel):
    image_base64: str | None = None
    image_url: str | None = None
    detail_level: Literal["low", "high", "auto"] = "high"


class VisionResponse(CamelModel):
    success: bool
    analysis: VisionAnalysis | None = None
    raw_response: Any = None
    error: ProviderError | None = None
    usage: Usage = Field(default_factory=Usage)
    timing: Timing


class LLMRequest(CamelModel):
    vision_analysis: VisionAnalysis
    onboarding_profile: OnboardingProfile
    user_comment: str | None = None
    event_context: EventContext | None = None


class LLMResponse(CamelModel):
    success: bool
    metadata: SynthesizedMetadata | None = None
    raw_response: Any = None
    error: ProviderError | None = None
    usage: Usage = Field(default_factory=Usage)
    timing: Timing


def now() -> datetime:
    return datetime.now(timezone.utc)
