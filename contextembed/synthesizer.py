"""Metadata synthesis: vision analysis + onboarding context -> SynthesizedMetadata.

The synthesizer makes exactly one model call per request. Failures come back
as a typed ``ProviderError`` with a ``retryable`` flag; deciding whether to
try again is the caller's job.
"""

import json
import logging
import re
from datetime import datetime, timezone

from pydantic import ValidationError

from contextembed.adapters import BackendError, ChatBackend, parse_json_content
from contextembed.config import LLM_MAX_TOKENS, LLM_TEMPERATURE
from contextembed.schemas.common import format_validation_error
from contextembed.schemas.onboarding import RightsInfo
from contextembed.schemas.provider import LLMRequest, LLMResponse, ProviderError, Timing, Usage, now
from contextembed.schemas.synthesis import (
    DEFAULT_USAGE_TERMS,
    METADATA_PROMPT_VERSION,
    METADATA_SYSTEM_PROMPT,
    SynthesizedMetadata,
    build_synthesis_prompt,
)

logger = logging.getLogger(__name__)

_YEAR_PLACEHOLDER = re.compile(r"\{year\}", re.IGNORECASE)


def interpolate_copyright(template: str, year: int | None = None) -> str:
    """Replace every ``{year}`` placeholder (any case) with the given or current year."""
    if year is None:
        year = datetime.now(timezone.utc).year
    return _YEAR_PLACEHOLDER.sub(str(year), template)


def apply_rights_info(metadata: SynthesizedMetadata, rights: RightsInfo, year: int | None = None) -> SynthesizedMetadata:
    """Overwrite attribution with the profile's rights, whatever the model returned."""
    return metadata.model_copy(
        update={
            "creator": rights.creator_name,
            "copyright": interpolate_copyright(rights.copyright_template, year),
            "credit": rights.credit_template,
            "source": rights.studio_name or rights.creator_name,
            "usage_terms": rights.usage_terms_template or DEFAULT_USAGE_TERMS,
        }
    )


class MetadataSynthesizer:
    """Turns one vision analysis plus onboarding context into synthesized metadata."""

    prompt_version = METADATA_PROMPT_VERSION

    def __init__(
        self,
        backend: ChatBackend,
        *,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS,
    ):
        self.backend = backend
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_prompt(self, request: LLMRequest) -> str:
        profile = request.onboarding_profile
        rights = profile.rights.model_copy(
            update={"copyright_template": interpolate_copyright(profile.rights.copyright_template)}
        )
        return build_synthesis_prompt(
            request.vision_analysis,
            profile.confirmed_context,
            rights,
            profile.preferences,
            user_comment=request.user_comment,
            event=request.event_context,
        )

    async def synthesize(self, request: LLMRequest) -> LLMResponse:
        """Synthesize metadata for one image.

        Args:
            request: Vision analysis, onboarding profile and optional per-image context

        Returns:
            LLMResponse with validated metadata, or a typed error
        """
        started_at = now()

        try:
            completion = await self.backend.complete_json(
                METADATA_SYSTEM_PROMPT,
                self.build_prompt(request),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except BackendError as e:
            logger.warning(f"Synthesis call failed: {e}")
            return LLMResponse(success=False, error=ProviderError.from_backend(e), timing=Timing.since(started_at))
        except Exception as e:
            logger.error(f"Unexpected synthesis failure: {e}", exc_info=True)
            return self._error(started_at, "UNKNOWN_ERROR", str(e) or "Unknown error", False)

        if not completion.content:
            return self._error(started_at, "NO_CONTENT", "No content in response", True)

        try:
            parsed = parse_json_content(completion.content)
        except (json.JSONDecodeError, RecursionError):
            return self._error(started_at, "PARSE_ERROR", "Failed to parse JSON response", True)

        try:
            metadata = SynthesizedMetadata.model_validate(parsed)
        except ValidationError as e:
            return self._error(
                started_at,
                "VALIDATION_ERROR",
                f"Schema validation failed: {format_validation_error(e)}",
                True,
                raw_response=parsed,
            )

        metadata = apply_rights_info(metadata, request.onboarding_profile.rights)
        usage = completion.usage
        response = LLMResponse(
            success=True,
            metadata=metadata,
            raw_response=parsed,
            usage=Usage(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens,
            ),
            timing=Timing.since(started_at),
        )
        logger.info(
            f"Synthesized metadata with {self.backend.provider_id}/{self.backend.model} "
            f"in {response.timing.duration_ms}ms ({usage.total_tokens} tokens)"
        )
        return response

    async def health_check(self) -> dict:
        healthy = await self.backend.is_available()
        if healthy:
            return {"healthy": True}
        return {"healthy": False, "error": f"{self.backend.provider_id} backend is not reachable"}

    def get_config(self) -> dict:
        return {
            "provider": self.backend.provider_id,
            "model": self.backend.model,
            "maxTokens": self.max_tokens,
            "temperature": self.temperature,
            "promptVersion": self.prompt_version,
        }

    def _error(self, started_at, code: str, message: str, retryable: bool, raw_response=None) -> LLMResponse:
        logger.warning(f"Synthesis failed with {code}: {message}")
        return LLMResponse(
            success=False,
            raw_response=raw_response,
            error=ProviderError(code=code, message=message, retryable=retryable),
            timing=Timing.since(started_at),
        )
