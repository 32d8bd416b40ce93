"""Alt-text generation with one retry and a deterministic fallback.

``AltTextGenerator.generate`` walks three explicit stages:

    FIRST_ATTEMPT -> RETRY -> FALLBACK

Each attempt is a single model call whose result is parsed and checked
against ``AltTextOutput``. The retry re-sends the prompt with the exact
length bounds restated. If both attempts fail, the fallback is built from
the input alone, so ``generate`` always returns schema-valid output and
never raises.
"""

import json
import logging
import time

from pydantic import ValidationError

from contextembed.adapters import BackendError, ChatBackend, get_backend, parse_json_content
from contextembed.config import (
    ALT_TEXT_MAX_TOKENS,
    ALT_TEXT_MODEL,
    ALT_TEXT_RETRY,
    ALT_TEXT_TEMPERATURE,
)
from contextembed.schemas.alt_text import (
    ALT_TEXT_MODES,
    ALT_TEXT_PROMPT_VERSION,
    AltTextInput,
    AltTextOutput,
    AltTextResult,
    AltTextStage,
    AttemptOutcome,
    build_alt_text_prompt,
    build_fallback_output,
)
from contextembed.schemas.common import format_validation_error

logger = logging.getLogger(__name__)


def _log_event(level: int, event: str, **fields) -> None:
    logger.log(level, json.dumps({"event": event, **fields}))


class AltTextGenerator:
    """Generates alt text variants, caption and description for one image at a time."""

    prompt_version = ALT_TEXT_PROMPT_VERSION

    def __init__(
        self,
        backend: ChatBackend,
        *,
        temperature: float = ALT_TEXT_TEMPERATURE,
        max_tokens: int = ALT_TEXT_MAX_TOKENS,
        retry_on_failure: bool = True,
    ):
        self.backend = backend
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retry_on_failure = retry_on_failure

    async def generate(self, input: AltTextInput, mode: str = "seo") -> AltTextResult:
        """Generate alt text, retrying once and falling back if needed.

        Args:
            input: Headline, description, keywords and context for the image
            mode: One of seo, accessibility, editorial, social

        Returns:
            AltTextResult whose output is always schema-valid
        """
        start_time = time.time()
        if mode not in ALT_TEXT_MODES:
            logger.warning(f"Unknown alt text mode {mode!r}, using seo")
            mode = "seo"

        attempts = [await self.run_attempt(input, mode, is_retry=False)]

        if not attempts[-1].succeeded and self.retry_on_failure:
            _log_event(logging.WARNING, "alt_text_retry", mode=mode, error=attempts[-1].error)
            attempts.append(await self.run_attempt(input, mode, is_retry=True))

        tokens_used = sum(attempt.tokens for attempt in attempts)
        final = attempts[-1]

        if final.succeeded:
            result = AltTextResult(
                success=True,
                output=final.output,
                mode=mode,
                used_fallback=False,
                stage=final.stage,
                attempts=attempts,
                duration_ms=int((time.time() - start_time) * 1000),
                tokens_used=tokens_used,
            )
            _log_event(
                logging.INFO,
                "alt_text_generated",
                mode=mode,
                stage=final.stage.value,
                tokens=tokens_used,
                elapsed_ms=result.duration_ms,
            )
            return result

        result = AltTextResult(
            success=False,
            output=build_fallback_output(input),
            mode=mode,
            used_fallback=True,
            error=final.error or "Generation failed",
            stage=AltTextStage.FALLBACK,
            attempts=attempts,
            duration_ms=int((time.time() - start_time) * 1000),
            tokens_used=tokens_used,
        )
        _log_event(
            logging.ERROR,
            "alt_text_fallback",
            mode=mode,
            attempts=len(attempts),
            error=result.error,
            tokens=tokens_used,
            elapsed_ms=result.duration_ms,
        )
        return result

    async def run_attempt(self, input: AltTextInput, mode: str, is_retry: bool = False) -> AttemptOutcome:
        """Make one model call and check its output. Never raises."""
        stage = AltTextStage.RETRY if is_retry else AltTextStage.FIRST_ATTEMPT
        system, user = build_alt_text_prompt(input, mode, is_retry=is_retry)

        try:
            completion = await self.backend.complete_json(
                system,
                user,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except BackendError as e:
            return self._failed(stage, str(e), 0)
        except Exception as e:
            logger.error(f"Unexpected alt text failure: {e}", exc_info=True)
            return self._failed(stage, str(e) or "Unknown error", 0)

        tokens = completion.usage.total_tokens
        if not completion.content:
            return self._failed(stage, "Empty response from LLM", tokens)

        try:
            parsed = parse_json_content(completion.content)
        except (json.JSONDecodeError, RecursionError):
            return self._failed(stage, f"JSON parse error: {completion.content[:200]}", tokens)

        try:
            output = AltTextOutput.model_validate(parsed)
        except ValidationError as e:
            return self._failed(stage, f"Schema validation failed: {format_validation_error(e)}", tokens)

        return AttemptOutcome(stage=stage, output=output, tokens=tokens)

    def _failed(self, stage: AltTextStage, error: str, tokens: int) -> AttemptOutcome:
        _log_event(logging.WARNING, "alt_text_attempt_failed", stage=stage.value, error=error, tokens=tokens)
        return AttemptOutcome(stage=stage, error=error, tokens=tokens)


def create_alt_text_generator(provider: str | None = None, model: str | None = None) -> AltTextGenerator:
    """Build a generator from environment configuration.

    Raises:
        ValueError: if the selected provider's API key is missing
    """
    backend = get_backend(provider, model or ALT_TEXT_MODEL)
    return AltTextGenerator(backend, retry_on_failure=ALT_TEXT_RETRY)
