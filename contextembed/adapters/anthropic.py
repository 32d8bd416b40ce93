"""Anthropic chat backend."""

import logging

from contextembed.adapters.base import (
    BackendError,
    Completion,
    ImageInput,
    TokenUsage,
    is_retryable_status,
    strip_json_fences,
)
from contextembed.config import ANTHROPIC_API_KEY, LLM_MODEL

logger = logging.getLogger(__name__)

JSON_ONLY_SUFFIX = "\n\nRespond with a single JSON object and nothing else."


class AnthropicBackend:
    """Anthropic Claude-based chat backend."""

    provider_id = "anthropic"

    def __init__(self, api_key: str | None = None, model: str | None = None):
        api_key = api_key or ANTHROPIC_API_KEY
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable is required")

        from anthropic import AsyncAnthropic

        self.client = AsyncAnthropic(api_key=api_key)
        self.model = model or LLM_MODEL

    async def complete_json(
        self,
        system: str,
        user: str,
        *,
        image: ImageInput | None = None,
        temperature: float = 0.5,
        max_tokens: int = 4096,
    ) -> Completion:
        """Run one message call and return the concatenated text blocks."""
        import anthropic

        content: list[dict] = []
        if image is not None:
            content.append(self._image_block(image))
        content.append({"type": "text", "text": user})

        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system + JSON_ONLY_SUFFIX,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIStatusError as e:
            raise BackendError(
                e.message,
                status=e.status_code,
                retryable=is_retryable_status(e.status_code),
            ) from e
        except (anthropic.APIConnectionError, anthropic.APITimeoutError) as e:
            raise BackendError(str(e), retryable=True) from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        input_tokens = getattr(message.usage, "input_tokens", 0) or 0
        output_tokens = getattr(message.usage, "output_tokens", 0) or 0
        return Completion(
            content=strip_json_fences(text) or None,
            usage=TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )

    async def is_available(self) -> bool:
        """Check if Anthropic API is available."""
        try:
            # Try a minimal API call
            await self.client.messages.create(
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "test"}],
            )
            return True
        except Exception as e:
            logger.warning(f"Anthropic availability check failed: {e}")
            return False

    def _image_block(self, image: ImageInput) -> dict:
        if image.base64:
            return {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.media_type,
                    "data": image.base64,
                },
            }
        return {"type": "image", "source": {"type": "url", "url": image.url}}
