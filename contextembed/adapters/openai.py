"""OpenAI chat backend."""
import logging

from contextembed.adapters.base import (
    BackendError,
    Completion,
    ImageInput,
    TokenUsage,
    is_retryable_status,
)
from contextembed.config import LLM_MODEL, OPENAI_API_KEY

logger = logging.getLogger(__name__)


class OpenAIBackend:
    """OpenAI GPT-based chat backend using JSON mode."""

    provider_id = "openai"

    def __init__(self, api_key: str | None = None, model: str | None = None, base_url: str | None = None):
        api_key = api_key or OPENAI_API_KEY
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable is required")

        from openai import AsyncOpenAI
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
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
        """Run one JSON-mode chat completion."""
        import openai

        if image is not None:
            user_content = [
                self._image_part(image),
                {"type": "text", "text": user},
            ]
        else:
            user_content = user

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user_content},
                ],
            )
        except openai.APIStatusError as e:
            raise BackendError(
                e.message,
                code=getattr(e, "code", None) or "API_ERROR",
                status=e.status_code,
                retryable=is_retryable_status(e.status_code),
            ) from e
        except (openai.APIConnectionError, openai.APITimeoutError) as e:
            raise BackendError(str(e), code="API_ERROR", retryable=True) from e

        content = response.choices[0].message.content if response.choices else None
        usage = response.usage
        return Completion(
            content=content,
            usage=TokenUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            ),
        )

    async def is_available(self) -> bool:
        """Check if OpenAI API is available."""
        try:
            await self.client.models.list()
            return True
        except Exception as e:
            logger.warning(f"OpenAI availability check failed: {e}")
            return False

    def _image_part(self, image: ImageInput) -> dict:
        if image.base64:
            url = f"data:{image.media_type};base64,{image.base64}"
        else:
            url = image.url
        return {"type": "image_url", "image_url": {"url": url, "detail": image.detail}}
