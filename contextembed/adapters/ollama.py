"""Ollama chat backend."""

import logging

import httpx

from contextembed.adapters.base import (
    BackendError,
    Completion,
    ImageInput,
    TokenUsage,
    is_retryable_status,
)
from contextembed.config import LLM_MODEL, OLLAMA_URL

logger = logging.getLogger(__name__)


class OllamaBackend:
    """Ollama-based chat backend (local models, JSON format)."""

    provider_id = "ollama"

    def __init__(self, base_url: str | None = None, model: str | None = None):
        self.base_url = base_url or OLLAMA_URL
        self.model = model or LLM_MODEL
        self.timeout = 120.0

    async def complete_json(
        self,
        system: str,
        user: str,
        *,
        image: ImageInput | None = None,
        temperature: float = 0.5,
        max_tokens: int = 4096,
    ) -> Completion:
        """Run one /api/chat call with format=json."""
        user_message: dict = {"role": "user", "content": user}
        if image is not None:
            if not image.base64:
                raise BackendError(
                    "Ollama only accepts inline base64 images", code="BAD_REQUEST"
                )
            user_message["images"] = [image.base64]

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/api/chat",
                    json={
                        "model": self.model,
                        "messages": [
                            {"role": "system", "content": system},
                            user_message,
                        ],
                        "stream": False,
                        "format": "json",
                        "options": {"temperature": temperature, "num_predict": max_tokens},
                    },
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise BackendError(
                e.response.text[:500] or str(e),
                status=status,
                retryable=is_retryable_status(status),
            ) from e
        except httpx.HTTPError as e:
            raise BackendError(str(e), retryable=True) from e

        prompt_tokens = result.get("prompt_eval_count", 0) or 0
        completion_tokens = result.get("eval_count", 0) or 0
        return Completion(
            content=result.get("message", {}).get("content") or None,
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )

    async def is_available(self) -> bool:
        """Check if Ollama is reachable."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except Exception as e:
            logger.warning(f"Ollama availability check failed: {e}")
            return False
