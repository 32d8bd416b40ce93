"""Chat backend contract shared by the vision, synthesis and alt-text services."""

import json
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

# HTTP statuses worth a caller-driven retry (rate limit and transient server errors)
RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


class TokenUsage(BaseModel):
    """Token accounting for one backend call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Completion(BaseModel):
    """Raw text returned by a backend, before any JSON parsing."""

    content: str | None = None
    usage: TokenUsage = TokenUsage()


class ImageInput(BaseModel):
    """Image attached to a chat request, either inline base64 or a URL."""

    base64: str | None = None
    url: str | None = None
    media_type: str = "image/jpeg"
    detail: str = "high"


class BackendError(Exception):
    """Failure talking to the provider API.

    Carries the provider status (when there is one) and whether a caller-driven
    retry makes sense.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "API_ERROR",
        status: int | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.retryable = retryable

    def __str__(self) -> str:
        if self.status is not None:
            return f"API error {self.status}: {self.message}"
        return f"API error: {self.message}"


def is_retryable_status(status: int | None) -> bool:
    return status is not None and status in RETRYABLE_STATUSES


@runtime_checkable
class ChatBackend(Protocol):
    """Strategy object wrapping one provider's JSON-mode chat endpoint."""

    provider_id: str
    model: str

    async def complete_json(
        self,
        system: str,
        user: str,
        *,
        image: ImageInput | None = None,
        temperature: float = 0.5,
        max_tokens: int = 4096,
    ) -> Completion:
        """Send a system + user prompt and return the raw completion text.

        Args:
            system: System prompt
            user: User prompt
            image: Optional image to attach to the user turn
            temperature: Sampling temperature
            max_tokens: Response token cap

        Returns:
            Completion with the response text (possibly empty) and token usage

        Raises:
            BackendError: if the provider call fails
        """
        ...

    async def is_available(self) -> bool:
        """Check if the provider is reachable."""
        ...


def strip_json_fences(text: str) -> str:
    """Strip markdown code fences from a JSON response."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def parse_json_content(content: str):
    """Parse completion text as JSON.

    Raises:
        json.JSONDecodeError: if the text is not valid JSON
        RecursionError: if the text nests deeper than the decoder allows
    """
    return json.loads(strip_json_fences(content))
