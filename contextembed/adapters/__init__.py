"""Backend factory and exports."""
from contextembed.adapters.base import (
    BackendError,
    ChatBackend,
    Completion,
    ImageInput,
    TokenUsage,
    parse_json_content,
)
from contextembed.config import CONTEXTEMBED_PROVIDER

PROVIDERS = ("openai", "anthropic", "ollama", "google")


def get_backend(provider: str | None = None, model: str | None = None) -> ChatBackend:
    """Get the configured chat backend.

    Args:
        provider: Provider name, defaults to CONTEXTEMBED_PROVIDER
        model: Model override, defaults to the backend's configured model

    Returns:
        ChatBackend instance for the provider

    Raises:
        ValueError: for an unknown provider or a missing API key
        NotImplementedError: for providers that are registered but not built yet
    """
    provider = (provider or CONTEXTEMBED_PROVIDER).lower()

    if provider == "openai":
        from contextembed.adapters.openai import OpenAIBackend
        return OpenAIBackend(model=model)
    elif provider == "anthropic":
        from contextembed.adapters.anthropic import AnthropicBackend
        return AnthropicBackend(model=model)
    elif provider == "ollama":
        from contextembed.adapters.ollama import OllamaBackend
        return OllamaBackend(model=model)
    elif provider == "google":
        raise NotImplementedError("Google provider not yet implemented")
    else:
        raise ValueError(f"Unknown provider type: {provider}")


__all__ = [
    "BackendError",
    "ChatBackend",
    "Completion",
    "ImageInput",
    "PROVIDERS",
    "TokenUsage",
    "get_backend",
    "parse_json_content",
]
