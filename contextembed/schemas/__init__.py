"""Pydantic schemas and prompt templates."""

from contextembed.schemas.alt_text import AltTextInput, AltTextMode, AltTextOutput, AltTextResult
from contextembed.schemas.onboarding import (
    ConfirmedContext,
    EventContext,
    ExifLocation,
    OnboardingProfile,
    OutputPreferences,
    RightsInfo,
)
from contextembed.schemas.perfect_metadata import PerfectMetadata
from contextembed.schemas.provider import LLMRequest, LLMResponse, ProviderError, VisionRequest, VisionResponse
from contextembed.schemas.synthesis import METADATA_PROMPT_VERSION, SynthesizedMetadata
from contextembed.schemas.vision import VisionAnalysis

__all__ = [
    "AltTextInput",
    "AltTextMode",
    "AltTextOutput",
    "AltTextResult",
    "ConfirmedContext",
    "EventContext",
    "ExifLocation",
    "LLMRequest",
    "LLMResponse",
    "METADATA_PROMPT_VERSION",
    "OnboardingProfile",
    "OutputPreferences",
    "PerfectMetadata",
    "ProviderError",
    "RightsInfo",
    "SynthesizedMetadata",
    "VisionAnalysis",
    "VisionRequest",
    "VisionResponse",
]
