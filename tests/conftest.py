"""Shared fixtures: onboarding profiles, vision output, candidates and scripted backends."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from contextembed.adapters.base import Completion, TokenUsage
from contextembed.schemas.onboarding import OnboardingProfile
from contextembed.schemas.vision import VisionAnalysis

KEYWORDS = [
    "wedding photography",
    "bride",
    "groom",
    "first dance",
    "barn reception",
    "string lights",
    "evening celebration",
    "candid moment",
    "rustic venue",
    "romance",
]


@pytest.fixture
def profile_data():
    """Onboarding profile as it arrives on the wire (camelCase)."""
    return {
        "id": "profile-1",
        "projectId": "project-1",
        "version": 3,
        "projectName": "Smith-Jones Wedding",
        "confirmedContext": {
            "brandName": "Northlight Studio",
            "industry": "Photography",
            "niche": "Wedding photography",
            "services": ["weddings", "engagements"],
            "brandVoice": "Warm and understated",
            "location": {"city": "Austin", "state": "Texas", "country": "United States", "isStrict": True},
            "yearsExperience": 12,
            "credentials": ["PPA Certified"],
            "serviceArea": ["Austin", "Hill Country"],
        },
        "rights": {
            "creatorName": "Jane Doe",
            "studioName": "Northlight Studio",
            "copyrightTemplate": "© {year} Jane Doe. All rights reserved.",
            "creditTemplate": "Photo by Jane Doe",
            "usageTermsTemplate": "Licensed for editorial use only.",
            "website": "https://northlight.example",
        },
        "preferences": {
            "primaryLanguage": "en",
            "keywordStyle": "mixed",
            "maxKeywords": 25,
            "locationMode": "none",
        },
    }


@pytest.fixture
def profile(profile_data):
    return OnboardingProfile.model_validate(profile_data)


@pytest.fixture
def vision_data():
    return {
        "subjects": [
            {"type": "person", "description": "bride in a lace gown", "prominence": "primary"},
            {"type": "person", "description": "groom in a navy suit", "prominence": "primary"},
        ],
        "scene": {"type": "indoor", "setting": "rustic barn with string lights", "timeOfDay": "evening"},
        "emotions": ["joyful", "intimate"],
        "styleCues": ["candid"],
        "locationCues": {"possibleType": "rural", "hints": ["wooden beams"], "confidence": "low"},
        "notableObjects": ["string lights", "wooden beams"],
        "colorPalette": ["warm amber"],
        "composition": "centered couple, shallow depth of field",
        "rawDescription": "A bride and groom share a first dance under string lights in a rustic barn.",
    }


@pytest.fixture
def vision_analysis(vision_data):
    return VisionAnalysis.model_validate(vision_data)


@pytest.fixture
def synthesis_data():
    """A model response that passes the synthesis schema."""
    return {
        "headline": "Bride and groom share a first dance at a rustic barn reception",
        "description": (
            "Under warm string lights, the newlyweds share their first dance as guests "
            "look on during an intimate evening reception."
        ),
        "keywords": KEYWORDS + ["Bride"],
        "title": "First Dance",
        "altTextShort": "Bride and groom share their first dance under string lights in a rustic barn.",
        "altTextLong": "A bride in a lace gown and a groom in a navy suit dance closely beneath glowing string lights.",
        "intent": {"purpose": "portfolio", "momentType": "celebration", "emotionalTone": "celebratory"},
        "creator": "Someone Else",
        "copyright": "© 1999 Someone Else",
        "city": "Paris",
        "country": "France",
        "releases": {"model": {"status": "released"}},
        "taxonomy": {"categories": ["wedding-reception"]},
        "scene": {"peopleCount": 2, "sceneType": "portrait", "setting": "indoor-barn"},
        "confidence": {"overall": 0.9, "headline": 0.9, "description": 0.85, "keywords": 0.8, "location": 0.1},
    }


@pytest.fixture
def alt_text_data():
    """A model response that passes the alt-text schema."""
    return {
        "alt_text_short": "Bride and groom share a first dance beneath string lights in a rustic barn.",
        "alt_text_accessibility": (
            "A bride in a lace gown and a groom in a navy suit dance closely in the center "
            "of a wooden barn lit by strings of warm lights."
        ),
        "caption": "A first dance to remember under the barn lights.",
        "description": (
            "The couple's first dance unfolds beneath glowing string lights, wooden beams overhead, "
            "while the warm palette and shallow focus keep attention on the two of them."
        ),
        "focus_keyphrase": "rustic barn wedding",
        "safety_notes": "Contains identifiable people.",
    }


@pytest.fixture
def valid_candidate():
    """A complete record that passes validation."""
    return {
        "descriptive": {
            "headline": "Bride and groom share a first dance",
            "description": "The newlyweds share their first dance under warm string lights.",
            "altText": "Bride and groom dancing under string lights.",
            "keywords": list(KEYWORDS),
        },
        "attribution": {
            "creator": "Jane Doe",
            "creditLine": "Photo by Jane Doe",
            "copyrightNotice": "© 2026 Jane Doe. All rights reserved.",
        },
        "location": {"locationMode": "none"},
        "workflow": {"jobId": "job-001"},
        "audit": {
            "ceRunId": "run-0001",
            "ceProfileVersion": "3",
            "cePromptVersion": "2.1.0",
            "ceVerificationHash": "a" * 64,
        },
    }


def completion(payload, total_tokens: int = 100) -> Completion:
    content = payload if isinstance(payload, str) or payload is None else json.dumps(payload)
    return Completion(
        content=content,
        usage=TokenUsage(prompt_tokens=total_tokens // 2, completion_tokens=total_tokens // 2, total_tokens=total_tokens),
    )


@pytest.fixture
def make_backend():
    """Build a mock ChatBackend that returns (or raises) the given items in order."""

    def factory(*responses):
        backend = MagicMock()
        backend.provider_id = "openai"
        backend.model = "gpt-4o"
        backend.complete_json = AsyncMock(
            side_effect=[r if isinstance(r, Exception) else completion(r) for r in responses]
        )
        backend.is_available = AsyncMock(return_value=True)
        return backend

    return factory


@pytest.fixture
def deeply_nested_json():
    """Model output nested deeper than the JSON decoder's recursion limit."""
    return "[" * 200000 + "]" * 200000
