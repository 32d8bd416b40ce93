"""Metadata synthesis schema and prompt builder."""

import json
from typing import Annotated, Literal

from pydantic import Field, StringConstraints

from contextembed.schemas.common import CamelModel
from contextembed.schemas.onboarding import (
    ConfirmedContext,
    ConfirmedLocation,
    EventContext,
    OutputPreferences,
    RightsInfo,
)
from contextembed.schemas.vision import VisionAnalysis

Score = Annotated[float, Field(ge=0, le=1)]
ShortTerm = Annotated[str, StringConstraints(max_length=64)]


class EventAnchor(CamelModel):
    event_id: str = Field(max_length=128)
    event_name: str | None = Field(default=None, max_length=256)
    event_date: str | None = Field(default=None, max_length=64)
    story_sequence: int | None = Field(default=None, ge=1)
    gallery_id: str | None = Field(default=None, max_length=128)
    gallery_name: str | None = Field(default=None, max_length=256)


class Intent(CamelModel):
    """Why the image exists: the meaning that must survive re-publication."""

    purpose: Literal["portfolio", "commercial", "editorial", "personal", "archival", "social"]
    moment_type: str = Field(max_length=100)
    emotional_tone: str = Field(max_length=100)
    story_position: Literal["opening", "middle", "climax", "closing", "standalone"] | None = None
    narrative_role: str | None = Field(default=None, max_length=500)


class SceneSummary(CamelModel):
    people_count: int | None = Field(default=None, ge=0)
    scene_type: str | None = Field(default=None, max_length=100)
    setting: str | None = Field(default=None, max_length=100)


class Taxonomy(CamelModel):
    categories: list[str] | None = Field(default=None, max_length=10)
    subject_codes: list[str] | None = Field(default=None, max_length=10)


class ReleaseInfo(CamelModel):
    status: Literal["released", "not-released", "not-applicable", "unknown"] = "unknown"
    release_id: str | None = Field(default=None, max_length=64)


class Releases(CamelModel):
    model: ReleaseInfo | None = None
    property: ReleaseInfo | None = None


class Confidence(CamelModel):
    overall: Score = 0.0
    headline: Score = 0.0
    description: Score = 0.0
    keywords: Score = 0.0
    location: Score = 0.0


class Reasoning(CamelModel):
    headline: str = Field(default="", max_length=500)
    description: str = Field(default="", max_length=500)
    keywords: str = Field(default="", max_length=500)
    location: str | None = Field(default=None, max_length=500)
    general: str = Field(default="", max_length=1000)


class SynthesizedMetadata(CamelModel):
    """Parsed LLM synthesis output.

    Location fields are model suggestions only. They are surfaced as hints
    and never copied into the location section of a record.
    """

    headline: str = Field(min_length=1, max_length=256)
    description: str = Field(min_length=1, max_length=2000)
    keywords: list[ShortTerm] = Field(min_length=3, max_length=50)
    title: str | None = Field(default=None, max_length=256)

    alt_text_short: str | None = Field(default=None, max_length=160)
    alt_text_long: str | None = Field(default=None, max_length=2000)
    language: str | None = Field(default=None, max_length=10)

    event_anchor: EventAnchor | None = None
    intent: Intent | None = None
    user_context: str | None = Field(default=None, max_length=2000)

    creator: str | None = Field(default=None, max_length=256)
    copyright: str | None = Field(default=None, max_length=256)
    credit: str | None = Field(default=None, max_length=256)
    source: str | None = Field(default=None, max_length=256)
    usage_terms: str | None = Field(default=None, max_length=2000)
    web_statement: str | None = None
    copyright_status: Literal["copyrighted", "public-domain", "unknown"] | None = None

    sublocation: str | None = Field(default=None, max_length=256)
    city: str | None = Field(default=None, max_length=128)
    state: str | None = Field(default=None, max_length=128)
    country: str | None = Field(default=None, max_length=128)
    country_code: str | None = Field(default=None, max_length=3)

    instructions: str | None = Field(default=None, max_length=256)
    caption_writer: str | None = Field(default=None, max_length=128)
    category: str | None = Field(default=None, max_length=3)
    supplemental_categories: list[ShortTerm] | None = Field(default=None, max_length=10)

    releases: Releases | None = None
    taxonomy: Taxonomy | None = None
    scene: SceneSummary | None = None

    confidence: Confidence | None = None
    reasoning: Reasoning | None = None

    def location_hints(self) -> dict[str, str]:
        """Location values the model suggested, keyed by record field name."""
        hints = {
            "city": self.city,
            "stateProvince": self.state,
            "country": self.country,
            "sublocation": self.sublocation,
        }
        return {field: value.strip() for field, value in hints.items() if value and value.strip()}


# Bump when changing the prompts below; stamped into audit.cePromptVersion
METADATA_PROMPT_VERSION = "2.1.0"

DEFAULT_USAGE_TERMS = "All Rights Reserved. Contact for licensing."

METADATA_SYSTEM_PROMPT = """You are an expert metadata writer for digital images. Your role is to synthesize high-quality, SEO-optimized metadata that MERGES visual analysis with user-provided context.

You will receive:
1. A vision analysis of the image (structured JSON) - what the AI sees
2. The user's brand/business context profile - default attribution and style
3. USER CONTEXT about this specific image - the most important input

PRIORITY HIERARCHY:
1. USER CONTEXT - names, events and story details from the user override everything else
2. Vision analysis - what is visually in the image, checked against user context
3. Brand profile - default attribution and voice

RULES:
1. Names and story details from user context MUST appear in headline and description
2. Keywords should include user-provided proper nouns where appropriate
3. Headline must include the key details (who, what moment)
4. altTextShort MUST be a COMPLETE sentence of at most 160 characters. Never truncate; rewrite shorter instead
5. Count people accurately in scene.peopleCount
6. Always include confidence scores and reasoning
7. NEVER assert a location as fact. Location fields you return are treated as unverified hints
8. Do not put email addresses or phone numbers in headline, description or alt text

Return ONLY valid JSON matching the specified schema."""

_LOCATION_GUARD = (
    "Never state a city, region, country or venue in headline, description or alt text "
    "unless it appears in the confirmed location above or in the user context. "
    "Vision location cues are low-confidence hints, not facts."
)


def location_instructions(mode: str, location: ConfirmedLocation | None) -> str:
    """Location guidance for the model, by output location mode."""
    if mode == "fromProfile" and location and (location.city or location.country):
        parts = [location.city, location.state, location.country]
        confirmed = ", ".join(part for part in parts if part)
        return f"Confirmed location from the user's profile: {confirmed}\n{_LOCATION_GUARD}"
    if mode == "fromExifOnly":
        return (
            "Location comes only from the file's own EXIF data and is filled in after synthesis. "
            "Leave city, state, country and sublocation empty.\n" + _LOCATION_GUARD
        )
    if mode == "fromProfile":
        return f"No location is set in the user's profile.\n{_LOCATION_GUARD}"
    return "Do NOT include any location. Leave city, state, country and sublocation empty, and keep place names out of the text."


def _line(label: str, value) -> str | None:
    if not value:
        return None
    if isinstance(value, list):
        value = ", ".join(value)
    return f"- {label}: {value}"


def _brand_section(brand: ConfirmedContext) -> str:
    lines = [
        f"- Brand Name: {brand.brand_name}",
        f"- Industry: {brand.industry or 'Photography'}",
        f"- Niche: {brand.niche or 'Professional Photography'}",
        f"- Services: {', '.join(brand.services) or 'Professional Photography Services'}",
        f"- Target Audience: {brand.target_audience or 'General'}",
        f"- Brand Voice: {brand.brand_voice or 'Professional'}",
    ]
    if brand.tagline:
        lines.append(f"- Tagline: {brand.tagline}")
    if brand.additional_context:
        lines.append(f"- Additional Context: {brand.additional_context}")
    return "\n".join(lines)


def _authority_section(brand: ConfirmedContext) -> str:
    lines = [
        _line("Years of Experience", brand.years_experience),
        _line("Credentials", brand.credentials),
        _line("Specializations", brand.specializations),
        _line("Awards & Recognition", brand.awards_recognition),
        _line("Notable Client Types", brand.client_types),
        _line("Key Differentiator", brand.key_differentiator),
        _line("Price Positioning", brand.price_point),
        _line("Brand Story", brand.brand_story),
        _line("Service Areas", brand.service_area),
        _line("Primary Event Type", brand.default_event_type),
        _line("Typical Deliverables", brand.typical_deliverables),
    ]
    lines = [line for line in lines if line]
    if not lines:
        return ""
    return (
        "## AUTHORITY & EXPERTISE\n"
        + "\n".join(lines)
        + "\n\nWeave credentials and specializations naturally into headline and description where relevant. "
        "Match vocabulary to the price positioning. Service areas describe where the business works, "
        "not where this image was taken."
    )


def _event_section(event: EventContext | None) -> str:
    if event is None:
        return ""
    lines = [
        f"This image is part of event: {event.event_name or event.event_id}",
        f"- Event ID: {event.event_id}",
        _line("Event Name", event.event_name),
        _line("Event Date", event.event_date),
        _line("Sequence Position", event.story_sequence),
        _line("Gallery ID", event.gallery_id),
        _line("Gallery Name", event.gallery_name),
    ]
    body = "\n".join(line for line in lines if line)
    return f"## EVENT ANCHOR\n{body}\n\nInclude the eventAnchor object in your output with these values."


def _user_section(user_comment: str | None) -> str:
    if not user_comment:
        return ""
    return (
        f'## USER CONTEXT (HIGHEST PRIORITY)\n"{user_comment}"\n\n'
        "- Names mentioned: include in headline AND description\n"
        "- Event type: include in headline and keywords\n"
        "- Story details: weave into description naturally\n"
        "- Emotional context: use for intent.emotionalTone\n"
        'Preserve the full context verbatim in the "userContext" field.'
    )


def build_synthesis_prompt(
    vision: VisionAnalysis,
    brand: ConfirmedContext,
    rights: RightsInfo,
    preferences: OutputPreferences,
    user_comment: str | None = None,
    event: EventContext | None = None,
) -> str:
    """Build the user prompt for one synthesis call.

    The same inputs always produce the same prompt.
    """
    vision_json = json.dumps(vision.model_dump(by_alias=True, exclude_none=True), indent=2, sort_keys=True)
    output_format = {
        "headline": "Compelling, SEO-friendly headline (max 120 chars)",
        "description": "Detailed, natural description for captions. COMPLETE sentences only.",
        "keywords": ["keyword1", "keyword2", f"...up to {preferences.max_keywords}"],
        "title": "Short formal title",
        "altTextShort": "COMPLETE sentence, at most 160 chars",
        "altTextLong": "Extended accessibility description",
        "language": preferences.primary_language,
        "intent": {
            "purpose": "portfolio|commercial|editorial|personal|archival|social",
            "momentType": "e.g. preparation, ceremony, celebration, candid, portrait",
            "emotionalTone": "e.g. joyful, intimate, professional, serene",
            "storyPosition": "opening|middle|climax|closing|standalone",
            "narrativeRole": "What this moment represents",
        },
        "userContext": user_comment,
        "creator": rights.creator_name,
        "copyright": rights.copyright_template,
        "credit": rights.credit_template,
        "source": rights.studio_name or rights.creator_name,
        "usageTerms": rights.usage_terms_template or DEFAULT_USAGE_TERMS,
        "copyrightStatus": "copyrighted",
        "taxonomy": {"categories": ["category-slug-1", "category-slug-2"]},
        "scene": {"peopleCount": 0, "sceneType": "portrait/landscape/product/etc", "setting": "studio-white/outdoor-urban/etc"},
        "confidence": {"overall": "0.0-1.0", "headline": "0.0-1.0", "description": "0.0-1.0", "keywords": "0.0-1.0", "location": "0.0-1.0"},
        "reasoning": {"headline": "", "description": "", "keywords": "", "location": "", "general": ""},
    }
    if event is not None:
        output_format["eventAnchor"] = event.model_dump(by_alias=True, exclude_none=True)

    sections = [
        "Generate metadata for this image based on the following inputs:",
        f"## VISION ANALYSIS\n{vision_json}",
        f"## BRAND CONTEXT\n{_brand_section(brand)}",
        _authority_section(brand),
        "## RIGHTS INFORMATION\n"
        f"- Creator: {rights.creator_name}\n"
        f"- Studio: {rights.studio_name or rights.creator_name}\n"
        f"- Copyright Template: {rights.copyright_template}\n"
        f"- Credit Template: {rights.credit_template}\n"
        f"- Usage Terms: {rights.usage_terms_template or DEFAULT_USAGE_TERMS}",
        "## OUTPUT PREFERENCES\n"
        f"- Language: {preferences.primary_language}\n"
        f"- Keyword Style: {preferences.keyword_style} ({preferences.max_keywords} max)\n"
        f"- Location Mode: {preferences.location_mode}",
        f"## LOCATION INSTRUCTIONS\n{location_instructions(preferences.location_mode, brand.location)}",
        _event_section(event),
        _user_section(user_comment),
        f"## REQUIRED OUTPUT FORMAT\nReturn a JSON object with these fields:\n{json.dumps(output_format, indent=2)}",
        "Respond ONLY with valid JSON.",
    ]
    return "\n\n".join(section for section in sections if section)
