"""Onboarding profile: brand context, rights and output preferences."""

from typing import Annotated, Literal

from pydantic import BeforeValidator, Field, model_validator

from contextembed.schemas.common import CamelModel
from contextembed.schemas.perfect_metadata import GPSCoordinates, LocationMode

# Older profiles stored a behavior instead of a mode; "infer" never means AI inference here
LEGACY_LOCATION_BEHAVIOR = {
    "strict": "fromProfile",
    "infer": "fromExifOnly",
}


def _location_mode(value):
    if isinstance(value, str):
        return LEGACY_LOCATION_BEHAVIOR.get(value, value)
    return value


class ConfirmedLocation(CamelModel):
    city: str | None = None
    state: str | None = None
    country: str | None = None
    country_code: str | None = None
    is_strict: bool = True


class ConfirmedContext(CamelModel):
    """Brand/business context confirmed by the user during onboarding."""

    brand_name: str
    tagline: str | None = None
    industry: str | None = None
    niche: str | None = None
    services: list[str] = []
    target_audience: str | None = None
    brand_voice: str | None = None
    location: ConfirmedLocation | None = None
    additional_context: str | None = None

    # Authority & expertise
    years_experience: int | None = None
    credentials: list[str] = []
    specializations: list[str] = []
    awards_recognition: list[str] = []
    client_types: str | None = None
    key_differentiator: str | None = None
    price_point: Literal["budget", "mid-range", "premium", "luxury"] | None = None
    brand_story: str | None = None
    service_area: list[str] = []

    # Event defaults
    default_event_type: str | None = None
    typical_deliverables: list[str] = []


class RightsInfo(CamelModel):
    creator_name: str
    studio_name: str | None = None
    copyright_template: str
    credit_template: str
    usage_terms_template: str | None = None
    website: str | None = None
    email: str | None = None


class OutputPreferences(CamelModel):
    primary_language: str = "en"
    keyword_style: Literal["short", "long", "mixed"] = "mixed"
    max_keywords: int = Field(default=25, ge=1)
    location_mode: Annotated[LocationMode, BeforeValidator(_location_mode)] = "none"

    @model_validator(mode="before")
    @classmethod
    def accept_location_behavior(cls, data):
        """Profiles saved before locationMode existed carry ``locationBehavior``."""
        if isinstance(data, dict) and "locationBehavior" in data:
            data = dict(data)
            behavior = data.pop("locationBehavior")
            if "locationMode" not in data and "location_mode" not in data:
                data["locationMode"] = behavior
        return data


class OnboardingProfile(CamelModel):
    """User-supplied context for one project. Versioned; the version lands in the audit section."""

    id: str
    project_id: str
    version: int = 1
    project_name: str = ""
    confirmed_context: ConfirmedContext
    rights: RightsInfo
    preferences: OutputPreferences = OutputPreferences()


class EventContext(CamelModel):
    """Links images of one event or gallery together."""

    event_id: str
    event_name: str | None = None
    event_date: str | None = None
    story_sequence: int | None = Field(default=None, ge=1)
    gallery_id: str | None = None
    gallery_name: str | None = None


class ExifLocation(CamelModel):
    """Location read from the file's own EXIF/IPTC by an external reader."""

    city: str | None = None
    state_province: str | None = None
    country: str | None = None
    sublocation: str | None = None
    gps: GPSCoordinates | None = None
