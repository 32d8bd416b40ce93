"""Perfect Metadata v1 schema.

Standards-compliant image metadata in five sections: descriptive, attribution,
location, workflow and audit. Field-level constraints (lengths, enums, PII guard,
keyword rules) live on the models below. The cross-field no-hallucination rules
for the location section live in ``contextembed.validation`` so they can report
their own paths and run even when other sections are broken.
"""

import re
from typing import Annotated, Literal
from urllib.parse import urlparse

from pydantic import AfterValidator, BeforeValidator, ConfigDict, Field, StringConstraints, field_validator
from pydantic_core import PydanticCustomError

from contextembed.schemas.common import CamelModel, collapse_whitespace

LocationMode = Literal["none", "fromProfile", "fromExifOnly"]
ReleaseStatus = Literal["unknown", "present", "not_present"]
ProvenanceSource = Literal["user", "exif", "ai_inferred"]

LOCATION_MODES: tuple[str, ...] = ("none", "fromProfile", "fromExifOnly")
PROVENANCE_SOURCES: tuple[str, ...] = ("user", "exif", "ai_inferred")

# Wire names of the location fields that carry provenance
LOCATION_FIELDS: tuple[str, ...] = ("city", "stateProvince", "country", "sublocation", "gps")

MIN_KEYWORDS = 8
MAX_KEYWORDS = 35

# Basic PII heuristics; the phone pattern over-matches long digit runs
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{2,4}\)?[-.\s]?\d{2,4}[-.\s]?\d{2,9}")


def contains_pii(text: str) -> bool:
    """True if the text looks like it carries an email address or phone number."""
    return bool(EMAIL_PATTERN.search(text) or PHONE_PATTERN.search(text))


def _no_pii(label: str):
    def check(value: str) -> str:
        if contains_pii(value):
            raise PydanticCustomError("pii", f"{label} must not contain email or phone")
        return value

    return check


def _check_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise PydanticCustomError("url", "Invalid url")
    return value


def trimmed(min_length: int, max_length: int):
    """String type that is whitespace-normalized before its bounds are checked."""
    return Annotated[
        str,
        StringConstraints(min_length=min_length, max_length=max_length),
        BeforeValidator(collapse_whitespace),
    ]


Keyword = trimmed(2, 40)


def keyword_list_error(keywords: list) -> str | None:
    """Count and case-insensitive uniqueness rule for a keyword list, or None if it holds."""
    if len(keywords) < MIN_KEYWORDS:
        return f"At least {MIN_KEYWORDS} keywords required"
    if len(keywords) > MAX_KEYWORDS:
        return f"Maximum {MAX_KEYWORDS} keywords allowed"
    normalized = [str(collapse_whitespace(k)).lower() for k in keywords]
    if len(set(normalized)) != len(normalized):
        return "Keywords must be unique (case-insensitive)"
    return None


# --- Sections ---


class DescriptiveMetadata(CamelModel):
    """Unique per image, AI-generated."""

    headline: Annotated[trimmed(5, 120), AfterValidator(_no_pii("Headline"))]
    description: Annotated[trimmed(20, 1200), AfterValidator(_no_pii("Description"))]
    alt_text: Annotated[trimmed(10, 160), AfterValidator(_no_pii("Alt text"))]
    keywords: list[Keyword]
    category: trimmed(2, 60) | None = None
    subject_codes: list[Annotated[str, StringConstraints(max_length=20)]] | None = None

    @field_validator("keywords")
    @classmethod
    def check_keywords(cls, keywords: list[str]) -> list[str]:
        message = keyword_list_error(keywords)
        if message:
            raise PydanticCustomError("keywords", message)
        return keywords


class AttributionMetadata(CamelModel):
    """Attribution and rights, derived from the onboarding RightsInfo."""

    creator: trimmed(2, 80)
    credit_line: trimmed(2, 120)
    copyright_notice: trimmed(2, 160)
    rights_usage_terms: trimmed(2, 500) | None = None
    rights_url: Annotated[str, StringConstraints(max_length=300), AfterValidator(_check_url)] | None = None
    source: trimmed(2, 120) | None = None


class GPSCoordinates(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class FieldProvenance(CamelModel):
    """Origin of each populated location field."""

    city: ProvenanceSource | None = None
    state_province: ProvenanceSource | None = None
    country: ProvenanceSource | None = None
    sublocation: ProvenanceSource | None = None
    gps: ProvenanceSource | None = None


class LocationMetadata(CamelModel):
    """Location, only when confirmed by the user or the file's EXIF."""

    location_mode: LocationMode
    city: trimmed(1, 80) | None = None
    state_province: trimmed(1, 80) | None = None
    country: trimmed(1, 80) | None = None
    sublocation: trimmed(1, 120) | None = None
    gps: GPSCoordinates | None = None
    provenance: FieldProvenance | None = None


class WorkflowMetadata(CamelModel):
    job_id: trimmed(2, 80)
    instructions: trimmed(2, 400) | None = None
    model_release_status: ReleaseStatus = "unknown"
    property_release_status: ReleaseStatus = "unknown"


class ContextEmbedAudit(CamelModel):
    """Machine-generated run fingerprint, never user-editable."""

    ce_run_id: str = Field(min_length=8, max_length=64)
    ce_profile_version: str = Field(min_length=1, max_length=40)
    ce_prompt_version: str = Field(min_length=1, max_length=40)
    ce_verification_hash: str = Field(min_length=16, max_length=128)


class PerfectMetadata(CamelModel):
    """Complete, export-ready metadata record for one image."""

    model_config = ConfigDict(frozen=True)

    descriptive: DescriptiveMetadata
    attribution: AttributionMetadata
    location: LocationMetadata
    workflow: WorkflowMetadata
    audit: ContextEmbedAudit
