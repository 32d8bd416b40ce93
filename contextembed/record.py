"""Assemble a PerfectMetadata candidate from synthesis output and the onboarding profile.

Only the descriptive section comes from the model. Attribution comes from the
profile's rights, location from the profile or the file's EXIF (never the
model), workflow from the caller, and the audit section is computed here.
"""

import copy
import logging
import uuid

from pydantic import BaseModel

from contextembed.hashing import compute_input_hash
from contextembed.provenance import ProvenanceTracker
from contextembed.schemas.alt_text import AltTextOutput
from contextembed.schemas.common import collapse_whitespace
from contextembed.schemas.onboarding import ExifLocation, OnboardingProfile
from contextembed.schemas.perfect_metadata import MAX_KEYWORDS
from contextembed.schemas.synthesis import DEFAULT_USAGE_TERMS, METADATA_PROMPT_VERSION, SynthesizedMetadata
from contextembed.synthesizer import interpolate_copyright

logger = logging.getLogger(__name__)

SECTIONS = ("descriptive", "attribution", "location", "workflow")


class CandidateRecord(BaseModel):
    """A candidate record plus what the model said about location, kept apart."""

    candidate: dict
    ai_location_hints: dict[str, str] = {}


def dedupe_keywords(keywords: list[str], limit: int) -> list[str]:
    """Whitespace-normalize, drop blanks and case-insensitive duplicates, keep first-seen order."""
    seen = set()
    result = []
    for keyword in keywords:
        keyword = collapse_whitespace(keyword)
        if not keyword or keyword.lower() in seen:
            continue
        seen.add(keyword.lower())
        result.append(keyword)
        if len(result) >= limit:
            break
    return result


def compute_verification_hash(candidate: dict) -> str:
    """SHA-256 over the canonical JSON of every section except audit, plus the run id."""
    payload = {section: candidate.get(section) for section in SECTIONS}
    payload["ceRunId"] = candidate["audit"]["ceRunId"]
    return compute_input_hash(payload)


def build_location(profile: OnboardingProfile, exif_location: ExifLocation | None) -> dict:
    """Location section for the profile's location mode, with provenance tags."""
    mode = profile.preferences.location_mode
    tracker = ProvenanceTracker()
    location: dict = {"locationMode": mode}

    if mode == "fromProfile":
        confirmed = profile.confirmed_context.location
        if confirmed is not None:
            values = {"city": confirmed.city, "stateProvince": confirmed.state, "country": confirmed.country}
            for field, value in values.items():
                if value and value.strip():
                    location[field] = value
                    tracker.tag_field(field, "user")
    elif mode == "fromExifOnly":
        if exif_location is not None:
            values = exif_location.model_dump(by_alias=True, exclude_none=True)
            for field, value in values.items():
                if isinstance(value, str) and not value.strip():
                    continue
                location[field] = value
                tracker.tag_field(field, "exif")

    provenance = tracker.as_map()
    if provenance:
        location["provenance"] = provenance
    return location


def build_candidate(
    synthesized: SynthesizedMetadata,
    profile: OnboardingProfile,
    *,
    job_id: str,
    run_id: str | None = None,
    exif_location: ExifLocation | None = None,
    instructions: str | None = None,
    model_release_status: str = "unknown",
    property_release_status: str = "unknown",
    prompt_version: str = METADATA_PROMPT_VERSION,
) -> CandidateRecord:
    """Build an unvalidated candidate record (camelCase mapping).

    Args:
        synthesized: Validated synthesis output
        profile: Onboarding profile the synthesis ran against
        job_id: Caller's job identifier
        run_id: Run id for the audit section, generated when omitted
        exif_location: Location read from the file itself, used only in fromExifOnly mode
        instructions: Optional workflow instructions
        model_release_status: Release status confirmed by the user
        property_release_status: Release status confirmed by the user
        prompt_version: Synthesis prompt version stamped into the audit section

    Returns:
        CandidateRecord holding the candidate and any AI location hints
    """
    rights = profile.rights
    limit = min(profile.preferences.max_keywords, MAX_KEYWORDS)

    descriptive: dict = {
        "headline": synthesized.headline,
        "description": synthesized.description,
        "altText": synthesized.alt_text_short or "",
        "keywords": dedupe_keywords(synthesized.keywords, limit),
    }
    taxonomy = synthesized.taxonomy
    if taxonomy and taxonomy.categories:
        descriptive["category"] = taxonomy.categories[0]
    if taxonomy and taxonomy.subject_codes:
        descriptive["subjectCodes"] = list(taxonomy.subject_codes)

    attribution: dict = {
        "creator": rights.creator_name,
        "creditLine": rights.credit_template,
        "copyrightNotice": interpolate_copyright(rights.copyright_template),
        "rightsUsageTerms": rights.usage_terms_template or DEFAULT_USAGE_TERMS,
        "source": rights.studio_name or rights.creator_name,
    }
    if rights.website:
        attribution["rightsUrl"] = rights.website

    workflow: dict = {
        "jobId": job_id,
        "modelReleaseStatus": model_release_status,
        "propertyReleaseStatus": property_release_status,
    }
    if instructions:
        workflow["instructions"] = instructions

    # Release status is user-confirmed only
    if synthesized.releases is not None:
        logger.debug(f"Ignoring model-reported releases for job {job_id}")

    candidate = {
        "descriptive": descriptive,
        "attribution": attribution,
        "location": build_location(profile, exif_location),
        "workflow": workflow,
        "audit": {
            "ceRunId": run_id or uuid.uuid4().hex,
            "ceProfileVersion": str(profile.version),
            "cePromptVersion": prompt_version,
        },
    }
    candidate["audit"]["ceVerificationHash"] = compute_verification_hash(candidate)

    hints = synthesized.location_hints()
    if hints:
        logger.info(f"Model suggested location {sorted(hints)} for job {job_id}; kept as hints only")

    return CandidateRecord(candidate=candidate, ai_location_hints=hints)


def apply_alt_text(candidate: dict, output: AltTextOutput) -> dict:
    """Return a copy of the candidate using the engine's short alt text, re-hashed."""
    updated = copy.deepcopy(candidate)
    updated["descriptive"]["altText"] = output.alt_text_short
    updated["audit"]["ceVerificationHash"] = compute_verification_hash(updated)
    return updated
