"""Validation of PerfectMetadata candidates.

``validate`` never raises for bad data: every structural, PII and
no-hallucination problem comes back as a ``{path, message}`` entry on the
result, alongside non-fatal warnings and completeness stats that are computed
even when the candidate is far from export-ready.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_snake

from contextembed.schemas.common import CamelModel, collapse_whitespace
from contextembed.schemas.perfect_metadata import (
    LOCATION_FIELDS,
    MAX_KEYWORDS,
    MIN_KEYWORDS,
    PerfectMetadata,
    keyword_list_error,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "descriptive.headline",
    "descriptive.description",
    "descriptive.altText",
    "descriptive.keywords",
    "attribution.creator",
    "attribution.creditLine",
    "attribution.copyrightNotice",
    "workflow.jobId",
    "audit.ceRunId",
    "audit.ceProfileVersion",
    "audit.cePromptVersion",
    "audit.ceVerificationHash",
)


class Issue(BaseModel):
    path: str
    message: str


class ValidationStats(CamelModel):
    required_complete: int
    required_total: int
    keyword_count: int
    location_safe: bool


class ValidationResult(CamelModel):
    valid: bool
    errors: list[Issue] = []
    warnings: list[Issue] = []
    stats: ValidationStats


def validate(candidate: Any, *, partial: bool = False) -> ValidationResult:
    """Validate a candidate record against the PerfectMetadata contract.

    Args:
        candidate: Mapping with camelCase keys, or a PerfectMetadata model
        partial: Draft mode; absent or blank values are not reported, but
            values that are present are still checked and the location
            rules are never relaxed

    Returns:
        ValidationResult with errors, warnings and completeness stats
    """
    data = as_data(candidate)
    source = prune_empty(data) if partial and isinstance(data, Mapping) else data

    errors = schema_issues(source, partial=partial)
    location = _get(data, "location") if isinstance(data, Mapping) else None
    errors.extend(location_rule_issues(location))

    stats = compute_stats(data)
    warnings = _warnings(stats)

    result = ValidationResult(valid=not errors, errors=errors, warnings=warnings, stats=stats)
    logger.debug(
        f"Validated candidate: valid={result.valid} errors={len(errors)} "
        f"complete={stats.required_complete}/{stats.required_total}"
    )
    return result


def parse_perfect_metadata(candidate: Any) -> PerfectMetadata | None:
    """Return the normalized PerfectMetadata model, or None if the candidate is invalid."""
    if not validate(candidate).valid:
        return None
    return PerfectMetadata.model_validate(as_data(candidate))


def schema_issues(data: Any, *, partial: bool = False) -> list[Issue]:
    """Run the structural schema and flatten its errors into issues."""
    try:
        PerfectMetadata.model_validate(data)
    except ValidationError as e:
        issues = []
        for error in e.errors():
            if partial and error["type"] == "missing":
                continue
            path = ".".join(str(part) for part in error["loc"])
            issues.append(Issue(path=path, message=error["msg"]))
        return issues + keyword_list_issues(data, issues)
    return []


def keyword_list_issues(data: Any, issues: list[Issue]) -> list[Issue]:
    """List-level keyword rule on the raw list.

    pydantic skips the list validator when any item fails, so the count and
    uniqueness rule is checked here when it has not already been reported.
    """
    if any(issue.path == "descriptive.keywords" for issue in issues):
        return []
    keywords = lookup_path(data, "descriptive.keywords") if isinstance(data, Mapping) else None
    if not isinstance(keywords, (list, tuple)):
        return []
    message = keyword_list_error(list(keywords))
    return [Issue(path="descriptive.keywords", message=message)] if message else []


def location_rule_issues(location: Any) -> list[Issue]:
    """Apply the no-hallucination rules to a location section.

    - locationMode "none": no location field may be populated
    - locationMode "fromExifOnly": every populated field must carry exif provenance
    - any mode: a populated field may never carry ai_inferred provenance
    """
    if not isinstance(location, Mapping):
        return []

    mode = _get(location, "locationMode")
    provenance = _get(location, "provenance")
    if not isinstance(provenance, Mapping):
        provenance = {}

    populated = populated_location_fields(location)
    issues = []

    if mode == "none" and populated:
        issues.append(
            Issue(
                path="location.locationMode",
                message='Location fields must be empty when locationMode is "none"',
            )
        )

    for field in populated:
        origin = _get(provenance, field)
        if mode == "fromExifOnly" and origin != "exif":
            issues.append(
                Issue(
                    path=f"location.{field}",
                    message=f'{field} must have EXIF provenance when locationMode is "fromExifOnly"',
                )
            )
        elif origin == "ai_inferred":
            issues.append(
                Issue(
                    path=f"location.{field}",
                    message=f"{field} must not be AI-inferred",
                )
            )

    return issues


def populated_location_fields(location: Mapping) -> list[str]:
    return [field for field in LOCATION_FIELDS if is_populated(_get(location, field))]


def compute_stats(data: Any) -> ValidationStats:
    """Completeness stats, independent of strict schema validity."""
    if not isinstance(data, Mapping):
        data = {}

    required_complete = sum(1 for path in REQUIRED_FIELDS if is_populated(lookup_path(data, path)))

    keywords = lookup_path(data, "descriptive.keywords")
    keyword_count = len(keywords) if isinstance(keywords, (list, tuple)) else 0

    location = _get(data, "location")
    location_safe = True
    if isinstance(location, Mapping) and _get(location, "locationMode") == "none":
        location_safe = not populated_location_fields(location)

    return ValidationStats(
        required_complete=required_complete,
        required_total=len(REQUIRED_FIELDS),
        keyword_count=keyword_count,
        location_safe=location_safe,
    )


def completeness_score(candidate: Any) -> float:
    """Percentage (0-100) of required fields populated."""
    stats = compute_stats(as_data(candidate))
    return round(100 * stats.required_complete / stats.required_total, 1)


def is_populated(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(collapse_whitespace(value))
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def prune_empty(data: Mapping) -> dict:
    """Drop None, blank strings, empty lists and empty mappings, recursively."""
    pruned = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = prune_empty(value)
        if is_populated(value):
            pruned[key] = value
    return pruned


def create_empty_metadata() -> dict:
    """Draft template for a record that has not been synthesized yet."""
    return {
        "descriptive": {
            "headline": "",
            "description": "",
            "altText": "",
            "keywords": [],
        },
        "attribution": {
            "creator": "",
            "creditLine": "",
            "copyrightNotice": "",
        },
        "location": {
            "locationMode": "none",
        },
        "workflow": {
            "jobId": "",
            "modelReleaseStatus": "unknown",
            "propertyReleaseStatus": "unknown",
        },
        "audit": {
            "ceRunId": "",
            "ceProfileVersion": "",
            "cePromptVersion": "",
            "ceVerificationHash": "",
        },
    }


def _warnings(stats: ValidationStats) -> list[Issue]:
    warnings = []
    if stats.keyword_count < MIN_KEYWORDS:
        warnings.append(
            Issue(
                path="descriptive.keywords",
                message=f"Only {stats.keyword_count} keywords ({MIN_KEYWORDS} required)",
            )
        )
    if stats.keyword_count > MAX_KEYWORDS:
        warnings.append(
            Issue(
                path="descriptive.keywords",
                message=f"{stats.keyword_count} keywords exceeds maximum of {MAX_KEYWORDS}",
            )
        )
    if not stats.location_safe:
        warnings.append(Issue(path="location", message='Location data present but mode is "none"'))
    return warnings


def as_data(candidate: Any) -> Any:
    if isinstance(candidate, BaseModel):
        return candidate.model_dump(by_alias=True, exclude_none=True)
    return candidate


def _get(mapping: Mapping, key: str) -> Any:
    """Read a camelCase key, falling back to its snake_case spelling."""
    if key in mapping:
        return mapping[key]
    return mapping.get(to_snake(key))


def lookup_path(data: Mapping, path: str) -> Any:
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = _get(value, part)
    return value
