"""Flat per-image rows for case study pages."""

from contextembed.validation import as_data, lookup_path

CASE_STUDY_FIELDS = {
    "headline": "descriptive.headline",
    "description": "descriptive.description",
    "altText": "descriptive.altText",
    "credit": "attribution.creditLine",
    "copyright": "attribution.copyrightNotice",
    "city": "location.city",
    "country": "location.country",
    "jobId": "workflow.jobId",
}


def build_case_study_row(metadata) -> dict[str, str]:
    """Flatten a record into string-only display fields; keywords are comma-joined."""
    data = as_data(metadata)
    row = {}
    for name, path in CASE_STUDY_FIELDS.items():
        value = lookup_path(data, path)
        row[name] = value if isinstance(value, str) else ""

    keywords = lookup_path(data, "descriptive.keywords")
    row["keywords"] = ", ".join(keywords) if isinstance(keywords, (list, tuple)) else ""
    return row
