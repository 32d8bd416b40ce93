"""Pure transforms from validated metadata into downstream shapes.

Mappers never re-validate. Missing optional values map to empty strings.
"""

from contextembed.mappers.case_study import build_case_study_row
from contextembed.mappers.export import TAG_MAP, build_exiftool_args, map_to_export_tags, verify_embedded
from contextembed.mappers.wordpress import (
    WordPressMediaPayload,
    build_wordpress_payload,
    extract_media_payload_from_metadata,
    resolve_alt_text,
)

__all__ = [
    "TAG_MAP",
    "WordPressMediaPayload",
    "build_case_study_row",
    "build_exiftool_args",
    "build_wordpress_payload",
    "extract_media_payload_from_metadata",
    "map_to_export_tags",
    "resolve_alt_text",
    "verify_embedded",
]
