"""IPTC/XMP tag mapping for embedding a PerfectMetadata record.

``TAG_MAP`` is the single table of record field -> tags. Custom audit and
workflow values go under the ``XMP-contextembed`` namespace, which exiftool
learns from ``EXIFTOOL_CONFIG``.
"""

from collections.abc import Mapping
from typing import Any, NamedTuple

from contextembed.validation import as_data, lookup_path

XMP_NAMESPACE = "http://contextembed.com/1.0/"
XMP_PREFIX = "contextembed"

EXIFTOOL_CONFIG = f"""
%Image::ExifTool::UserDefined = (
    'Image::ExifTool::XMP::Main' => {{
        {XMP_PREFIX} => {{
            SubDirectory => {{
                TagTable => 'Image::ExifTool::UserDefined::{XMP_PREFIX}',
            }},
        }},
    }},
);

%Image::ExifTool::UserDefined::{XMP_PREFIX} = (
    GROUPS => {{ 0 => 'XMP', 1 => 'XMP-{XMP_PREFIX}', 2 => 'Other' }},
    NAMESPACE => {{ '{XMP_PREFIX}' => '{XMP_NAMESPACE}' }},
    WRITABLE => 'string',
    RunId => {{ }},
    ProfileVersion => {{ }},
    PromptVersion => {{ }},
    VerificationHash => {{ }},
    AltText => {{ }},
    LocationMode => {{ }},
    ModelReleaseStatus => {{ }},
    PropertyReleaseStatus => {{ }},
);
"""


class TagMapping(NamedTuple):
    field: str
    tags: tuple[str, ...]
    section: str
    is_list: bool = False


TAG_MAP: tuple[TagMapping, ...] = (
    # Descriptive
    TagMapping("descriptive.headline", ("XMP-photoshop:Headline", "IPTC:Headline"), "descriptive"),
    TagMapping("descriptive.description", ("XMP-dc:Description", "IPTC:Caption-Abstract"), "descriptive"),
    TagMapping("descriptive.altText", ("XMP-contextembed:AltText", "XMP-iptcExt:AltTextAccessibility"), "descriptive"),
    TagMapping("descriptive.keywords", ("XMP-dc:Subject", "IPTC:Keywords"), "descriptive", is_list=True),
    TagMapping("descriptive.category", ("IPTC:Category",), "descriptive"),
    TagMapping("descriptive.subjectCodes", ("IPTC:SubjectCode",), "descriptive", is_list=True),
    # Attribution & rights
    TagMapping("attribution.creator", ("XMP-dc:Creator", "IPTC:By-line"), "attribution"),
    TagMapping("attribution.creditLine", ("IPTC:Credit", "XMP-photoshop:Credit"), "attribution"),
    TagMapping("attribution.copyrightNotice", ("XMP-dc:Rights", "IPTC:CopyrightNotice"), "attribution"),
    TagMapping("attribution.rightsUsageTerms", ("XMP-xmpRights:UsageTerms",), "attribution"),
    TagMapping("attribution.rightsUrl", ("XMP-xmpRights:WebStatement",), "attribution"),
    TagMapping("attribution.source", ("IPTC:Source", "XMP-photoshop:Source"), "attribution"),
    # Location, only when confirmed
    TagMapping("location.city", ("IPTC:City", "XMP-photoshop:City"), "location"),
    TagMapping("location.stateProvince", ("IPTC:Province-State", "XMP-photoshop:State"), "location"),
    TagMapping("location.country", ("IPTC:Country-PrimaryLocationName", "XMP-photoshop:Country"), "location"),
    TagMapping("location.sublocation", ("IPTC:Sub-location", "XMP-iptcCore:Location"), "location"),
    TagMapping("location.locationMode", ("XMP-contextembed:LocationMode",), "audit"),
    # Workflow
    TagMapping("workflow.jobId", ("IPTC:JobID", "XMP-photoshop:TransmissionReference"), "workflow"),
    TagMapping("workflow.instructions", ("IPTC:SpecialInstructions",), "workflow"),
    TagMapping("workflow.modelReleaseStatus", ("XMP-contextembed:ModelReleaseStatus",), "workflow"),
    TagMapping("workflow.propertyReleaseStatus", ("XMP-contextembed:PropertyReleaseStatus",), "workflow"),
    # Audit
    TagMapping("audit.ceRunId", ("XMP-contextembed:RunId",), "audit"),
    TagMapping("audit.ceProfileVersion", ("XMP-contextembed:ProfileVersion",), "audit"),
    TagMapping("audit.cePromptVersion", ("XMP-contextembed:PromptVersion",), "audit"),
    TagMapping("audit.ceVerificationHash", ("XMP-contextembed:VerificationHash",), "audit"),
)


def gps_tags(gps: Mapping) -> dict[str, Any]:
    """EXIF GPS tags: absolute values plus N/S and E/W references.

    Returns no tags unless both coordinates are present.
    """
    lat = gps.get("lat")
    lon = gps.get("lon")
    if lat is None or lon is None:
        return {}
    lat = float(lat)
    lon = float(lon)
    return {
        "EXIF:GPSLatitude": abs(lat),
        "EXIF:GPSLatitudeRef": "N" if lat >= 0 else "S",
        "EXIF:GPSLongitude": abs(lon),
        "EXIF:GPSLongitudeRef": "E" if lon >= 0 else "W",
    }


def map_to_export_tags(metadata, *, include_gps: bool = True) -> dict[str, Any]:
    """Map a record to ``{tag: value}``; list fields map to lists.

    Empty values are skipped. Location tags are skipped entirely when the
    location mode is ``none``.
    """
    data = as_data(metadata)
    location_off = lookup_path(data, "location.locationMode") == "none"
    tags: dict[str, Any] = {}

    for mapping in TAG_MAP:
        if mapping.section == "location" and location_off:
            continue
        value = lookup_path(data, mapping.field)
        if value is None or value == "" or value == []:
            continue
        for tag in mapping.tags:
            tags[tag] = list(value) if mapping.is_list else value

    gps = lookup_path(data, "location.gps")
    if include_gps and not location_off and isinstance(gps, Mapping):
        tags.update(gps_tags(gps))
    return tags


def build_exiftool_args(metadata, *, preserve_technical_exif: bool = True, include_gps: bool = True) -> list[str]:
    """exiftool command-line arguments that write the record's tags."""
    args = []
    if preserve_technical_exif:
        args += ["-tagsfromfile", "@", "-EXIF:all"]
    args.append("-overwrite_original")

    for tag, value in map_to_export_tags(metadata, include_gps=include_gps).items():
        if isinstance(value, list):
            args += [f"-{tag}={item}" for item in value]
        else:
            args.append(f"-{tag}={value}")
    return args


def _normalize(value) -> str:
    return " ".join(str(value).split()).lower()


def verify_embedded(read_result: Mapping, expected) -> list[dict]:
    """Compare tags read back with ``exiftool -json`` against the record.

    Only the first tag of each mapping is checked. exiftool's JSON drops the
    colon from group-qualified names, so ``IPTC:Headline`` is read as
    ``IPTCHeadline``.

    Returns:
        Mismatches as ``{field, expected, actual}``; empty when everything matches
    """
    data = as_data(expected)
    mismatches = []
    for mapping in TAG_MAP:
        wanted = lookup_path(data, mapping.field)
        if wanted is None or wanted == "" or wanted == []:
            continue
        actual = read_result.get(mapping.tags[0].replace(":", ""))

        if mapping.is_list:
            actual_items = actual if isinstance(actual, list) else [actual] if actual else []
            matches = sorted(map(_normalize, wanted)) == sorted(map(_normalize, actual_items))
        else:
            matches = actual is not None and _normalize(wanted) == _normalize(actual)

        if not matches:
            mismatches.append({"field": mapping.field, "expected": wanted, "actual": actual})
    return mismatches
