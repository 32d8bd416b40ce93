"""Tests for WordPress, export and case study mappers."""

import pytest

from contextembed.mappers import (
    TAG_MAP,
    build_case_study_row,
    build_exiftool_args,
    build_wordpress_payload,
    extract_media_payload_from_metadata,
    map_to_export_tags,
    verify_embedded,
)
from contextembed.mappers.export import EXIFTOOL_CONFIG, XMP_NAMESPACE, gps_tags
from contextembed.schemas.alt_text import AltTextOutput
from contextembed.schemas.perfect_metadata import PerfectMetadata
from contextembed.schemas.synthesis import SynthesizedMetadata


@pytest.fixture
def synthesized(synthesis_data):
    return SynthesizedMetadata.model_validate(synthesis_data)


@pytest.fixture
def alt_output(alt_text_data):
    return AltTextOutput.model_validate(alt_text_data)


# --- WordPress ---


def test_wordpress_seo_from_synthesis(synthesized):
    """Test the seo strategy uses the short synthesized alt text."""
    payload = build_wordpress_payload(synthesized, "seo_optimized")

    assert payload.alt_text == synthesized.alt_text_short
    assert payload.alt_text_accessibility == synthesized.alt_text_long
    assert payload.title == synthesized.headline
    assert payload.caption == synthesized.description
    assert payload.description == synthesized.description


def test_wordpress_accessibility_from_synthesis(synthesized):
    """Test the accessibility strategy prefers the long alt text."""
    payload = build_wordpress_payload(synthesized, "accessibility_focused")

    assert payload.alt_text == synthesized.alt_text_long


def test_wordpress_hybrid_puts_long_text_in_description(synthesized):
    """Test hybrid uses short alt text and the long one as media description."""
    payload = build_wordpress_payload(synthesized, "hybrid")

    assert payload.alt_text == synthesized.alt_text_short
    assert payload.description == synthesized.alt_text_long


def test_wordpress_prefers_engine_output(synthesized, alt_output):
    """Test alt-text engine output wins over synthesized alt text."""
    payload = build_wordpress_payload(synthesized, "seo_optimized", alt_text=alt_output)

    assert payload.alt_text == alt_output.alt_text_short
    assert payload.caption == alt_output.caption
    assert payload.description == alt_output.description
    assert payload.title == synthesized.headline

    accessible = build_wordpress_payload(synthesized, "accessibility_focused", alt_text=alt_output)
    assert accessible.alt_text == alt_output.alt_text_accessibility


def test_wordpress_falls_back_to_headline(synthesis_data):
    """Test missing alt text falls back to headline and description."""
    synthesis_data.pop("altTextShort")
    synthesis_data.pop("altTextLong")
    synthesized = SynthesizedMetadata.model_validate(synthesis_data)

    payload = build_wordpress_payload(synthesized)

    assert payload.alt_text == synthesized.headline
    assert payload.alt_text_accessibility == synthesized.description


def test_extract_media_payload_with_engine_output(alt_text_data):
    """Test stored engine output under altText is used first."""
    stored = {"headline": "First Dance", "description": "The couple dances.", "altText": alt_text_data}

    payload = extract_media_payload_from_metadata(stored, "hybrid")

    assert payload.alt_text == alt_text_data["alt_text_short"]
    assert payload.description == alt_text_data["alt_text_accessibility"]
    assert payload.caption == alt_text_data["caption"]
    assert payload.title == "First Dance"


def test_extract_media_payload_with_synthesized_fields():
    """Test stored synthesized alt text is used without engine output."""
    stored = {"headline": "First Dance", "description": "The couple dances.", "altTextShort": "Couple dancing"}

    payload = extract_media_payload_from_metadata(stored)

    assert payload.alt_text == "Couple dancing"
    assert payload.alt_text_accessibility == "The couple dances."
    assert payload.caption == "The couple dances."


def test_extract_media_payload_tolerates_junk():
    """Test wrong types are treated as absent and every field stays a string."""
    payload = extract_media_payload_from_metadata({"headline": 42, "description": None, "altText": "not a mapping"})

    assert payload.model_dump() == {
        "alt_text": "",
        "alt_text_short": "",
        "alt_text_accessibility": "",
        "caption": "",
        "description": "",
        "title": "",
    }


# --- Export ---


def test_export_tags(valid_candidate):
    """Test a record maps to IPTC/XMP tags with list fields as lists."""
    tags = map_to_export_tags(valid_candidate)

    assert tags["XMP-photoshop:Headline"] == "Bride and groom share a first dance"
    assert tags["IPTC:Headline"] == "Bride and groom share a first dance"
    assert tags["XMP-dc:Subject"] == valid_candidate["descriptive"]["keywords"]
    assert tags["IPTC:Keywords"] == valid_candidate["descriptive"]["keywords"]
    assert tags["XMP-dc:Creator"] == "Jane Doe"
    assert tags["XMP-contextembed:RunId"] == "run-0001"
    assert tags["XMP-contextembed:LocationMode"] == "none"
    assert "IPTC:Category" not in tags
    assert "XMP-xmpRights:WebStatement" not in tags


def test_export_skips_location_when_mode_is_none(valid_candidate):
    """Test no location tag is written under mode none, even if values slipped in."""
    valid_candidate["location"] = {"locationMode": "none", "city": "Paris", "gps": {"lat": 48.8, "lon": 2.3}}

    tags = map_to_export_tags(valid_candidate)

    assert "IPTC:City" not in tags
    assert "EXIF:GPSLatitude" not in tags


def test_export_location_and_gps(valid_candidate):
    """Test confirmed location and GPS are written with hemisphere references."""
    valid_candidate["location"] = {
        "locationMode": "fromExifOnly",
        "city": "Buenos Aires",
        "gps": {"lat": -34.6, "lon": -58.38},
        "provenance": {"city": "exif", "gps": "exif"},
    }

    tags = map_to_export_tags(PerfectMetadata.model_validate(valid_candidate))

    assert tags["IPTC:City"] == "Buenos Aires"
    assert tags["XMP-photoshop:City"] == "Buenos Aires"
    assert tags["EXIF:GPSLatitude"] == 34.6
    assert tags["EXIF:GPSLatitudeRef"] == "S"
    assert tags["EXIF:GPSLongitude"] == 58.38
    assert tags["EXIF:GPSLongitudeRef"] == "W"

    assert "EXIF:GPSLatitude" not in map_to_export_tags(valid_candidate, include_gps=False)


def test_gps_tags_north_east():
    """Test positive coordinates map to N and E."""
    assert gps_tags({"lat": 30.27, "lon": 97.74}) == {
        "EXIF:GPSLatitude": 30.27,
        "EXIF:GPSLatitudeRef": "N",
        "EXIF:GPSLongitude": 97.74,
        "EXIF:GPSLongitudeRef": "E",
    }



@pytest.mark.parametrize("gps", [{"lat": 30.27}, {"lon": 97.74}, {}])
def test_export_skips_half_filled_gps(valid_candidate, gps):
    """Test GPS tags are written only when both coordinates are present."""
    valid_candidate["location"] = {"locationMode": "fromExifOnly", "city": "Austin", "gps": gps}

    tags = map_to_export_tags(valid_candidate)

    assert tags["IPTC:City"] == "Austin"
    assert not any(tag.startswith("EXIF:GPS") for tag in tags)
    assert gps_tags(gps) == {}

def test_build_exiftool_args(valid_candidate):
    """Test exiftool arguments keep technical EXIF and repeat list tags."""
    args = build_exiftool_args(valid_candidate)

    assert args[:4] == ["-tagsfromfile", "@", "-EXIF:all", "-overwrite_original"]
    assert "-IPTC:Headline=Bride and groom share a first dance" in args
    assert "-IPTC:Keywords=bride" in args
    assert "-IPTC:Keywords=groom" in args

    bare = build_exiftool_args(valid_candidate, preserve_technical_exif=False)
    assert bare[0] == "-overwrite_original"


def test_exiftool_config_declares_namespace():
    """Test the exiftool config registers every custom tag used by the tag map."""
    assert XMP_NAMESPACE in EXIFTOOL_CONFIG
    custom = {tag.split(":", 1)[1] for mapping in TAG_MAP for tag in mapping.tags if tag.startswith("XMP-contextembed:")}
    for name in custom:
        assert f"{name} =>" in EXIFTOOL_CONFIG


def test_verify_embedded_round_trip(valid_candidate):
    """Test tags read back unchanged verify cleanly."""
    read_back = {tag.replace(":", ""): value for tag, value in map_to_export_tags(valid_candidate).items()}

    assert verify_embedded(read_back, valid_candidate) == []


def test_verify_embedded_reports_mismatches(valid_candidate):
    """Test changed and missing tags are reported per field."""
    read_back = {tag.replace(":", ""): value for tag, value in map_to_export_tags(valid_candidate).items()}
    read_back["XMP-photoshopHeadline"] = "Something else"
    del read_back["XMP-dcSubject"]

    mismatches = verify_embedded(read_back, valid_candidate)

    fields = [m["field"] for m in mismatches]
    assert fields == ["descriptive.headline", "descriptive.keywords"]
    assert mismatches[0]["actual"] == "Something else"


def test_verify_embedded_normalizes_whitespace_and_case(valid_candidate):
    """Test cosmetic differences from the reader are not mismatches."""
    read_back = {tag.replace(":", ""): value for tag, value in map_to_export_tags(valid_candidate).items()}
    read_back["XMP-photoshopHeadline"] = "  BRIDE and groom   share a first dance"
    read_back["XMP-dcSubject"] = list(reversed(read_back["XMP-dcSubject"]))

    assert verify_embedded(read_back, valid_candidate) == []


# --- Case study ---


def test_case_study_row(valid_candidate):
    """Test case study rows are flat strings with joined keywords."""
    row = build_case_study_row(valid_candidate)

    assert row["headline"] == "Bride and groom share a first dance"
    assert row["credit"] == "Photo by Jane Doe"
    assert row["jobId"] == "job-001"
    assert row["city"] == ""
    assert row["keywords"].startswith("wedding photography, bride, groom")
    assert all(isinstance(value, str) for value in row.values())


def test_case_study_row_from_model(valid_candidate):
    """Test a parsed model gives the same row as its mapping."""
    assert build_case_study_row(PerfectMetadata.model_validate(valid_candidate)) == build_case_study_row(valid_candidate)


def test_case_study_row_empty():
    """Test an empty record gives empty strings, never None."""
    row = build_case_study_row({})

    assert set(row.values()) == {""}
