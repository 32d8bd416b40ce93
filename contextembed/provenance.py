"""Per-run provenance tracking for location fields."""

import logging

from contextembed.schemas.perfect_metadata import LOCATION_FIELDS, PROVENANCE_SOURCES

logger = logging.getLogger(__name__)


class ProvenanceError(ValueError):
    """Raised when a provenance tag would break the no-hallucination rule."""


class ProvenanceTracker:
    """Records where each location field of one candidate record came from.

    A tracker belongs to a single synthesis run. Location fields may only be
    tagged ``user`` or ``exif``; tagging one ``ai_inferred`` is a programming
    error and raises immediately.
    """

    def __init__(self):
        self._sources: dict[str, str] = {}

    def tag_field(self, field: str, source: str) -> None:
        if field not in LOCATION_FIELDS:
            raise ProvenanceError(f"Unknown location field: {field}")
        if source not in PROVENANCE_SOURCES:
            raise ProvenanceError(f"Unknown provenance source: {source}")
        if source == "ai_inferred":
            raise ProvenanceError(f"AI may not originate location field '{field}'")

        previous = self._sources.get(field)
        if previous is not None and previous != source:
            logger.debug(f"Provenance for {field} changed from {previous} to {source}")
        self._sources[field] = source

    def get_provenance(self, field: str) -> str | None:
        return self._sources.get(field)

    def populated_fields(self) -> list[str]:
        """Tagged fields in canonical order."""
        return [field for field in LOCATION_FIELDS if field in self._sources]

    def as_map(self) -> dict[str, str]:
        """Provenance map keyed by wire name, ready for the location section."""
        return {field: self._sources[field] for field in self.populated_fields()}
