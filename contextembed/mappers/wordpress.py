"""WordPress media payloads from synthesized metadata.

Field routing:

    alt-text engine output  > altTextShort / altTextLong  > headline / description

Strategies pick which alt text variant lands in the WordPress alt field and,
for ``hybrid``, put the accessibility text in the media description.
"""

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel

from contextembed.schemas.alt_text import AltTextOutput
from contextembed.schemas.synthesis import SynthesizedMetadata

WordPressAltStrategy = Literal["seo_optimized", "accessibility_focused", "hybrid"]

WORDPRESS_STRATEGIES: tuple[str, ...] = ("seo_optimized", "accessibility_focused", "hybrid")


class WordPressMediaPayload(BaseModel):
    alt_text: str = ""
    alt_text_short: str = ""
    alt_text_accessibility: str = ""
    caption: str = ""
    description: str = ""
    title: str = ""


def resolve_alt_text(payload: WordPressMediaPayload, strategy: str) -> str:
    """Alt text for the WordPress alt field under the given strategy."""
    if strategy == "accessibility_focused":
        return payload.alt_text_accessibility or payload.alt_text_short
    return payload.alt_text_short or payload.alt_text_accessibility


def _payload(
    *,
    alt_short: str,
    alt_long: str,
    caption: str,
    description: str,
    title: str,
    strategy: str,
) -> WordPressMediaPayload:
    payload = WordPressMediaPayload(
        alt_text_short=alt_short,
        alt_text_accessibility=alt_long,
        caption=caption,
        description=alt_long if strategy == "hybrid" else description,
        title=title,
    )
    return payload.model_copy(update={"alt_text": resolve_alt_text(payload, strategy)})


def build_wordpress_payload(
    metadata: SynthesizedMetadata,
    strategy: str = "seo_optimized",
    alt_text: AltTextOutput | None = None,
) -> WordPressMediaPayload:
    """Build a WordPress media payload.

    Args:
        metadata: Synthesized metadata for the image
        strategy: seo_optimized, accessibility_focused or hybrid
        alt_text: Alt-text engine output, preferred over the synthesized alt text

    Returns:
        WordPressMediaPayload with every field a string
    """
    if alt_text is not None:
        return _payload(
            alt_short=alt_text.alt_text_short,
            alt_long=alt_text.alt_text_accessibility,
            caption=alt_text.caption,
            description=alt_text.description,
            title=metadata.headline or "",
            strategy=strategy,
        )

    return _payload(
        alt_short=metadata.alt_text_short or metadata.headline or "",
        alt_long=metadata.alt_text_long or metadata.description or "",
        caption=metadata.description or "",
        description=metadata.description or "",
        title=metadata.headline or "",
        strategy=strategy,
    )


def _text(result: Mapping, key: str) -> str:
    value = result.get(key)
    return value if isinstance(value, str) else ""


def extract_media_payload_from_metadata(result: Mapping, strategy: str = "seo_optimized") -> WordPressMediaPayload:
    """Build a payload from a loosely shaped stored result.

    Stored results may carry the engine output under ``altText`` alongside the
    synthesized ``altTextShort``/``altTextLong``; anything missing or of the
    wrong type is treated as absent.
    """
    headline = _text(result, "headline")
    description = _text(result, "description")

    engine = result.get("altText")
    if isinstance(engine, Mapping):
        alt_short = _text(engine, "alt_text_short")
        alt_long = _text(engine, "alt_text_accessibility")
        caption = _text(engine, "caption")
        long_description = _text(engine, "description")
    else:
        alt_short = alt_long = caption = long_description = ""

    return _payload(
        alt_short=alt_short or _text(result, "altTextShort") or headline,
        alt_long=alt_long or _text(result, "altTextLong") or description,
        caption=caption or description,
        description=long_description or description,
        title=headline,
        strategy=strategy,
    )
