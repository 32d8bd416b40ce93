"""Alt-text engine schema, prompt builder and deterministic fallback."""

import enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contextembed.schemas.common import CamelModel, collapse_whitespace

AltTextMode = Literal["seo", "accessibility", "editorial", "social"]

ALT_TEXT_MODES: tuple[str, ...] = ("seo", "accessibility", "editorial", "social")

MAX_KEYPHRASE_WORDS = 4

# (min, max) characters per output field
BOUNDS = {
    "alt_text_short": (30, 140),
    "alt_text_accessibility": (60, 240),
    "caption": (20, 200),
    "description": (80, 900),
    "focus_keyphrase": (2, 60),
}


class AltTextInput(CamelModel):
    """What the generator knows about one image, taken from synthesis and vision output."""

    headline: str = ""
    description: str = ""
    keywords: list[str] = []
    scene_type: str | None = None
    subjects: list[str] | None = None
    mood: str | None = None
    brand_name: str | None = None
    industry: str | None = None
    user_comment: str | None = None
    focus_keyphrase: str | None = None


class AltTextOutput(BaseModel):
    """One generated set of alt text variants. Replaced, never edited, on retry."""

    model_config = ConfigDict(frozen=True)

    alt_text_short: str = Field(min_length=30, max_length=140)
    alt_text_accessibility: str = Field(min_length=60, max_length=240)
    caption: str = Field(min_length=20, max_length=200)
    description: str = Field(min_length=80, max_length=900)
    focus_keyphrase: str = Field(min_length=2, max_length=60)
    safety_notes: str | None = Field(default=None, max_length=500)

    @field_validator("focus_keyphrase")
    @classmethod
    def check_keyphrase(cls, value: str) -> str:
        if len(value.split()) > MAX_KEYPHRASE_WORDS:
            raise ValueError(f"Focus keyphrase must be {MAX_KEYPHRASE_WORDS} words or fewer")
        return value


class AltTextStage(str, enum.Enum):
    FIRST_ATTEMPT = "first_attempt"
    RETRY = "retry"
    FALLBACK = "fallback"


class AttemptOutcome(BaseModel):
    """Result of one generation call. Exactly one of output or error is set."""

    stage: AltTextStage
    output: AltTextOutput | None = None
    error: str | None = None
    tokens: int = 0

    @property
    def succeeded(self) -> bool:
        return self.output is not None


class AltTextResult(CamelModel):
    success: bool
    output: AltTextOutput
    mode: AltTextMode
    used_fallback: bool
    error: str | None = None
    stage: AltTextStage
    attempts: list[AttemptOutcome] = []
    duration_ms: int = 0
    tokens_used: int = 0


# Bump when changing the prompts below
ALT_TEXT_PROMPT_VERSION = "1.0.0"

MODE_DIRECTIVES = {
    "seo": """STYLE: SEO-OPTIMISED
- Lead with the focus keyphrase naturally
- Front-load important keywords in alt_text_short
- Use action verbs and concrete nouns
- Avoid generic filler ("beautiful", "amazing")
- alt_text_short should read like a search engine image snippet""",
    "accessibility": """STYLE: ACCESSIBILITY / WCAG 2.1
- Describe what a sighted person would see, in reading order
- Include spatial relationships ("left", "foreground")
- Mention text visible in the image
- Do NOT start with "Image of" or "Photo of"
- alt_text_accessibility should let a blind user form a mental picture""",
    "editorial": """STYLE: EDITORIAL / BRAND VOICE
- Write in a storytelling voice that matches the brand
- Weave emotional tone and narrative context
- Caption should work as a standalone social caption
- description should read like a magazine sidebar""",
    "social": """STYLE: SOCIAL MEDIA
- Conversational, scroll-stopping tone
- Caption should work as an Instagram or LinkedIn caption
- Include a subtle call-to-action vibe
- Keep alt_text_short punchy and shareable""",
}

SYSTEM_PROMPT = """You are an alt text engine for image metadata.
Your ONLY job is to return a single JSON object with EXACTLY these keys:

  alt_text_short         (string, 30-140 chars)
  alt_text_accessibility (string, 60-240 chars)
  caption                (string, 20-200 chars)
  description            (string, 80-900 chars)
  focus_keyphrase        (string, max 4 words)
  safety_notes           (string or null)

## HARD RULES
1. Output MUST be a single valid JSON object: no markdown, no backticks, no explanation.
2. Every string length constraint is absolute. Violating it is a schema error.
3. focus_keyphrase MUST be 4 words or fewer.
4. Do NOT start alt text with "Image of", "Photo of", or "Picture of".
5. alt_text_short must be a COMPLETE sentence, never truncated.
6. If people are identifiable, set safety_notes to describe the concern.
7. No invented details. Only describe what the image analysis reports.
8. Never name a place that the image analysis or user context does not name.

## {directive}
"""

RETRY_ADDENDUM = (
    "\n\nPREVIOUS ATTEMPT FAILED VALIDATION. Ensure every string respects the exact char limits. "
    "alt_text_short: 30-140 chars. alt_text_accessibility: 60-240 chars. "
    "caption: 20-200 chars. description: 80-900 chars. focus_keyphrase: max 4 words."
)


def build_alt_text_prompt(input: AltTextInput, mode: str, *, is_retry: bool = False) -> tuple[str, str]:
    """Build the (system, user) prompt pair for one generation call."""
    system = SYSTEM_PROMPT.format(directive=MODE_DIRECTIVES[mode])
    if is_retry:
        system += RETRY_ADDENDUM

    parts = [
        "## IMAGE ANALYSIS",
        f"Headline: {input.headline}",
        f"Description: {input.description}",
        f"Keywords: {', '.join(input.keywords)}",
    ]
    if input.scene_type:
        parts.append(f"Scene: {input.scene_type}")
    if input.subjects:
        parts.append(f"Subjects: {', '.join(input.subjects)}")
    if input.mood:
        parts.append(f"Mood: {input.mood}")

    if input.brand_name or input.industry:
        parts += ["", "## BRAND CONTEXT"]
        if input.brand_name:
            parts.append(f"Brand: {input.brand_name}")
        if input.industry:
            parts.append(f"Industry: {input.industry}")

    if input.user_comment:
        parts += ["", "## USER CONTEXT (highest priority)", input.user_comment]

    if input.focus_keyphrase:
        parts += [
            "",
            f'## REQUESTED FOCUS KEYPHRASE: "{input.focus_keyphrase}"',
            "Incorporate this keyphrase naturally into alt_text_short and description.",
        ]

    parts += ["", "Respond with the JSON object now."]
    return system, "\n".join(parts)


# --- Fallback ---

_FILLER = (
    "Photograph supplied without further detail. "
    "This text stands in until a full description can be generated."
)


def _fit(parts: list[str], min_length: int, max_length: int) -> str:
    """Join parts until min_length is reached, then cut back to max_length at a word boundary."""
    text = ""
    for part in parts:
        part = collapse_whitespace(part or "")
        if not part:
            continue
        text = f"{text} {part}" if text else part
        if len(text) >= min_length:
            break

    if len(text) > max_length:
        cut = text[:max_length]
        if text[max_length] != " " and " " in cut:
            boundary = cut.rsplit(" ", 1)[0]
            if len(boundary) >= min_length:
                cut = boundary
        text = cut.rstrip(" ,;:-")

    # Only reachable for inputs shorter than the filler
    return text.ljust(min_length, ".")


def _keyphrase(input: AltTextInput) -> str:
    source = input.focus_keyphrase or " ".join(input.keywords[:3])
    words = collapse_whitespace(source).split()[:MAX_KEYPHRASE_WORDS]
    phrase = ""
    for word in words:
        candidate = f"{phrase} {word}" if phrase else word
        if len(candidate) > BOUNDS["focus_keyphrase"][1]:
            break
        phrase = candidate
    if not phrase and words:
        phrase = words[0][: BOUNDS["focus_keyphrase"][1]]
    if len(phrase) < BOUNDS["focus_keyphrase"][0]:
        return "image"
    return phrase


def build_fallback_output(input: AltTextInput) -> AltTextOutput:
    """Schema-valid output built from the input alone, with no model call.

    Uses the headline and description verbatim where they fit, so the
    result is plain but never empty and never invented.
    """
    keywords = [collapse_whitespace(k) for k in input.keywords if collapse_whitespace(k)]
    keyword_sentence = f"Keywords: {', '.join(keywords)}." if keywords else ""
    headline = input.headline
    description = input.description

    def fit(field: str, *parts: str) -> str:
        low, high = BOUNDS[field]
        return _fit([*parts, keyword_sentence, _FILLER], low, high)

    return AltTextOutput(
        alt_text_short=fit("alt_text_short", headline),
        alt_text_accessibility=fit("alt_text_accessibility", description, headline),
        caption=fit("caption", headline),
        description=fit("description", description, headline),
        focus_keyphrase=_keyphrase(input),
    )
