"""Vision analysis schema and prompts."""

from typing import Literal

from pydantic import ConfigDict, Field

from contextembed.schemas.common import CamelModel


class VisionModel(CamelModel):
    # Vision output is input-only once produced
    model_config = ConfigDict(frozen=True)


class SubjectInfo(VisionModel):
    type: Literal["person", "animal", "object", "building", "vehicle", "nature", "food", "other"]
    description: str = Field(max_length=500)
    prominence: Literal["primary", "secondary", "background"]
    count: int | None = Field(default=None, gt=0)


class SceneInfo(VisionModel):
    type: Literal["indoor", "outdoor", "studio", "mixed", "abstract"]
    setting: str = Field(max_length=200)
    time_of_day: Literal["dawn", "morning", "midday", "afternoon", "evening", "night", "unknown"] | None = None
    weather: str | None = Field(default=None, max_length=100)


class LocationCues(VisionModel):
    """Location hints. Confidence-tagged, never asserted as fact."""

    possible_type: Literal[
        "urban", "rural", "suburban", "natural", "industrial", "commercial", "unknown"
    ] | None = None
    landmarks: list[str] | None = Field(default=None, max_length=10)
    hints: list[str] = Field(default_factory=list, max_length=10)
    confidence: Literal["none", "low", "medium", "high"] = "none"


class TextInfo(VisionModel):
    text: str = Field(max_length=500)
    type: Literal["sign", "label", "overlay", "watermark", "other"]
    language: str | None = Field(default=None, max_length=50)


class VisionAnalysis(VisionModel):
    """Machine-produced description of one image."""

    subjects: list[SubjectInfo] = Field(default_factory=list, max_length=20)
    scene: SceneInfo
    emotions: list[str] = Field(default_factory=list, max_length=10)
    style_cues: list[str] = Field(default_factory=list, max_length=10)
    location_cues: LocationCues = LocationCues()
    notable_objects: list[str] = Field(default_factory=list, max_length=30)
    text_found: list[TextInfo] = Field(default_factory=list, max_length=20)
    quality_issues: list[str] = Field(default_factory=list, max_length=10)
    color_palette: list[str] = Field(default_factory=list, max_length=10)
    composition: str = Field(default="", max_length=200)
    raw_description: str = Field(max_length=2000)


# Bump when changing the prompts below
VISION_PROMPT_VERSION = "1.0.0"

VISION_SYSTEM_PROMPT = """You are an expert image analyst for a metadata embedding system. Analyze the provided image and return a structured JSON response.

Your analysis will be used to generate SEO-optimized metadata (titles, descriptions, keywords) for images.

IMPORTANT RULES:
1. Be descriptive but factual - describe what you see, not what you assume
2. Do NOT identify specific individuals by name unless there's clear text/signage
3. Do NOT guess specific locations. Record only hints with a confidence level
4. Focus on visual elements, composition, style, mood, and searchable attributes
5. Note any text visible in the image
6. Identify potential quality issues (blur, noise, over/underexposure)

Return a JSON object matching this structure exactly."""

VISION_USER_PROMPT = """Analyze this image and return a JSON object with the following structure:

{
  "subjects": [
    {
      "type": "person|animal|object|building|vehicle|nature|food|other",
      "description": "brief description of the subject",
      "prominence": "primary|secondary|background",
      "count": number (optional, for multiple similar subjects)
    }
  ],
  "scene": {
    "type": "indoor|outdoor|studio|mixed|abstract",
    "setting": "description of the setting/environment",
    "timeOfDay": "dawn|morning|midday|afternoon|evening|night|unknown" (optional),
    "weather": "weather conditions if visible" (optional)
  },
  "emotions": ["list of emotional tones conveyed"],
  "styleCues": ["professional", "candid", "artistic", "documentary", etc.],
  "locationCues": {
    "possibleType": "urban|rural|suburban|natural|industrial|commercial|unknown" (optional),
    "landmarks": ["any identifiable landmarks"] (optional),
    "hints": ["any location hints without specific identification"],
    "confidence": "none|low|medium|high"
  },
  "notableObjects": ["list of notable objects visible"],
  "textFound": [
    {
      "text": "exact text found",
      "type": "sign|label|overlay|watermark|other",
      "language": "detected language" (optional)
    }
  ],
  "qualityIssues": ["any quality problems noticed"],
  "colorPalette": ["dominant colors"],
  "composition": "brief description of composition style",
  "rawDescription": "A detailed 2-3 sentence description of the entire image"
}

Respond ONLY with valid JSON, no additional text."""
