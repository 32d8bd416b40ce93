"""Complete per-image metadata pipeline."""

import json
import logging
import time
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict

from contextembed.adapters import get_backend
from contextembed.alt_text import AltTextGenerator, create_alt_text_generator
from contextembed.hashing import short_hash
from contextembed.config import LLM_MODEL, VISION_MODEL
from contextembed.record import apply_alt_text, build_candidate
from contextembed.schemas.alt_text import AltTextInput, AltTextMode, AltTextResult
from contextembed.schemas.onboarding import EventContext, ExifLocation, OnboardingProfile
from contextembed.schemas.perfect_metadata import PerfectMetadata, ReleaseStatus
from contextembed.schemas.provider import LLMRequest, ProviderError, VisionRequest
from contextembed.schemas.synthesis import SynthesizedMetadata
from contextembed.schemas.vision import VisionAnalysis
from contextembed.synthesizer import MetadataSynthesizer
from contextembed.validation import ValidationResult, validate
from contextembed.vision import VisionAnalyzer

logger = logging.getLogger(__name__)


class ImageJob(BaseModel):
    """One image plus everything the user confirmed about it."""

    model_config = ConfigDict(protected_namespaces=())

    job_id: str
    profile: OnboardingProfile
    image_base64: str | None = None
    image_url: str | None = None
    detail_level: Literal["low", "high", "auto"] = "high"
    user_comment: str | None = None
    event_context: EventContext | None = None
    exif_location: ExifLocation | None = None
    instructions: str | None = None
    model_release_status: ReleaseStatus = "unknown"
    property_release_status: ReleaseStatus = "unknown"
    alt_text_mode: AltTextMode = "seo"
    focus_keyphrase: str | None = None


class PipelineResult(BaseModel):
    job_id: str
    run_id: str
    success: bool
    failed_stage: str | None = None
    error: ProviderError | None = None
    vision: VisionAnalysis | None = None
    synthesized: SynthesizedMetadata | None = None
    alt_text: AltTextResult | None = None
    candidate: dict | None = None
    ai_location_hints: dict[str, str] = {}
    validation: ValidationResult | None = None
    metadata: PerfectMetadata | None = None


def build_alt_text_input(
    job: ImageJob,
    vision: VisionAnalysis,
    synthesized: SynthesizedMetadata,
    keywords: list[str],
) -> AltTextInput:
    """Alt-text engine input drawn from synthesis, vision and the job."""
    context = job.profile.confirmed_context
    mood = None
    if synthesized.intent is not None:
        mood = synthesized.intent.emotional_tone
    elif vision.emotions:
        mood = vision.emotions[0]

    return AltTextInput(
        headline=synthesized.headline,
        description=synthesized.description,
        keywords=keywords,
        scene_type=vision.scene.setting or vision.scene.type,
        subjects=[subject.description for subject in vision.subjects] or None,
        mood=mood,
        brand_name=context.brand_name,
        industry=context.industry,
        user_comment=job.user_comment,
        focus_keyphrase=job.focus_keyphrase,
    )


class MetadataPipeline:
    """Runs analyze -> synthesize -> assemble -> alt text -> validate for one image at a time."""

    def __init__(self, vision: VisionAnalyzer, synthesizer: MetadataSynthesizer, alt_text: AltTextGenerator):
        self.vision = vision
        self.synthesizer = synthesizer
        self.alt_text = alt_text

    async def process_image(self, job: ImageJob) -> PipelineResult:
        """Process one image through the full pipeline.

        Provider failures stop the run and are reported with the stage that
        failed. The alt-text step cannot fail; at worst it contributes
        fallback output.

        Args:
            job: Image and its confirmed context

        Returns:
            PipelineResult; ``metadata`` is set only when the record validates
        """
        start_time = time.time()
        run_id = uuid.uuid4().hex
        logger.info(f"Processing job {job.job_id} (run {run_id})")

        vision_response = await self.vision.analyze(
            VisionRequest(
                image_base64=job.image_base64,
                image_url=job.image_url,
                detail_level=job.detail_level,
            )
        )
        if not vision_response.success:
            return self._failed(job, run_id, "vision", vision_response.error)
        analysis = vision_response.analysis

        llm_response = await self.synthesizer.synthesize(
            LLMRequest(
                vision_analysis=analysis,
                onboarding_profile=job.profile,
                user_comment=job.user_comment,
                event_context=job.event_context,
            )
        )
        if not llm_response.success:
            return self._failed(job, run_id, "synthesis", llm_response.error, vision=analysis)
        synthesized = llm_response.metadata

        record = build_candidate(
            synthesized,
            job.profile,
            job_id=job.job_id,
            run_id=run_id,
            exif_location=job.exif_location,
            instructions=job.instructions,
            model_release_status=job.model_release_status,
            property_release_status=job.property_release_status,
            prompt_version=self.synthesizer.prompt_version,
        )

        alt_text_input = build_alt_text_input(
            job, analysis, synthesized, record.candidate["descriptive"]["keywords"]
        )
        alt_text = await self.alt_text.generate(alt_text_input, job.alt_text_mode)
        candidate = apply_alt_text(record.candidate, alt_text.output)

        validation = validate(candidate)
        metadata = PerfectMetadata.model_validate(candidate) if validation.valid else None

        result = PipelineResult(
            job_id=job.job_id,
            run_id=run_id,
            success=validation.valid,
            failed_stage=None if validation.valid else "validation",
            vision=analysis,
            synthesized=synthesized,
            alt_text=alt_text,
            candidate=candidate,
            ai_location_hints=record.ai_location_hints,
            validation=validation,
            metadata=metadata,
        )

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(
            json.dumps(
                {
                    "event": "metadata_complete",
                    "jobId": job.job_id,
                    "runId": run_id,
                    "valid": validation.valid,
                    "errors": len(validation.errors),
                    "warnings": len(validation.warnings),
                    "altTextFallback": alt_text.used_fallback,
                    "hash": short_hash(candidate["audit"]["ceVerificationHash"]),
                    "elapsed_ms": elapsed_ms,
                }
            )
        )
        return result

    def _failed(self, job: ImageJob, run_id: str, stage: str, error: ProviderError | None, **fields) -> PipelineResult:
        logger.error(
            json.dumps(
                {
                    "event": "metadata_failed",
                    "jobId": job.job_id,
                    "runId": run_id,
                    "stage": stage,
                    "code": error.code if error else None,
                    "retryable": error.retryable if error else False,
                }
            )
        )
        return PipelineResult(
            job_id=job.job_id,
            run_id=run_id,
            success=False,
            failed_stage=stage,
            error=error,
            **fields,
        )


def create_pipeline(provider: str | None = None) -> MetadataPipeline:
    """Wire a pipeline from environment configuration.

    Raises:
        ValueError: if the selected provider's API key is missing
    """
    return MetadataPipeline(
        vision=VisionAnalyzer(get_backend(provider, VISION_MODEL)),
        synthesizer=MetadataSynthesizer(get_backend(provider, LLM_MODEL)),
        alt_text=create_alt_text_generator(provider),
    )
