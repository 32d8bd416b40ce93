import argparse
import asyncio
import base64
import json
import logging
from pathlib import Path

from contextembed.config import LOG_LEVEL
from contextembed.pipeline import ImageJob, create_pipeline
from contextembed.schemas.onboarding import EventContext, ExifLocation, OnboardingProfile

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def load_job(args: argparse.Namespace) -> ImageJob:
    """Build an ImageJob from command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        ImageJob ready for the pipeline
    """
    profile = OnboardingProfile.model_validate(json.loads(Path(args.profile).read_text()))
    image_base64 = base64.b64encode(Path(args.image).read_bytes()).decode("ascii")

    exif_location = None
    if args.exif:
        exif_location = ExifLocation.model_validate(json.loads(Path(args.exif).read_text()))

    event_context = None
    if args.event:
        event_context = EventContext.model_validate(json.loads(Path(args.event).read_text()))

    return ImageJob(
        job_id=args.job_id or Path(args.image).stem,
        profile=profile,
        image_base64=image_base64,
        user_comment=args.comment,
        event_context=event_context,
        exif_location=exif_location,
        alt_text_mode=args.mode,
        focus_keyphrase=args.keyphrase,
    )


async def run(args: argparse.Namespace) -> int:
    pipeline = create_pipeline(args.provider)
    result = await pipeline.process_image(load_job(args))

    output = result.candidate if result.candidate is not None else {}
    print(
        json.dumps(
            {
                "success": result.success,
                "failedStage": result.failed_stage,
                "error": result.error.model_dump(by_alias=True) if result.error else None,
                "metadata": output,
                "validation": result.validation.model_dump(by_alias=True) if result.validation else None,
                "aiLocationHints": result.ai_location_hints,
            },
            indent=2,
            default=str,
        )
    )
    return 0 if result.success else 1


def main(argv: list[str] | None = None) -> int:
    """Entry point: synthesize and validate metadata for a single image."""
    parser = argparse.ArgumentParser(prog="contextembed", description=main.__doc__)
    parser.add_argument("image", help="Path to the image file")
    parser.add_argument("profile", help="Path to an onboarding profile JSON file")
    parser.add_argument("--job-id", help="Job identifier (defaults to the image file name)")
    parser.add_argument("--comment", help="User context for this image")
    parser.add_argument("--exif", help="Path to a JSON file with the image's EXIF location")
    parser.add_argument("--event", help="Path to a JSON file with the event context")
    parser.add_argument("--mode", default="seo", choices=["seo", "accessibility", "editorial", "social"])
    parser.add_argument("--keyphrase", help="Focus keyphrase for alt text (max 4 words)")
    parser.add_argument("--provider", help="Override CONTEXTEMBED_PROVIDER")
    args = parser.parse_args(argv)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
