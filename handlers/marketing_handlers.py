"""
Marketing handlers
Backs get_taste_profile (Qloo audience segments) and generate_ad_copy.
"""
from handlers.types import CapabilityError
from orchestration.types import AdCopyArgs, AdCopyResult, TasteProfileArgs
from services import get_taste_profile, TasteProfileError
from utils import get_logger

logger = get_logger(__name__)

CALL_TO_ACTION = "Shop Now and Transform Your Experience!"


def handle_get_taste_profile(args: TasteProfileArgs) -> dict:
    """Return the audience segments for a product description"""
    try:
        segments = get_taste_profile(args.description)
    except TasteProfileError as e:
        raise CapabilityError(str(e)) from e

    return {
        "segments": segments,
        "count": len(segments),
    }


def generate_ad_copy_template(product_title: str, segments: list[str]) -> AdCopyResult:
    """Template-based ad copy: three headlines, two descriptions and a call to action"""
    headlines = [
        f"Discover {product_title} - Perfect for {' & '.join(segments)}",
        f"{product_title}: Designed for {segments[0]}",
        f"Get Your {product_title} Today!",
    ]

    descriptions = [
        f"Experience the best {product_title} tailored for {', '.join(segments)}. "
        "Premium quality meets your unique needs.",
        f"Join thousands of satisfied customers who chose {product_title}. "
        f"Perfect for {segments[0]} looking for quality and value.",
    ]

    return AdCopyResult(
        headlines=headlines,
        descriptions=descriptions,
        call_to_action=CALL_TO_ACTION,
    )


def handle_generate_ad_copy(args: AdCopyArgs) -> AdCopyResult:
    """Generate ad copy for a product aimed at the given segments"""
    if not args.segments:
        raise CapabilityError("at least one segment is required")

    logger.info(f"Generating ad copy for '{args.product_title}' targeting {len(args.segments)} segments")
    return generate_ad_copy_template(args.product_title, list(args.segments))
