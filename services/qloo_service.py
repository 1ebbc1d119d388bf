"""
Qloo Taste AI Service
Analyzes a product description and returns audience segments with affinity scores.
"""
import hashlib

import requests

from config import settings
from orchestration.types import Segment
from utils import get_logger, get_counter_store, get_or_fetch

logger = get_logger(__name__)

MAX_SEGMENTS = 10


class TasteProfileError(Exception):
    """Raised when the taste profile can't be fetched"""
    pass


def cache_key(description: str) -> str:
    digest = hashlib.md5(description.encode("utf-8")).hexdigest()
    return f"qloo:profile:{digest}"


def fetch_taste_profile(description: str) -> list[Segment]:
    """POST the description to Qloo and parse the returned segments."""
    url = f"{settings.QLOO_BASE_URL}/taste/profile"
    payload = {
        "description": description,
        "options": {"max_segments": MAX_SEGMENTS},
    }
    headers = {
        "Authorization": f"Bearer {settings.QLOO_API_KEY}",
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(url, json=payload, headers=headers, timeout=settings.HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Qloo taste profile failed: {e}")
        raise TasteProfileError(f"failed to get taste profile: {e}") from e
    except ValueError as e:
        raise TasteProfileError(f"failed to parse taste profile response: {e}") from e

    segments = []
    for item in data.get("segments", []):
        if not isinstance(item, dict) or not item.get("name"):
            continue
        segments.append(Segment(
            name=item["name"],
            affinity_score=float(item.get("affinity_score", 0.0)),
        ))

    logger.info(f"Qloo returned {len(segments)} segments")
    return segments


def get_taste_profile(description: str) -> list[Segment]:
    """
    Get audience segments for a product description.
    Results are cached for CACHE_TTL_SECONDS per description.
    """
    if not settings.QLOO_API_KEY:
        raise TasteProfileError("QLOO_API_KEY not set")

    if not description:
        return []

    items = get_or_fetch(
        get_counter_store(),
        cache_key(description),
        settings.CACHE_TTL_SECONDS,
        lambda: [s.to_dict() for s in fetch_taste_profile(description)],
    )
    return [Segment(**item) for item in items]
