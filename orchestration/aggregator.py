"""
Result Aggregator
Turns whatever a capability returned into the canonical summaries.

Normalization never fails: an unrecognised payload gives an empty summary
(or the default segment) instead of an error.
"""
from collections.abc import Mapping, Sequence
from typing import Any

from .types import (
    AdCopyResult,
    MarketingCopy,
    ProductSummary,
    SearchResultsSummary,
    Segment,
)

DEFAULT_SEGMENT = "General Consumers"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_product(item: Any) -> ProductSummary | None:
    if isinstance(item, ProductSummary):
        return item
    if isinstance(item, Mapping):
        title = item.get("title")
        price = item.get("price")
        link = item.get("link")
        return ProductSummary(
            title=title if isinstance(title, str) else "",
            price=float(price) if _is_number(price) else 0.0,
            link=link if isinstance(link, str) else "",
        )
    return None


def normalize_search_results(result: Any, query: str) -> SearchResultsSummary:
    """Convert a search_marketplace payload into a SearchResultsSummary"""
    if isinstance(result, Mapping):
        items = result.get("products")
    else:
        items = result

    if not _is_sequence(items):
        return SearchResultsSummary(query=query)

    products = [p for p in (_to_product(item) for item in items) if p is not None]
    return SearchResultsSummary(query=query, products=products)


def extract_segments(result: Any) -> list[str]:
    """
    Pull segment names out of a get_taste_profile payload.
    Always returns at least one segment.
    """
    if isinstance(result, Mapping):
        items = result.get("segments")
    else:
        items = result

    segments: list[str] = []
    if _is_sequence(items):
        for item in items:
            if isinstance(item, str):
                segments.append(item)
            elif isinstance(item, Segment):
                segments.append(item.name)
            elif isinstance(item, Mapping) and isinstance(item.get("name"), str):
                segments.append(item["name"])

    if not segments:
        return [DEFAULT_SEGMENT]
    return segments


def _string_list(value: Any) -> list[str]:
    if not _is_sequence(value):
        return []
    return [v for v in value if isinstance(v, str)]


def normalize_marketing(result: Any, segments: Sequence[str]) -> MarketingCopy:
    """Convert a generate_ad_copy payload into MarketingCopy for the given segments"""
    if isinstance(result, AdCopyResult):
        return MarketingCopy(
            headlines=list(result.headlines),
            descriptions=list(result.descriptions),
            call_to_action=result.call_to_action,
            segments=list(segments),
        )

    if isinstance(result, Mapping):
        cta = result.get("call_to_action")
        return MarketingCopy(
            headlines=_string_list(result.get("headlines")),
            descriptions=_string_list(result.get("descriptions")),
            call_to_action=cta if isinstance(cta, str) else "",
            segments=list(segments),
        )

    return MarketingCopy(segments=list(segments))
