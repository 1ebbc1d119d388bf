"""
Amazon API Service
Handles RapidAPI calls to Amazon Data Scraper

Uses the Real-Time Amazon Data API from RapidAPI:
https://rapidapi.com/letscrape-6bRBa3QguO5/api/real-time-amazon-data

Without a RAPIDAPI_KEY the service serves a small mock catalogue so the
search flow still works in development.
"""
import hashlib

import requests

from config import settings
from orchestration.types import ProductSummary
from utils import get_logger, get_counter_store, get_or_fetch

logger = get_logger(__name__)

# RapidAPI configuration
RAPIDAPI_HOST = "real-time-amazon-data.p.rapidapi.com"

MOCK_LISTINGS = [
    ("Amazon's Choice: {query} - Premium Quality", 29.99, "https://amazon.com/dp/B08N5WRWNW"),
    ("Best Seller {query} with Fast Shipping", 19.99, "https://amazon.com/dp/B07XJ8C8F7"),
    ("Highly Rated {query} - Customer's Choice", 39.99, "https://amazon.com/dp/B09KMVNY87"),
]


class MarketplaceError(Exception):
    """Raised when a marketplace search fails"""
    pass


def get_headers() -> dict:
    """Get headers for RapidAPI requests."""
    return {
        "X-RapidAPI-Key": settings.RAPIDAPI_KEY,
        "X-RapidAPI-Host": RAPIDAPI_HOST
    }


def parse_price(raw) -> float | None:
    """Parse prices such as "$1,299.99" or 12.5 into a float."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    if not isinstance(raw, str):
        return None
    try:
        return float(raw.replace("$", "").replace(",", "").strip())
    except ValueError:
        return None


def within_price_range(price: float, min_price: float, max_price: float) -> bool:
    """A bound of 0 means unbounded."""
    return (min_price == 0 or price >= min_price) and (max_price == 0 or price <= max_price)


def cache_key(provider: str, query: str, min_price: float, max_price: float) -> str:
    data = f"{query}:{min_price:.2f}:{max_price:.2f}"
    digest = hashlib.md5(data.encode("utf-8")).hexdigest()
    return f"marketplace:search:{provider}:{digest}:{min_price:.2f}:{max_price:.2f}"


def mock_search(query: str, min_price: float = 0, max_price: float = 0) -> list[ProductSummary]:
    """Deterministic mock listings, filtered by price range."""
    products = [
        ProductSummary(title=title.format(query=query.title()), price=price, link=link)
        for title, price, link in MOCK_LISTINGS
    ]
    return [p for p in products if within_price_range(p.price, min_price, max_price)]


def fetch_products(query: str, min_price: float = 0, max_price: float = 0, page: int = 1) -> list[ProductSummary]:
    """
    Search Amazon through RapidAPI.

    Args:
        query: Product search query
        min_price: Minimum price (0 = unbounded)
        max_price: Maximum price (0 = unbounded)
        page: Page number (1-indexed)

    Returns:
        Products within the price range
    """
    url = f"https://{RAPIDAPI_HOST}/search"

    params = {
        "query": query,
        "page": str(page),
        "country": "US",
    }
    if min_price > 0:
        params["min_price"] = str(int(min_price))
    if max_price > 0:
        params["max_price"] = str(int(max_price))

    try:
        logger.info(f"Searching Amazon for: {query}")
        response = requests.get(url, headers=get_headers(), params=params, timeout=settings.HTTP_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.warning(f"Amazon search failed: {e}")
        raise MarketplaceError(f"Amazon search failed: {e}") from e
    except ValueError as e:
        raise MarketplaceError(f"Amazon returned invalid JSON: {e}") from e

    products = []
    for item in data.get("data", {}).get("products", []):
        price = parse_price(item.get("product_price"))
        if price is None or not within_price_range(price, min_price, max_price):
            continue
        products.append(ProductSummary(
            title=item.get("product_title", "Unknown"),
            price=price,
            link=item.get("product_url", ""),
        ))

    logger.info(f"Got {len(products)} Amazon products for '{query}'")
    return products


def search_products(query: str, min_price: float = 0, max_price: float = 0) -> list[ProductSummary]:
    """
    Search Amazon, serving repeated searches from the cache for CACHE_TTL_SECONDS.
    """
    if settings.RAPIDAPI_KEY:
        fetch = lambda: [p.to_dict() for p in fetch_products(query, min_price, max_price)]
    else:
        logger.info("RAPIDAPI_KEY not configured, using mock Amazon listings")
        fetch = lambda: [p.to_dict() for p in mock_search(query, min_price, max_price)]

    items = get_or_fetch(
        get_counter_store(),
        cache_key("amazon", query, min_price, max_price),
        settings.CACHE_TTL_SECONDS,
        fetch,
    )
    return [ProductSummary(**item) for item in items]
