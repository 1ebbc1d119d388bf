"""
eBay API Service
Searches eBay listings through the Browse API item_summary endpoint.
"""
import requests

from config import settings
from orchestration.types import ProductSummary
from utils import get_logger, get_counter_store, get_or_fetch
from .amazon_api_service import MarketplaceError, cache_key, parse_price

logger = get_logger(__name__)

EBAY_BASE_URL = "https://api.ebay.com/buy/browse/v1"
RESULT_LIMIT = 50


def fetch_products(query: str, min_price: float = 0, max_price: float = 0) -> list[ProductSummary]:
    """Call the Browse API and convert item summaries into products."""
    if not settings.EBAY_API_KEY:
        raise MarketplaceError("EBAY_API_KEY not configured")

    params = {"q": query, "limit": str(RESULT_LIMIT)}
    if min_price > 0:
        upper = f"{max_price:.2f}" if max_price > 0 else ""
        params["filter"] = f"price:[{min_price:.2f}..{upper}],priceCurrency:USD"
    elif max_price > 0:
        params["filter"] = f"price:[..{max_price:.2f}],priceCurrency:USD"

    headers = {
        "Authorization": f"Bearer {settings.EBAY_API_KEY}",
        "Content-Type": "application/json",
    }

    try:
        logger.info(f"Searching eBay for: {query}")
        response = requests.get(
            f"{EBAY_BASE_URL}/item_summary/search",
            headers=headers,
            params=params,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.warning(f"eBay search failed: {e}")
        raise MarketplaceError(f"eBay search failed: {e}") from e
    except ValueError as e:
        raise MarketplaceError(f"eBay returned invalid JSON: {e}") from e

    products = []
    for item in data.get("itemSummaries", []):
        price = parse_price(item.get("price", {}).get("value"))
        if price is None:
            continue
        products.append(ProductSummary(
            title=item.get("title", ""),
            price=price,
            link=item.get("itemWebUrl", ""),
        ))

    logger.info(f"Got {len(products)} eBay products for '{query}'")
    return products


def search_products(query: str, min_price: float = 0, max_price: float = 0) -> list[ProductSummary]:
    """Search eBay with results cached for CACHE_TTL_SECONDS."""
    items = get_or_fetch(
        get_counter_store(),
        cache_key("ebay", query, min_price, max_price),
        settings.CACHE_TTL_SECONDS,
        lambda: [p.to_dict() for p in fetch_products(query, min_price, max_price)],
    )
    return [ProductSummary(**item) for item in items]
