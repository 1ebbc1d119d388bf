"""
Marketplace search handlers
Backs the search_marketplace capability by fanning out to every marketplace.
"""
from handlers.types import CapabilityError
from orchestration.types import SearchMarketplaceArgs
from services import MARKETPLACES, MarketplaceError
from utils import get_logger

logger = get_logger(__name__)


def handle_search_marketplace(args: SearchMarketplaceArgs) -> dict:
    """
    Search every marketplace and concatenate the results.

    A marketplace that fails is skipped; the call only fails when none of
    them answered.
    """
    logger.info(f"Searching marketplaces for '{args.query}' (min={args.min_price}, max={args.max_price})")

    products = []
    failures = []
    for name, search in MARKETPLACES.items():
        try:
            found = search(args.query, args.min_price, args.max_price)
        except MarketplaceError as e:
            logger.warning(f"{name} search failed: {e}")
            failures.append(f"{name}: {e}")
            continue
        products.extend(found)

    if failures and len(failures) == len(MARKETPLACES):
        raise CapabilityError(f"all marketplaces failed ({'; '.join(failures)})")

    return {
        "products": products,
        "count": len(products),
    }
