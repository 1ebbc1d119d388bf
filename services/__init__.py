"""
Services module - external API integrations
"""
from . import amazon_api_service, ebay_api_service
from .amazon_api_service import MarketplaceError
from .qloo_service import get_taste_profile, TasteProfileError
from .gemini_service import GeminiCompletionClient, CompletionError

# Searched in this order; results are concatenated
MARKETPLACES = {
    "amazon": amazon_api_service.search_products,
    "ebay": ebay_api_service.search_products,
}

__all__ = [
    "MARKETPLACES",
    "MarketplaceError",
    "get_taste_profile",
    "TasteProfileError",
    "GeminiCompletionClient",
    "CompletionError",
]
