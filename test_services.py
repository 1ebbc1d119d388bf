"""
Tests for the external service clients.

HTTP and Gemini calls are mocked; no network access is needed.

Usage:
    pytest test_services.py
"""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from config import settings
from orchestration.types import ProductSummary, Segment
from services import amazon_api_service, ebay_api_service, gemini_service, qloo_service
from services.amazon_api_service import MarketplaceError
from services.gemini_service import CompletionError, GeminiCompletionClient
from services.qloo_service import TasteProfileError


def json_response(payload) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


# ========================
# Amazon
# ========================

class TestAmazon:

    @pytest.mark.parametrize("raw,expected", [
        ("$1,299.99", 1299.99),
        ("19.99", 19.99),
        (12, 12.0),
        ("N/A", None),
        (None, None),
    ])
    def test_parse_price(self, raw, expected):
        assert amazon_api_service.parse_price(raw) == expected

    def test_mock_catalogue_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "RAPIDAPI_KEY", "")

        products = amazon_api_service.search_products("wireless headphones", 0, 30)

        assert [p.price for p in products] == [29.99, 19.99]
        assert products[0].title == "Amazon's Choice: Wireless Headphones - Premium Quality"

    def test_fetch_filters_by_price(self, monkeypatch):
        monkeypatch.setattr(settings, "RAPIDAPI_KEY", "test-key")
        payload = {"data": {"products": [
            {"product_title": "Cheap Mug", "product_price": "$4.99", "product_url": "https://a/1"},
            {"product_title": "Nice Mug", "product_price": "$14.99", "product_url": "https://a/2"},
            {"product_title": "No Price Mug", "product_price": None},
        ]}}

        with patch("services.amazon_api_service.requests.get", return_value=json_response(payload)) as get:
            products = amazon_api_service.fetch_products("mug", min_price=10, max_price=20)

        assert products == [ProductSummary(title="Nice Mug", price=14.99, link="https://a/2")]
        params = get.call_args.kwargs["params"]
        assert params["min_price"] == "10"
        assert params["max_price"] == "20"
        assert get.call_args.kwargs["headers"]["X-RapidAPI-Key"] == "test-key"

    def test_http_error_becomes_marketplace_error(self, monkeypatch):
        monkeypatch.setattr(settings, "RAPIDAPI_KEY", "test-key")

        with patch("services.amazon_api_service.requests.get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(MarketplaceError, match="Amazon search failed"):
                amazon_api_service.fetch_products("mug")

    def test_search_is_cached(self, monkeypatch):
        monkeypatch.setattr(settings, "RAPIDAPI_KEY", "test-key")
        payload = {"data": {"products": [
            {"product_title": "Mug", "product_price": "$9.99", "product_url": "https://a/1"},
        ]}}

        with patch("services.amazon_api_service.requests.get", return_value=json_response(payload)) as get:
            first = amazon_api_service.search_products("mug")
            second = amazon_api_service.search_products("mug")

        assert get.call_count == 1
        assert first == second == [ProductSummary(title="Mug", price=9.99, link="https://a/1")]

    def test_cache_key_includes_price_range(self):
        key = amazon_api_service.cache_key("amazon", "mug", 0, 25)

        assert key.startswith("marketplace:search:amazon:")
        assert key.endswith(":0.00:25.00")
        assert key != amazon_api_service.cache_key("amazon", "mug", 0, 30)


# ========================
# eBay
# ========================

class TestEbay:

    def test_requires_key(self, monkeypatch):
        monkeypatch.setattr(settings, "EBAY_API_KEY", "")

        with pytest.raises(MarketplaceError, match="EBAY_API_KEY"):
            ebay_api_service.fetch_products("mug")

    def test_price_filter_and_parsing(self, monkeypatch):
        monkeypatch.setattr(settings, "EBAY_API_KEY", "token")
        payload = {"itemSummaries": [
            {"title": "Vintage Mug", "price": {"value": "12.50", "currency": "USD"}, "itemWebUrl": "https://e/1"},
            {"title": "Broken listing"},
        ]}

        with patch("services.ebay_api_service.requests.get", return_value=json_response(payload)) as get:
            products = ebay_api_service.fetch_products("mug", min_price=10, max_price=20)

        assert products == [ProductSummary(title="Vintage Mug", price=12.5, link="https://e/1")]
        params = get.call_args.kwargs["params"]
        assert params["filter"] == "price:[10.00..20.00],priceCurrency:USD"
        assert get.call_args.kwargs["headers"]["Authorization"] == "Bearer token"

    def test_upper_bound_only(self, monkeypatch):
        monkeypatch.setattr(settings, "EBAY_API_KEY", "token")

        with patch("services.ebay_api_service.requests.get", return_value=json_response({})) as get:
            assert ebay_api_service.fetch_products("mug", max_price=20) == []

        assert get.call_args.kwargs["params"]["filter"] == "price:[..20.00],priceCurrency:USD"


# ========================
# Qloo
# ========================

class TestQloo:

    def test_requires_key(self, monkeypatch):
        monkeypatch.setattr(settings, "QLOO_API_KEY", "")

        with pytest.raises(TasteProfileError, match="QLOO_API_KEY not set"):
            qloo_service.get_taste_profile("coffee grinder")

    def test_empty_description(self, monkeypatch):
        monkeypatch.setattr(settings, "QLOO_API_KEY", "key")
        assert qloo_service.get_taste_profile("") == []

    def test_segments_are_parsed_and_cached(self, monkeypatch):
        monkeypatch.setattr(settings, "QLOO_API_KEY", "key")
        payload = {"segments": [
            {"name": "Coffee Lovers", "affinity_score": 0.93},
            {"name": "Home Baristas", "affinity_score": 0.8},
            {"affinity_score": 0.1},
        ]}

        with patch("services.qloo_service.requests.post", return_value=json_response(payload)) as post:
            first = qloo_service.get_taste_profile("coffee grinder")
            second = qloo_service.get_taste_profile("coffee grinder")

        assert post.call_count == 1
        assert first == second == [Segment("Coffee Lovers", 0.93), Segment("Home Baristas", 0.8)]
        body = post.call_args.kwargs["json"]
        assert body == {"description": "coffee grinder", "options": {"max_segments": 10}}

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(settings, "QLOO_API_KEY", "key")

        with patch("services.qloo_service.requests.post", side_effect=requests.Timeout("slow")):
            with pytest.raises(TasteProfileError, match="failed to get taste profile"):
                qloo_service.get_taste_profile("coffee grinder")


# ========================
# Gemini
# ========================

def gemini_response(*parts) -> SimpleNamespace:
    content = SimpleNamespace(parts=list(parts))
    return SimpleNamespace(candidates=[SimpleNamespace(content=content)])


def text_part(text):
    return SimpleNamespace(text=text, function_call=None)


def call_part(name, args):
    return SimpleNamespace(text=None, function_call=SimpleNamespace(name=name, args=args))


class TestGemini:

    def test_requires_key(self, monkeypatch):
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

        with pytest.raises(CompletionError, match="GEMINI_API_KEY"):
            GeminiCompletionClient()

    def test_tools_cover_every_capability(self):
        tools = gemini_service.build_gemini_tools()
        names = [fd.name for fd in tools[0].function_declarations]

        assert names == ["search_marketplace", "get_taste_profile", "generate_ad_copy"]

    def test_sanitize_schema_drops_unsupported_fields(self):
        schema = {
            "type": "object",
            "additionalProperties": False,
            "properties": {"query": {"type": "string", "default": "x"}},
        }
        assert gemini_service._sanitize_schema_for_gemini(schema) == {
            "type": "object",
            "properties": {"query": {"type": "string"}},
        }

    def test_complete_returns_text_and_calls(self):
        with patch("services.gemini_service.genai.Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = gemini_response(
                text_part("Let me look that up. "),
                call_part("search_marketplace", {"query": "tents"}),
            )
            client = GeminiCompletionClient(api_key="key", model_name="gemini-test")
            text, calls = client.complete("I'm going camping")

        assert text == "Let me look that up."
        assert len(calls) == 1
        assert calls[0].name == "search_marketplace"
        assert calls[0].arguments == {"query": "tents"}

        kwargs = client_cls.return_value.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"

    def test_no_candidates(self):
        with patch("services.gemini_service.genai.Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = SimpleNamespace(candidates=[])
            client = GeminiCompletionClient(api_key="key")

            with pytest.raises(CompletionError, match="no response choices"):
                client.complete("hi")
