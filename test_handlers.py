"""
Tests for capability dispatch and the individual handlers.

Usage:
    pytest test_handlers.py
"""
import pytest

import handlers.marketing_handlers as marketing_handlers
import handlers.marketplace_handlers as marketplace_handlers
from handlers import CapabilityError, HANDLERS, handle_capability_call
from orchestration.types import (
    AdCopyArgs,
    AdCopyResult,
    ArgumentError,
    CapabilityCall,
    ProductSummary,
    SearchMarketplaceArgs,
    Segment,
    UnknownArgs,
)
from registry import TOOL_NAMES
from services import MarketplaceError, TasteProfileError


def test_every_registered_tool_has_a_handler():
    assert set(HANDLERS) == TOOL_NAMES


def test_unknown_function():
    with pytest.raises(CapabilityError, match="unknown function: get_weather"):
        handle_capability_call(CapabilityCall(name="get_weather"))


def test_handlers_receive_typed_arguments(monkeypatch):
    received = []
    monkeypatch.setitem(HANDLERS, "search_marketplace", lambda args: received.append(args) or "ok")

    result = handle_capability_call(CapabilityCall(
        name="search_marketplace",
        arguments={"query": "mugs", "min_price": 5},
    ))

    assert result == "ok"
    assert received == [SearchMarketplaceArgs(query="mugs", min_price=5.0, max_price=0.0)]


# (capability name, arguments, expected typed arguments)
PARSE_CASES = [
    ("search_marketplace", {"query": "mugs"}, SearchMarketplaceArgs(query="mugs")),
    ("generate_ad_copy", {"product_title": "Mug", "segments": ["A", "B"]}, AdCopyArgs("Mug", ("A", "B"))),
    ("get_weather", {"city": "Lagos"}, UnknownArgs(raw={"city": "Lagos"})),
]


@pytest.mark.parametrize("name,arguments,expected", PARSE_CASES)
def test_parse_arguments(name, arguments, expected):
    assert CapabilityCall(name=name, arguments=arguments).parse_arguments() == expected


def test_parse_arguments_rejects_bad_types():
    with pytest.raises(ArgumentError, match="missing or invalid description parameter"):
        CapabilityCall(name="get_taste_profile", arguments={"description": 3}).parse_arguments()


# (capability name, arguments, expected error)
INVALID_ARGUMENT_CASES = [
    ("search_marketplace", {}, "missing or invalid query parameter"),
    ("search_marketplace", {"query": 42}, "missing or invalid query parameter"),
    ("get_taste_profile", {}, "missing or invalid description parameter"),
    ("generate_ad_copy", {"segments": ["A"]}, "missing or invalid product_title parameter"),
    ("generate_ad_copy", {"product_title": "Mug"}, "missing or invalid segments parameter"),
    ("generate_ad_copy", {"product_title": "Mug", "segments": ["A", 7]}, "invalid segment type at index 1"),
]


@pytest.mark.parametrize("name,arguments,expected", INVALID_ARGUMENT_CASES)
def test_invalid_arguments(name, arguments, expected):
    with pytest.raises(CapabilityError, match=expected):
        handle_capability_call(CapabilityCall(name=name, arguments=arguments))


class TestSearchMarketplace:

    def fake_marketplace(self, *products, error=None):
        seen = []

        def search(query, min_price, max_price):
            seen.append((query, min_price, max_price))
            if error is not None:
                raise error
            return list(products)

        search.seen = seen
        return search

    def test_results_are_concatenated_in_order(self, monkeypatch):
        first = self.fake_marketplace(ProductSummary("A", 10.0, "a"))
        second = self.fake_marketplace(ProductSummary("B", 20.0, "b"), ProductSummary("C", 30.0, "c"))
        monkeypatch.setattr(marketplace_handlers, "MARKETPLACES", {"first": first, "second": second})

        result = handle_capability_call(CapabilityCall(
            name="search_marketplace",
            arguments={"query": "mugs", "max_price": 50},
        ))

        assert [p.title for p in result["products"]] == ["A", "B", "C"]
        assert result["count"] == 3
        assert first.seen == [("mugs", 0.0, 50.0)]

    def test_one_failing_marketplace_is_skipped(self, monkeypatch):
        monkeypatch.setattr(marketplace_handlers, "MARKETPLACES", {
            "up": self.fake_marketplace(ProductSummary("A", 10.0, "a")),
            "down": self.fake_marketplace(error=MarketplaceError("503")),
        })

        result = handle_capability_call(CapabilityCall(name="search_marketplace", arguments={"query": "mugs"}))
        assert result["count"] == 1

    def test_all_marketplaces_failing(self, monkeypatch):
        monkeypatch.setattr(marketplace_handlers, "MARKETPLACES", {
            "amazon": self.fake_marketplace(error=MarketplaceError("timeout")),
            "ebay": self.fake_marketplace(error=MarketplaceError("503")),
        })

        with pytest.raises(CapabilityError, match="all marketplaces failed"):
            handle_capability_call(CapabilityCall(name="search_marketplace", arguments={"query": "mugs"}))


class TestTasteProfile:

    def test_returns_segments(self, monkeypatch):
        monkeypatch.setattr(marketing_handlers, "get_taste_profile", lambda d: [Segment("Gamers", 0.9)])

        result = handle_capability_call(CapabilityCall(
            name="get_taste_profile",
            arguments={"description": "rgb keyboard"},
        ))
        assert result == {"segments": [Segment("Gamers", 0.9)], "count": 1}

    def test_provider_failure(self, monkeypatch):
        def fail(description):
            raise TasteProfileError("QLOO_API_KEY not set")

        monkeypatch.setattr(marketing_handlers, "get_taste_profile", fail)

        with pytest.raises(CapabilityError, match="QLOO_API_KEY not set"):
            handle_capability_call(CapabilityCall(name="get_taste_profile", arguments={"description": "x"}))


class TestGenerateAdCopy:

    def test_template(self):
        result = handle_capability_call(CapabilityCall(
            name="generate_ad_copy",
            arguments={"product_title": "Desk Lamp", "segments": ["Students", "Remote Workers"]},
        ))

        assert isinstance(result, AdCopyResult)
        assert result.headlines == [
            "Discover Desk Lamp - Perfect for Students & Remote Workers",
            "Desk Lamp: Designed for Students",
            "Get Your Desk Lamp Today!",
        ]
        assert len(result.descriptions) == 2
        assert "Students, Remote Workers" in result.descriptions[0]
        assert result.call_to_action == "Shop Now and Transform Your Experience!"

    def test_requires_a_segment(self):
        with pytest.raises(CapabilityError, match="at least one segment"):
            handle_capability_call(CapabilityCall(
                name="generate_ad_copy",
                arguments={"product_title": "Desk Lamp", "segments": []},
            ))
