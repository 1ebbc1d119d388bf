"""
Orchestrator data types

Intent, capability calls and their typed arguments, and the summaries that
make up an OrchestratorResponse.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union


class IntentKind(Enum):
    """What the user wants from a message"""
    SEARCH = "search"
    MARKETING = "marketing"
    COMBINED = "combined"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Intent:
    """Result of classifying a user message"""
    kind: IntentKind
    product: str = ""
    description: str = ""
    min_price: float = 0.0
    max_price: float = 0.0      # 0 means unbounded


# ========================
# Capability calls
# ========================

SEARCH_MARKETPLACE = "search_marketplace"
GET_TASTE_PROFILE = "get_taste_profile"
GENERATE_AD_COPY = "generate_ad_copy"


class ArgumentError(ValueError):
    """A required capability argument is missing or has the wrong type"""
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class SearchMarketplaceArgs:
    query: str
    min_price: float = 0.0
    max_price: float = 0.0

    @classmethod
    def from_mapping(cls, args: Mapping[str, Any]) -> "SearchMarketplaceArgs":
        query = args.get("query")
        if not isinstance(query, str):
            raise ArgumentError("missing or invalid query parameter")
        min_price = args.get("min_price")
        max_price = args.get("max_price")
        return cls(
            query=query,
            min_price=float(min_price) if _is_number(min_price) else 0.0,
            max_price=float(max_price) if _is_number(max_price) else 0.0,
        )

    def to_arguments(self) -> dict:
        return {"query": self.query, "min_price": self.min_price, "max_price": self.max_price}


@dataclass(frozen=True)
class TasteProfileArgs:
    description: str

    @classmethod
    def from_mapping(cls, args: Mapping[str, Any]) -> "TasteProfileArgs":
        description = args.get("description")
        if not isinstance(description, str):
            raise ArgumentError("missing or invalid description parameter")
        return cls(description=description)

    def to_arguments(self) -> dict:
        return {"description": self.description}


@dataclass(frozen=True)
class AdCopyArgs:
    product_title: str
    segments: tuple[str, ...]

    @classmethod
    def from_mapping(cls, args: Mapping[str, Any]) -> "AdCopyArgs":
        product_title = args.get("product_title")
        if not isinstance(product_title, str):
            raise ArgumentError("missing or invalid product_title parameter")

        segments = args.get("segments")
        if not isinstance(segments, (list, tuple)):
            raise ArgumentError("missing or invalid segments parameter")
        for i, segment in enumerate(segments):
            if not isinstance(segment, str):
                raise ArgumentError(f"invalid segment type at index {i}")

        return cls(product_title=product_title, segments=tuple(segments))

    def to_arguments(self) -> dict:
        return {"product_title": self.product_title, "segments": list(self.segments)}


@dataclass(frozen=True)
class UnknownArgs:
    """Arguments of a capability this version doesn't know about"""
    raw: Mapping[str, Any] = field(default_factory=dict)

    def to_arguments(self) -> dict:
        return dict(self.raw)


CapabilityArgs = Union[SearchMarketplaceArgs, TasteProfileArgs, AdCopyArgs, UnknownArgs]

_ARGUMENT_TYPES = {
    SEARCH_MARKETPLACE: SearchMarketplaceArgs,
    GET_TASTE_PROFILE: TasteProfileArgs,
    GENERATE_AD_COPY: AdCopyArgs,
}


@dataclass(frozen=True)
class CapabilityCall:
    """A named capability invocation with its arguments"""
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, args: CapabilityArgs, name: str | None = None) -> "CapabilityCall":
        """Build a call from typed arguments"""
        if name is None:
            name = next(n for n, t in _ARGUMENT_TYPES.items() if isinstance(args, t))
        return cls(name=name, arguments=args.to_arguments())

    def parse_arguments(self) -> CapabilityArgs:
        """
        Decode the raw arguments into the typed variant for this capability.
        Raises ArgumentError if a required argument is missing or mistyped.
        """
        args_type = _ARGUMENT_TYPES.get(self.name)
        if args_type is None:
            return UnknownArgs(raw=dict(self.arguments))
        return args_type.from_mapping(self.arguments)


# ========================
# Capability payloads
# ========================

@dataclass(frozen=True)
class Segment:
    """Audience segment with its affinity score from the taste profile"""
    name: str
    affinity_score: float = 0.0

    def to_dict(self) -> dict:
        return {"name": self.name, "affinity_score": self.affinity_score}


@dataclass(frozen=True)
class AdCopyResult:
    headlines: list[str]
    descriptions: list[str]
    call_to_action: str


# ========================
# Normalized results
# ========================

@dataclass(frozen=True)
class ProductSummary:
    """Provider-agnostic product"""
    title: str
    price: float
    link: str

    def to_dict(self) -> dict:
        return {"title": self.title, "price": self.price, "link": self.link}


@dataclass
class SearchResultsSummary:
    query: str
    products: list[ProductSummary] = field(default_factory=list)
    count: int = field(init=False)

    def __post_init__(self):
        self.count = len(self.products)

    def to_dict(self) -> dict:
        return {
            "products": [p.to_dict() for p in self.products],
            "count": self.count,
            "query": self.query,
        }


@dataclass
class MarketingCopy:
    headlines: list[str] = field(default_factory=list)
    descriptions: list[str] = field(default_factory=list)
    call_to_action: str = ""
    segments: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "headlines": list(self.headlines),
            "descriptions": list(self.descriptions),
            "call_to_action": self.call_to_action,
            "target_segments": list(self.segments),
        }


@dataclass
class OrchestratorResponse:
    """The single response produced for one inbound message"""
    message: str
    search_results: SearchResultsSummary | None = None
    marketing: MarketingCopy | None = None
    errors: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.message:
            raise ValueError("OrchestratorResponse.message must not be empty")

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"message": self.message}
        if self.search_results is not None:
            data["search_results"] = self.search_results.to_dict()
        if self.marketing is not None:
            data["marketing"] = self.marketing.to_dict()
        if self.errors:
            data["errors"] = list(self.errors)
        return data
