"""
Intent Classifier
Determines whether a user message asks for a product SEARCH, MARKETING copy,
or both (COMBINED), and pulls out the product phrase and price range.

Classification is deterministic and free: no LLM call is made here. Only
UNKNOWN messages are handed to the LLM later by the orchestrator.
"""
import re

from utils import get_logger
from .types import Intent, IntentKind

logger = get_logger(__name__)


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# Search patterns - user wants to FIND listings
SEARCH_PATTERNS = _compile(
    r"\b(find|search|show|list|get)\b.*\b(product|item|listing)",
    r"\b(find|search|show)\s+me\b",
    r"\bunder\s+\$?\d+",
    r"\bless\s+than\s+\$?\d+",
    r"\bbetween\s+\$?\d+.*\$?\d+",
)

# Marketing patterns - user wants COPY written
MARKETING_PATTERNS = _compile(
    r"\b(marketing|advertis|ad|campaign|copy|promo)\b",
    r"\b(create|generate|suggest|make).*\b(ad|marketing|copy)\b",
    r"\btarget\s+(audience|segment)",
)

# Combined patterns - explicit "find X and write marketing" phrasing
COMBINED_PATTERNS = _compile(
    r"\b(find|search).*\b(and|then).*\b(marketing|ad|copy)\b",
    r"\b(marketing|ad).*\b(for|about).*\b(find|search)\b",
)

TRIGGER_WORDS = re.compile(
    r"\b(find|search|show|get|for|about|create|generate|marketing|ad|copy)\b",
    re.IGNORECASE,
)
PRICE_TAIL = re.compile(r"\bunder\s+\$?\d+.*", re.IGNORECASE)

UNDER_PRICE = re.compile(r"\b(under|less\s+than)\s+\$?(\d+(?:\.\d{2})?)", re.IGNORECASE)
BETWEEN_PRICE = re.compile(
    r"\bbetween\s+\$?(\d+(?:\.\d{2})?)\s+(?:and|to)\s+\$?(\d+(?:\.\d{2})?)",
    re.IGNORECASE,
)

STOP_WORDS = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "me", "my", "i", "you", "it", "is", "are", "was",
    "were", "be", "been", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might",
})

MAX_PRODUCT_WORDS = 3


def _matches_any(message: str, patterns: tuple[re.Pattern, ...]) -> bool:
    return any(p.search(message) for p in patterns)


def extract_product(message: str) -> str:
    """
    Extract up to three meaningful product words from the message.
    Returns "" when nothing is left after removing trigger and stop words.
    """
    cleaned = TRIGGER_WORDS.sub("", message.lower())
    cleaned = PRICE_TAIL.sub("", cleaned).strip()

    words = [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]
    return " ".join(words[:MAX_PRODUCT_WORDS])


def extract_description(message: str) -> str:
    """Product phrase used as the marketing description, only for marketing-flavoured messages"""
    message_lower = message.lower()
    if "marketing" in message_lower or "ad" in message_lower:
        return extract_product(message)
    return ""


def extract_price_range(message: str) -> tuple[float, float]:
    """
    Extract (min_price, max_price) from the message.

    "under $N" / "less than $N" set only the upper bound, "between $N and $M"
    sets both. (0, 0) means no bound was mentioned.
    """
    min_price, max_price = 0.0, 0.0

    match = UNDER_PRICE.search(message)
    if match:
        max_price = float(match.group(2))

    match = BETWEEN_PRICE.search(message)
    if match:
        min_price = float(match.group(1))
        max_price = float(match.group(2))

    return min_price, max_price


class IntentClassifier:
    """
    Classifies user messages into an Intent.

    Priority: COMBINED > MARKETING > SEARCH > UNKNOWN.
    """

    def classify(self, message: str) -> Intent:
        message_lower = message.lower()

        has_search = _matches_any(message_lower, SEARCH_PATTERNS)
        has_marketing = _matches_any(message_lower, MARKETING_PATTERNS)
        has_combined = _matches_any(message_lower, COMBINED_PATTERNS)

        if has_combined or (has_search and has_marketing):
            kind = IntentKind.COMBINED
        elif has_marketing:
            kind = IntentKind.MARKETING
        elif has_search:
            kind = IntentKind.SEARCH
        else:
            kind = IntentKind.UNKNOWN
            logger.info(f"Unknown intent for: {message[:50]}...")

        min_price, max_price = extract_price_range(message_lower)

        return Intent(
            kind=kind,
            product=extract_product(message_lower),
            description=extract_description(message_lower),
            min_price=min_price,
            max_price=max_price,
        )


# Singleton instance
_classifier: IntentClassifier | None = None


def get_classifier() -> IntentClassifier:
    """Get or create classifier singleton"""
    global _classifier
    if _classifier is None:
        _classifier = IntentClassifier()
    return _classifier
