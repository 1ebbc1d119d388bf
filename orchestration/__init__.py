"""
Orchestration Module - Conversational Commerce

This module provides the CLASSIFY → DISPATCH → AGGREGATE workflow:
- IntentClassifier: Categorizes messages as SEARCH/MARKETING/COMBINED/UNKNOWN
- CapabilityExecutor: Calls capabilities with retries and cancellation
- Aggregator/Formatter: Normalizes results and renders the reply
- RateLimiter: Fixed-window admission control for the entry point
"""
from .orchestrator import Orchestrator, RunState, get_orchestrator
from .types import (
    Intent,
    IntentKind,
    CapabilityCall,
    ProductSummary,
    SearchResultsSummary,
    MarketingCopy,
    OrchestratorResponse,
)
from .context import RequestContext, RequestCancelledError
from .classifier import IntentClassifier, extract_price_range, get_classifier
from .executor import CapabilityExecutor, CapabilityExecutionError
from .rate_limiter import RateLimiter, RateLimitDecision, get_rate_limiter

__all__ = [
    # Main orchestrator
    "Orchestrator",
    "RunState",
    "get_orchestrator",
    "OrchestratorResponse",
    # Types
    "Intent",
    "IntentKind",
    "CapabilityCall",
    "ProductSummary",
    "SearchResultsSummary",
    "MarketingCopy",
    # Cancellation
    "RequestContext",
    "RequestCancelledError",
    # Classification
    "IntentClassifier",
    "extract_price_range",
    "get_classifier",
    # Execution
    "CapabilityExecutor",
    "CapabilityExecutionError",
    # Rate limiting
    "RateLimiter",
    "RateLimitDecision",
    "get_rate_limiter",
]
