"""
Commerce Orchestrator
Main orchestration logic with intent classification:

- SEARCH: Find listings across marketplaces
- MARKETING: Audience segments → ad copy
- COMBINED: Both of the above, each allowed to fail on its own
- UNKNOWN: Hand the message to the LLM and run whatever it suggests

Business failures never escape process_message; they end up in the
response's errors and message. Only caller cancellation is raised.
"""
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any

from config import settings
from utils import get_logger
from .aggregator import extract_segments, normalize_marketing, normalize_search_results
from .classifier import IntentClassifier, get_classifier
from .context import RequestContext, RequestCancelledError
from .executor import CapabilityExecutor, CapabilityExecutionError
from .formatter import (
    format_combined_message,
    format_marketing_message,
    format_search_message,
)
from .types import (
    AdCopyArgs,
    CapabilityCall,
    GENERATE_AD_COPY,
    GET_TASTE_PROFILE,
    Intent,
    IntentKind,
    MarketingCopy,
    OrchestratorResponse,
    SEARCH_MARKETPLACE,
    SearchMarketplaceArgs,
    SearchResultsSummary,
    TasteProfileArgs,
)

logger = get_logger(__name__)

# Used when the taste profile can't be fetched
DEFAULT_SEGMENTS = ["General Consumers", "Value Seekers"]

NO_PRODUCT_MESSAGE = "I couldn't identify what product you're looking for. Please specify a product name."
NO_DESCRIPTION_MESSAGE = (
    "I need a product description to create marketing copy. "
    "Please provide more details about the product."
)
UNKNOWN_APOLOGY = (
    "I'm sorry, I couldn't understand your request. "
    "Please try asking about product searches or marketing copy generation."
)
NOTHING_TO_SAY = (
    "I'm not sure how to help with that. "
    "Try asking me to find products or to write marketing copy for one."
)


class RunState(Enum):
    CLASSIFIED = "classified"
    DISPATCHING = "dispatching"
    AGGREGATING = "aggregating"
    DONE = "done"


class Orchestrator:
    """
    Handles one user message from classification to the final response.

    Holds no per-run state, so a single instance serves concurrent requests.
    """

    def __init__(
        self,
        executor: CapabilityExecutor | None = None,
        classifier: IntentClassifier | None = None,
        completion_client: Any = None,
    ):
        self.executor = executor or CapabilityExecutor()
        self.classifier = classifier or get_classifier()
        self._completion_client = completion_client

    def process_message(self, ctx: RequestContext, message: str) -> OrchestratorResponse:
        """
        Process a user message.

        Raises:
            RequestCancelledError: the context was cancelled or timed out
        """
        ctx.raise_if_done()

        intent = self.classifier.classify(message)
        self._log_state(RunState.CLASSIFIED, intent.kind)
        logger.info(f"Classified message as: {intent.kind.value} (product='{intent.product}')")

        try:
            if intent.kind == IntentKind.SEARCH:
                response = self._handle_search(ctx, intent)
            elif intent.kind == IntentKind.MARKETING:
                response = self._handle_marketing(ctx, intent)
            elif intent.kind == IntentKind.COMBINED:
                response = self._handle_combined(ctx, intent)
            else:
                response = self._handle_unknown(ctx, message)
        except RequestCancelledError:
            logger.warning(f"Request cancelled while handling {intent.kind.value} intent")
            raise
        except Exception as e:
            logger.exception("Orchestrator error")
            response = OrchestratorResponse(
                message="I'm sorry, something went wrong. Please try again or rephrase your request.",
                errors=[str(e)],
            )

        self._log_state(RunState.DONE, intent.kind)
        return response

    def process_message_with_timeout(self, message: str, timeout: float | None = None) -> OrchestratorResponse:
        """Process a message under a fresh deadline (REQUEST_TIMEOUT_SECONDS by default)"""
        if timeout is None:
            timeout = settings.REQUEST_TIMEOUT_SECONDS
        return self.process_message(RequestContext.with_timeout(timeout), message)

    # ========================
    # Intent handlers
    # ========================

    def _handle_search(self, ctx: RequestContext, intent: Intent) -> OrchestratorResponse:
        """Search-only requests"""
        if not intent.product:
            return OrchestratorResponse(
                message=NO_PRODUCT_MESSAGE,
                errors=["No product specified in search request"],
            )

        try:
            summary = self._run_search_step(ctx, intent)
        except CapabilityExecutionError as e:
            return OrchestratorResponse(
                message=f"I encountered an error while searching for {intent.product}: {e}",
                errors=[str(e)],
            )

        self._log_state(RunState.AGGREGATING, intent.kind)
        return OrchestratorResponse(
            message=format_search_message(summary),
            search_results=summary,
        )

    def _handle_marketing(self, ctx: RequestContext, intent: Intent) -> OrchestratorResponse:
        """Marketing-only requests"""
        if not intent.product and not intent.description:
            return OrchestratorResponse(
                message=NO_DESCRIPTION_MESSAGE,
                errors=["No product description provided for marketing"],
            )

        try:
            marketing = self._run_marketing_step(ctx, intent)
        except CapabilityExecutionError as e:
            return OrchestratorResponse(
                message=f"I couldn't generate marketing copy: {e}",
                errors=[str(e)],
            )

        self._log_state(RunState.AGGREGATING, intent.kind)
        return OrchestratorResponse(
            message=format_marketing_message(marketing, intent.product),
            marketing=marketing,
        )

    def _handle_combined(self, ctx: RequestContext, intent: Intent) -> OrchestratorResponse:
        """
        Search and marketing together.

        The two steps run side by side and fail independently; whichever
        succeeds still makes it into the response.
        """
        search_results: SearchResultsSummary | None = None
        marketing: MarketingCopy | None = None
        errors: list[str] = []

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="combined") as pool:
            search_future = None
            marketing_future = None
            if intent.product:
                search_future = pool.submit(self._run_search_step, ctx, intent)
            if intent.description or intent.product:
                marketing_future = pool.submit(self._run_marketing_step, ctx, intent)

            if search_future is not None:
                try:
                    search_results = search_future.result()
                except CapabilityExecutionError as e:
                    errors.append(f"Search failed: {e}")

            if marketing_future is not None:
                try:
                    marketing = marketing_future.result()
                except CapabilityExecutionError as e:
                    errors.append(f"Marketing generation failed: {e}")

        self._log_state(RunState.AGGREGATING, intent.kind)
        return OrchestratorResponse(
            message=format_combined_message(search_results, marketing, intent.product),
            search_results=search_results,
            marketing=marketing,
            errors=errors,
        )

    def _handle_unknown(self, ctx: RequestContext, message: str) -> OrchestratorResponse:
        """Let the LLM answer, then run any capability calls it suggested"""
        try:
            text, calls = self._get_completion_client().complete(message)
        except Exception as e:
            logger.exception("LLM completion error")
            return OrchestratorResponse(message=UNKNOWN_APOLOGY, errors=[str(e)])

        self._log_state(RunState.DISPATCHING, IntentKind.UNKNOWN)

        search_results: SearchResultsSummary | None = None
        marketing: MarketingCopy | None = None
        segments: list[str] = []
        errors: list[str] = []

        for call in calls:
            try:
                result = self.executor.execute_with_retry(ctx, call)
            except CapabilityExecutionError as e:
                errors.append(str(e))
                continue

            if call.name == SEARCH_MARKETPLACE:
                query = call.arguments.get("query")
                search_results = normalize_search_results(result, query if isinstance(query, str) else "")
            elif call.name == GET_TASTE_PROFILE:
                segments = extract_segments(result)
            elif call.name == GENERATE_AD_COPY:
                targeted = call.arguments.get("segments")
                if isinstance(targeted, (list, tuple)) and all(isinstance(s, str) for s in targeted):
                    segments = list(targeted)
                marketing = normalize_marketing(result, segments)

        self._log_state(RunState.AGGREGATING, IntentKind.UNKNOWN)

        if not text:
            if search_results is not None or marketing is not None:
                text = format_combined_message(search_results, marketing)
            else:
                text = NOTHING_TO_SAY

        return OrchestratorResponse(
            message=text,
            search_results=search_results,
            marketing=marketing,
            errors=errors,
        )

    # ========================
    # Steps
    # ========================

    def _run_search_step(self, ctx: RequestContext, intent: Intent) -> SearchResultsSummary:
        self._log_state(RunState.DISPATCHING, intent.kind)
        call = CapabilityCall.of(SearchMarketplaceArgs(
            query=intent.product,
            min_price=intent.min_price,
            max_price=intent.max_price,
        ))
        result = self.executor.execute_with_retry(ctx, call)
        return normalize_search_results(result, intent.product)

    def _run_marketing_step(self, ctx: RequestContext, intent: Intent) -> MarketingCopy:
        """
        Taste profile then ad copy. A failed taste profile falls back to
        DEFAULT_SEGMENTS; a failed ad copy call is raised to the caller.
        """
        self._log_state(RunState.DISPATCHING, intent.kind)
        description = intent.description or intent.product

        try:
            taste = self.executor.execute_with_retry(ctx, CapabilityCall.of(TasteProfileArgs(description=description)))
            segments = extract_segments(taste)
        except CapabilityExecutionError as e:
            logger.warning(f"Taste profile failed, using default segments: {e}")
            segments = list(DEFAULT_SEGMENTS)

        call = CapabilityCall.of(AdCopyArgs(
            product_title=intent.product or description,
            segments=tuple(segments),
        ))
        result = self.executor.execute_with_retry(ctx, call)
        return normalize_marketing(result, segments)

    # ========================
    # Helpers
    # ========================

    def _get_completion_client(self):
        if self._completion_client is None:
            # Imported here so the orchestrator works without Gemini configured
            from services import GeminiCompletionClient
            self._completion_client = GeminiCompletionClient()
        return self._completion_client

    @staticmethod
    def _log_state(state: RunState, kind: IntentKind) -> None:
        logger.debug(f"[{kind.value}] state -> {state.value}")


# Singleton instance
_orchestrator: Orchestrator | None = None


def get_orchestrator() -> Orchestrator:
    """Get or create orchestrator singleton"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator()
    return _orchestrator
