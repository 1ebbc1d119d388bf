"""
Rate Limiter for inbound requests
Fixed-window admission control backed by the shared counter store.
"""
import time
from dataclasses import dataclass

from config import settings
from utils import get_logger, get_counter_store, CounterStore, StoreUnavailableError

logger = get_logger(__name__)

RATE_LIMIT_PREFIX = "ratelimit:"


@dataclass(frozen=True)
class RateLimitDecision:
    """Whether a request may proceed, plus what to tell the client"""
    allowed: bool
    limit: int
    remaining: int
    reset_at: int           # epoch seconds when the current window ends
    retry_after: int = 0    # seconds until the window resets (only when denied)

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }

    def rejection_payload(self) -> dict:
        return {
            "error": "Rate limit exceeded",
            "retry_after": self.retry_after,
        }


class RateLimiter:
    """
    Fixed-window rate limiter.

    Each identity gets max_requests per window. Counters live in the counter
    store under ratelimit:<identity>:<window start>. The first increment in a
    window sets the expiry, in the same atomic step as the increment.
    If the store is down requests are let through (fail-open) and reported
    with remaining=0.
    """

    def __init__(
        self,
        store: CounterStore | None = None,
        max_requests: int | None = None,
        window_seconds: int | None = None,
    ):
        self.store = store or get_counter_store()
        self.max_requests = max_requests or settings.RATE_LIMIT_MAX
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS

    def window_start(self, now: float) -> int:
        return int(now // self.window_seconds) * self.window_seconds

    def admit(self, identity: str, now: float | None = None) -> RateLimitDecision:
        """Count this request against identity's current window and decide."""
        if now is None:
            now = time.time()

        window_start = self.window_start(now)
        reset_at = window_start + self.window_seconds
        key = f"{RATE_LIMIT_PREFIX}{identity}:{window_start}"

        try:
            count = self.store.increment(key, ttl=self.window_seconds)
        except StoreUnavailableError as e:
            logger.warning(f"Rate limit store unavailable, allowing request: {e}")
            return RateLimitDecision(
                allowed=True,
                limit=self.max_requests,
                remaining=0,
                reset_at=reset_at,
            )

        remaining = max(0, self.max_requests - count)

        if count > self.max_requests:
            retry_after = self.window_seconds - (int(now) - window_start)
            logger.info(f"Rate limit exceeded for {identity} ({count}/{self.max_requests})")
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=remaining,
                reset_at=reset_at,
                retry_after=retry_after,
            )

        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=remaining,
            reset_at=reset_at,
        )


# Singleton instance
_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get or create rate limiter singleton"""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter
