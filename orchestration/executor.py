"""
Capability Executor
Invokes a capability with bounded retries and exponential backoff.

The executor:
1. Runs attempts strictly one after another (never concurrently)
2. Backs off base_delay * 2^attempt between failed attempts
3. Stops immediately when the request context is cancelled or expires
4. Knows nothing about individual capabilities - it just calls invoke()
"""
from typing import Any, Callable

from utils import get_logger
from .context import RequestContext, RequestCancelledError
from .types import CapabilityCall

logger = get_logger(__name__)

MAX_ATTEMPTS = 3
BASE_DELAY_SECONDS = 0.1


class CapabilityExecutionError(Exception):
    """Raised when every attempt of a capability call failed"""

    def __init__(self, name: str, attempts: int, last_error: Exception):
        self.name = name
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"function call {name} failed after {attempts} attempts: {last_error}")


def _default_invoke(call: CapabilityCall) -> Any:
    # Imported lazily so tests can build an executor without the service layer
    from handlers import handle_capability_call
    return handle_capability_call(call)


class CapabilityExecutor:
    """
    Handles the EXECUTION of single capability calls for the orchestrator.

    Key responsibilities:
    - Retry transient capability failures
    - Honour caller cancellation between and during attempts
    - Surface a terminal error naming the capability and attempt count
    """

    def __init__(
        self,
        invoke: Callable[[CapabilityCall], Any] | None = None,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY_SECONDS,
    ):
        self.invoke = invoke or _default_invoke
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    def execute_with_retry(self, ctx: RequestContext, call: CapabilityCall) -> Any:
        """
        Execute a capability call, retrying on failure.

        Returns:
            The capability's result from the first successful attempt

        Raises:
            RequestCancelledError: the context was cancelled or its deadline passed
            CapabilityExecutionError: all attempts failed
        """
        last_error: Exception | None = None

        for attempt in range(self.max_attempts):
            ctx.raise_if_done()

            try:
                result = self.invoke(call)
            except RequestCancelledError:
                raise
            except Exception as e:
                last_error = e
            else:
                if attempt > 0:
                    logger.info(f"Function call {call.name} succeeded on attempt {attempt + 1}")
                return result

            if attempt < self.max_attempts - 1:
                delay = self.base_delay * (2 ** attempt)
                logger.warning(
                    f"Function call {call.name} failed (attempt {attempt + 1}/{self.max_attempts}), "
                    f"retrying in {delay * 1000:.0f}ms: {last_error}"
                )
                ctx.wait(delay)

        logger.error(f"Function call {call.name} failed after {self.max_attempts} attempts: {last_error}")
        raise CapabilityExecutionError(call.name, self.max_attempts, last_error) from last_error
