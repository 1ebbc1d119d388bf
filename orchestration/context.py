"""
Request context - deadline and cooperative cancellation for one orchestration run.
"""
import threading
import time


class RequestCancelledError(Exception):
    """Raised when the caller cancelled the run or its deadline passed"""
    pass


class RequestContext:
    """
    Carries a caller-supplied deadline and a cancellation flag.

    Checked by the retry executor before every attempt and during every
    backoff wait, so a cancelled run stops promptly.
    """

    def __init__(self, timeout: float | None = None, clock=time.monotonic):
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self._cancelled = threading.Event()
        self._reason = ""

    @classmethod
    def with_timeout(cls, timeout: float) -> "RequestContext":
        return cls(timeout=timeout)

    @classmethod
    def background(cls) -> "RequestContext":
        """A context that never expires on its own"""
        return cls()

    def cancel(self, reason: str = "context canceled") -> None:
        self._reason = reason
        self._cancelled.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def done(self) -> bool:
        if self._cancelled.is_set():
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def error(self) -> RequestCancelledError | None:
        if self._cancelled.is_set():
            return RequestCancelledError(self._reason)
        if self.done():
            return RequestCancelledError("context deadline exceeded")
        return None

    def raise_if_done(self) -> None:
        err = self.error()
        if err is not None:
            raise err

    def wait(self, delay: float) -> None:
        """
        Sleep for delay seconds, waking early on cancellation or deadline.
        Raises RequestCancelledError if the context is done when it wakes.
        """
        self.raise_if_done()
        remaining = self.remaining()
        if remaining is not None and remaining <= delay:
            # The deadline arrives first
            if not self._cancelled.wait(remaining):
                raise RequestCancelledError("context deadline exceeded")
        else:
            self._cancelled.wait(delay)
        self.raise_if_done()
