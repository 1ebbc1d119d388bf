"""
Tests for the retrying capability executor and request context.

Usage:
    pytest test_executor.py
"""
import threading
import time

import pytest

from orchestration.context import RequestCancelledError, RequestContext
from orchestration.executor import CapabilityExecutionError, CapabilityExecutor
from orchestration.types import CapabilityCall


class FlakyCapability:
    """Fails the first `failures` calls, then returns `result`."""

    def __init__(self, failures: int, result="ok"):
        self.failures = failures
        self.result = result
        self.calls = 0

    def __call__(self, call: CapabilityCall):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"transient failure {self.calls}")
        return self.result


CALL = CapabilityCall(name="search_marketplace", arguments={"query": "laptops"})


class TestExecuteWithRetry:

    def test_first_attempt_success(self):
        capability = FlakyCapability(failures=0)
        executor = CapabilityExecutor(invoke=capability, base_delay=0.001)

        assert executor.execute_with_retry(RequestContext.background(), CALL) == "ok"
        assert capability.calls == 1

    def test_fail_once_then_succeed(self):
        capability = FlakyCapability(failures=1)
        executor = CapabilityExecutor(invoke=capability, base_delay=0.001)

        assert executor.execute_with_retry(RequestContext.background(), CALL) == "ok"
        assert capability.calls == 2

    def test_always_failing_makes_three_attempts(self):
        capability = FlakyCapability(failures=99)
        executor = CapabilityExecutor(invoke=capability, base_delay=0.001)

        with pytest.raises(CapabilityExecutionError) as exc_info:
            executor.execute_with_retry(RequestContext.background(), CALL)

        assert capability.calls == 3
        err = exc_info.value
        assert err.name == "search_marketplace"
        assert err.attempts == 3
        assert "3" in str(err)
        assert "search_marketplace" in str(err)
        assert "transient failure 3" in str(err)
        assert isinstance(err.__cause__, RuntimeError)

    def test_default_backoff_is_100_then_200_ms(self):
        capability = FlakyCapability(failures=99)
        executor = CapabilityExecutor(invoke=capability)

        start = time.monotonic()
        with pytest.raises(CapabilityExecutionError):
            executor.execute_with_retry(RequestContext.background(), CALL)
        elapsed = time.monotonic() - start

        # 100ms + 200ms, and no wait after the last attempt
        assert 0.29 <= elapsed < 1.0

    def test_precancelled_context_makes_no_attempts(self):
        capability = FlakyCapability(failures=0)
        executor = CapabilityExecutor(invoke=capability)
        ctx = RequestContext.background()
        ctx.cancel()

        with pytest.raises(RequestCancelledError):
            executor.execute_with_retry(ctx, CALL)
        assert capability.calls == 0

    def test_cancel_during_backoff(self):
        capability = FlakyCapability(failures=99)
        executor = CapabilityExecutor(invoke=capability, base_delay=5.0)
        ctx = RequestContext.background()

        timer = threading.Timer(0.05, ctx.cancel)
        timer.start()
        start = time.monotonic()
        try:
            with pytest.raises(RequestCancelledError):
                executor.execute_with_retry(ctx, CALL)
        finally:
            timer.cancel()

        assert capability.calls == 1
        assert time.monotonic() - start < 2.0

    def test_deadline_cuts_backoff_short(self):
        capability = FlakyCapability(failures=99)
        executor = CapabilityExecutor(invoke=capability, base_delay=5.0)
        ctx = RequestContext.with_timeout(0.05)

        with pytest.raises(RequestCancelledError, match="deadline exceeded"):
            executor.execute_with_retry(ctx, CALL)
        assert capability.calls == 1

    def test_cancellation_from_capability_is_not_retried(self):
        calls = []

        def invoke(call):
            calls.append(call)
            raise RequestCancelledError("context canceled")

        executor = CapabilityExecutor(invoke=invoke, base_delay=0.001)
        with pytest.raises(RequestCancelledError):
            executor.execute_with_retry(RequestContext.background(), CALL)
        assert len(calls) == 1


class TestRequestContext:

    def test_background_context_is_never_done(self):
        ctx = RequestContext.background()
        assert not ctx.done()
        assert ctx.remaining() is None
        assert ctx.error() is None

    def test_cancel_sets_reason(self):
        ctx = RequestContext.background()
        ctx.cancel("client went away")

        assert ctx.done()
        assert str(ctx.error()) == "client went away"

    def test_deadline_with_fake_clock(self):
        now = [100.0]
        ctx = RequestContext(timeout=2.0, clock=lambda: now[0])

        assert ctx.remaining() == 2.0
        now[0] = 103.0
        assert ctx.done()
        with pytest.raises(RequestCancelledError, match="deadline exceeded"):
            ctx.raise_if_done()
