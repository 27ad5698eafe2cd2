"""
Tests for RetryPolicy: backoff schedule, retry eligibility, cancellation.
"""

import threading
import time

import pytest
from unittest.mock import MagicMock, call, patch

from openrouter_client.config import RetryConfig
from openrouter_client.errors import (
    APIError,
    RequestCancelledError,
    TransportError,
    ValidationError,
)
from openrouter_client.events import RequestEvent
from openrouter_client.transport.retry_policy import RetryPolicy


def failing_then(results):
    """Attempt function returning/raising each item of ``results`` in turn."""
    fn = MagicMock(side_effect=results)
    return fn


class TestComputeDelay:

    def test_exponential_schedule(self):
        policy = RetryPolicy(RetryConfig(max_attempts=6, base_delay=1.0, max_delay=60.0))

        assert policy.compute_delay(1) == 0.0
        assert policy.compute_delay(2) == 1.0
        assert policy.compute_delay(3) == 2.0
        assert policy.compute_delay(4) == 4.0
        assert policy.compute_delay(5) == 8.0

    def test_capped_at_max_delay(self):
        policy = RetryPolicy(RetryConfig(base_delay=1.0, max_delay=30.0))

        assert policy.compute_delay(7) == 30.0
        assert policy.compute_delay(1000) == 30.0

    def test_jitter_stays_within_spread(self):
        policy = RetryPolicy(RetryConfig(base_delay=4.0, max_delay=30.0, jitter=0.25))

        for _ in range(50):
            delay = policy.compute_delay(2)
            assert 3.0 <= delay <= 5.0

    def test_retry_after_extends_delay(self):
        policy = RetryPolicy(RetryConfig(base_delay=1.0, max_delay=30.0))

        assert policy.compute_delay(2, retry_after=5) == 5.0
        assert policy.compute_delay(2, retry_after=120) == 30.0
        assert policy.compute_delay(4, retry_after=1) == 4.0


class TestExecute:

    @patch('openrouter_client.transport.retry_policy.time.sleep')
    def test_success_after_retryable_failures(self, mock_sleep):
        policy = RetryPolicy(RetryConfig(max_attempts=3, base_delay=1.0))
        fn = failing_then([APIError(503), TransportError("reset"), "ok"])

        assert policy.execute(fn) == "ok"
        assert fn.call_count == 3
        assert mock_sleep.call_args_list == [call(1.0), call(2.0)]

    @patch('openrouter_client.transport.retry_policy.time.sleep')
    def test_exhaustion_raises_last_error(self, mock_sleep):
        policy = RetryPolicy(RetryConfig(max_attempts=4, base_delay=1.0))
        errors = [APIError(500, "first"), APIError(502, "second"), APIError(503, "third"), APIError(504, "last")]
        fn = failing_then(errors)

        with pytest.raises(APIError) as exc_info:
            policy.execute(fn)

        assert exc_info.value is errors[-1]
        assert fn.call_count == 4
        assert mock_sleep.call_count == 3

    @patch('openrouter_client.transport.retry_policy.time.sleep')
    def test_non_retryable_raises_after_one_attempt(self, mock_sleep):
        policy = RetryPolicy(RetryConfig(max_attempts=5))
        fn = failing_then([APIError(400, "bad request"), "never"])

        with pytest.raises(APIError) as exc_info:
            policy.execute(fn)

        assert exc_info.value.status_code == 400
        assert fn.call_count == 1
        mock_sleep.assert_not_called()

    def test_validation_error_not_retried(self):
        policy = RetryPolicy(RetryConfig(max_attempts=5))
        fn = failing_then([ValidationError("model", "model is required")])

        with pytest.raises(ValidationError):
            policy.execute(fn)
        assert fn.call_count == 1

    def test_single_attempt_policy(self):
        policy = RetryPolicy(RetryConfig(max_attempts=1))
        fn = failing_then([APIError(503)])

        with pytest.raises(APIError):
            policy.execute(fn)
        assert fn.call_count == 1

    @patch('openrouter_client.transport.retry_policy.time.sleep')
    def test_retry_after_used_for_rate_limit(self, mock_sleep):
        policy = RetryPolicy(RetryConfig(max_attempts=2, base_delay=1.0, max_delay=30.0))
        fn = failing_then([APIError(429, retry_after=6), "ok"])

        assert policy.execute(fn) == "ok"
        mock_sleep.assert_called_once_with(6.0)

    @patch('openrouter_client.transport.retry_policy.time.sleep')
    def test_retry_events_emitted(self, mock_sleep):
        events = []
        policy = RetryPolicy(RetryConfig(max_attempts=3, base_delay=1.0), on_event=events.append)
        fn = failing_then([APIError(503), APIError(503), "ok"])

        policy.execute(fn, method="POST", path="/chat/completions")

        assert [e.event_type for e in events] == [RequestEvent.RETRY, RequestEvent.RETRY]
        assert [e.attempt for e in events] == [1, 2]
        assert [e.delay_seconds for e in events] == [1.0, 2.0]
        assert events[0].status_code == 503
        assert events[0].path == "/chat/completions"

    @patch('openrouter_client.transport.retry_policy.time.sleep')
    def test_failing_event_callback_does_not_break_retry(self, mock_sleep):
        callback = MagicMock(side_effect=RuntimeError("callback bug"))
        policy = RetryPolicy(RetryConfig(max_attempts=2, base_delay=1.0), on_event=callback)

        assert policy.execute(failing_then([APIError(500), "ok"])) == "ok"
        callback.assert_called_once()


class TestCancellation:

    def test_cancel_during_backoff_returns_promptly(self):
        policy = RetryPolicy(RetryConfig(max_attempts=3, base_delay=10.0, max_delay=30.0))
        cancel = threading.Event()
        fn = failing_then([APIError(503), "never"])

        timer = threading.Timer(0.1, cancel.set)
        timer.start()
        start = time.monotonic()
        try:
            with pytest.raises(RequestCancelledError) as exc_info:
                policy.execute(fn, cancel=cancel)
        finally:
            timer.cancel()

        assert time.monotonic() - start < 2.0
        assert fn.call_count == 1
        assert isinstance(exc_info.value.__cause__, APIError)

    def test_cancel_before_first_attempt(self):
        policy = RetryPolicy(RetryConfig(max_attempts=3))
        cancel = threading.Event()
        cancel.set()
        fn = failing_then(["never"])

        with pytest.raises(RequestCancelledError):
            policy.execute(fn, cancel=cancel)
        fn.assert_not_called()

    def test_unset_cancel_waits_full_backoff(self):
        policy = RetryPolicy(RetryConfig(max_attempts=2, base_delay=0.05, max_delay=1.0))
        cancel = threading.Event()
        fn = failing_then([TransportError("reset"), "ok"])

        start = time.monotonic()
        assert policy.execute(fn, cancel=cancel) == "ok"
        assert time.monotonic() - start >= 0.04
