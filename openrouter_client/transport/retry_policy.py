#!/usr/bin/env python3
import random
import threading
import time
from typing import Callable, Optional, TypeVar

from ..config import RetryConfig
from ..errors import APIError, OpenRouterError, RequestCancelledError, is_retryable
from ..events import EventCallback, RequestEvent, emit_event
from ..logger import ClientLogger, get_logger

T = TypeVar('T')

# 2**62 seconds is already far past any sane ceiling
_MAX_EXPONENT = 62


class RetryPolicy:
    """Runs one attempt function under capped exponential backoff.

    The attempt raises a classified OpenRouterError on failure. Errors that are
    not retry-eligible, or the error from the final attempt, propagate to the
    caller unchanged; earlier errors are only logged.

    Backoff waits happen on the caller's ``cancel`` event when one is given, so
    setting it wakes the wait immediately and raises RequestCancelledError.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        logger: Optional[ClientLogger] = None,
        on_event: Optional[EventCallback] = None
    ):
        self.config = config or RetryConfig()
        self.logger = logger or get_logger(__name__)
        self.on_event = on_event

    @property
    def max_attempts(self) -> int:
        return self.config.max_attempts

    def compute_delay(self, attempt: int, retry_after: Optional[int] = None) -> float:
        """Seconds to wait before ``attempt`` (1-indexed; attempt 1 never waits)."""
        if attempt <= 1:
            return 0.0

        exponent = min(attempt - 2, _MAX_EXPONENT)
        delay = min(self.config.base_delay * (2 ** exponent), self.config.max_delay)

        if self.config.jitter:
            spread = delay * self.config.jitter
            delay = delay + random.uniform(-spread, spread)

        if retry_after is not None:
            delay = max(delay, float(retry_after))

        return max(0.0, min(delay, self.config.max_delay))

    def execute(
        self,
        attempt_fn: Callable[[], T],
        cancel: Optional[threading.Event] = None,
        method: Optional[str] = None,
        path: Optional[str] = None
    ) -> T:
        start = time.time()
        last_error: Optional[OpenRouterError] = None

        for attempt in range(1, self.max_attempts + 1):
            if cancel is not None and cancel.is_set():
                raise RequestCancelledError(
                    f"request cancelled before attempt {attempt}"
                ) from last_error

            try:
                result = attempt_fn()

                if attempt > 1:
                    self.logger.debug(
                        f"Request succeeded after {attempt} attempts",
                        method=method,
                        path=path,
                        attempts=attempt
                    )
                return result

            except OpenRouterError as e:
                last_error = e

                if not is_retryable(e):
                    self.logger.debug(
                        "Error not retryable, raising",
                        method=method,
                        path=path,
                        attempt=attempt,
                        error_kind=e.kind.value,
                        error=str(e)
                    )
                    raise

                if attempt >= self.max_attempts:
                    self.logger.warning(
                        f"Retries exhausted after {attempt} attempts",
                        method=method,
                        path=path,
                        attempts=attempt,
                        error_kind=e.kind.value,
                        error=str(e)
                    )
                    raise

                retry_after = e.retry_after if isinstance(e, APIError) else None
                delay = self.compute_delay(attempt + 1, retry_after=retry_after)
                status_code = e.status_code if isinstance(e, APIError) else None

                self.logger.info(
                    f"Attempt {attempt}/{self.max_attempts} failed, retrying in {delay:.1f}s",
                    method=method,
                    path=path,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    status_code=status_code,
                    error_kind=e.kind.value,
                    error=str(e),
                    delay_seconds=delay
                )

                emit_event(
                    self.on_event,
                    RequestEvent.RETRY,
                    self.logger,
                    method=method,
                    path=path,
                    attempt=attempt,
                    status_code=status_code,
                    delay_seconds=delay,
                    elapsed_seconds=time.time() - start,
                    error=e
                )

                self._wait(delay, cancel, e)

        # Unreachable: the loop either returns or raises
        raise last_error

    def _wait(self, delay: float, cancel: Optional[threading.Event], error: OpenRouterError):
        if cancel is None:
            time.sleep(delay)
            return

        if cancel.wait(delay):
            self.logger.debug(
                "Backoff interrupted by cancellation",
                delay_seconds=delay,
                error=str(error)
            )
            raise RequestCancelledError("request cancelled during retry backoff") from error
