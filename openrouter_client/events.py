"""
Request lifecycle events.

Callers that want progress reporting pass ``on_event`` to the client; the
dispatcher, retry policy and streams emit one EventData per lifecycle step.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .logger import ClientLogger


class RequestEvent(str, Enum):
    """Event types for request lifecycle."""
    ATTEMPT = "attempt"              # HTTP attempt started
    RETRY = "retry"                  # Attempt failed, backing off
    SUCCEEDED = "succeeded"          # Response decoded
    FAILED = "failed"                # Permanent failure surfaced to caller
    STREAM_OPENED = "stream_opened"  # Event stream established
    STREAM_CLOSED = "stream_closed"  # Event stream released


@dataclass
class EventData:
    """
    Event payload for request lifecycle events.

    Attributes:
        event_type: Type of event (from RequestEvent enum)
        method: HTTP method of the request
        path: Endpoint path relative to the base URL
        timestamp: Event timestamp (seconds since epoch)
        attempt: 1-indexed attempt number (ATTEMPT/RETRY/FAILED)
        status_code: HTTP status, when one was received
        delay_seconds: Backoff about to be waited (RETRY)
        elapsed_seconds: Time since the operation started
        events_received: Events delivered so far (STREAM_CLOSED)
        error: The error that triggered RETRY/FAILED, or ended a stream
    """
    event_type: RequestEvent
    method: Optional[str] = None
    path: Optional[str] = None
    timestamp: float = 0.0

    attempt: int = 0
    status_code: Optional[int] = None
    delay_seconds: Optional[float] = None
    elapsed_seconds: Optional[float] = None
    events_received: int = 0
    error: Optional[Exception] = None


EventCallback = Callable[[EventData], None]


def emit_event(
    callback: Optional[EventCallback],
    event_type: RequestEvent,
    logger: ClientLogger,
    **kwargs
):
    if not callback:
        return

    event = EventData(
        event_type=event_type,
        timestamp=time.time(),
        **kwargs
    )
    try:
        callback(event)
    except Exception as e:
        logger.error(
            f"Event handler failed for {event_type.value}: {type(e).__name__}: {e}",
            event_type=event_type.value,
            error_type=type(e).__name__,
            error_message=str(e)
        )
