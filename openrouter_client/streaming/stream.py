#!/usr/bin/env python3
"""
Stream handle for Server-Sent Event responses.

A Stream owns the open HTTP response. One daemon reader thread pulls bytes
from it, decodes frames with SSEDecoder, parses each payload into a typed
event and hands events to the consumer through a bounded queue.

Termination:
- ``data: [DONE]``: clean end, ``stream.error`` stays None
- read failure, undecodable frame, error payload: the classified error is
  stored once in ``stream.error`` and iteration ends
- ``close()`` or the caller's cancel event: iteration stops within one poll
  interval, even if events are still queued
"""

import queue
import threading
import time
from typing import Callable, Generic, Iterator, Optional, TypeVar

import requests

from ..errors import (
    OpenRouterError,
    RequestCancelledError,
    StreamError,
    classify_exception,
)
from ..events import EventCallback, RequestEvent, emit_event
from ..logger import ClientLogger, get_logger
from .decoder import SSEDecoder

E = TypeVar('E')

_END = object()


class Stream(Generic[E]):
    """
    Lazy, finite, non-restartable iterator over decoded stream events.

    Usage:
        with client.chat.stream(messages, model="openai/gpt-4o") as stream:
            for event in stream:
                print(event.content, end="")
        if stream.error:
            ...

    A Stream has a single consumer. Iterating one Stream from two threads at
    once is undefined. ``close()`` may be called from any thread, any number of
    times, including before iteration starts.
    """

    # How often a waiting consumer re-checks close/cancel (seconds)
    POLL_INTERVAL = 0.05

    # Decoded events buffered ahead of the consumer
    QUEUE_SIZE = 64

    def __init__(
        self,
        response: requests.Response,
        parse_event: Callable[[str], E],
        cancel: Optional[threading.Event] = None,
        logger: Optional[ClientLogger] = None,
        on_event: Optional[EventCallback] = None,
        method: str = "POST",
        path: Optional[str] = None,
        decoder: Optional[SSEDecoder] = None
    ):
        self._response = response
        self._parse_event = parse_event
        self._cancel = cancel
        self.logger = logger or get_logger(__name__)
        self.on_event = on_event
        self.method = method
        self.path = path
        self._decoder = decoder or SSEDecoder()

        self._queue: "queue.Queue" = queue.Queue(maxsize=self.QUEUE_SIZE)
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self._reader: Optional[threading.Thread] = None
        self._exhausted = False
        self._error: Optional[OpenRouterError] = None
        self._events_received = 0
        self._opened_at = time.time()

    @property
    def error(self) -> Optional[OpenRouterError]:
        """The failure that ended the stream, or None after a clean finish."""
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def events_received(self) -> int:
        return self._events_received

    def raise_for_error(self):
        if self._error is not None:
            raise self._error

    def __iter__(self) -> Iterator[E]:
        return self

    def __next__(self) -> E:
        if self._exhausted or self._closed.is_set():
            self._exhausted = True
            raise StopIteration

        self._start_reader()

        while True:
            if self._closed.is_set():
                self._exhausted = True
                raise StopIteration

            if self._cancel is not None and self._cancel.is_set():
                self._set_error(RequestCancelledError("stream cancelled by caller"))
                self._exhausted = True
                self.close()
                raise StopIteration

            try:
                item = self._queue.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                continue

            if item is _END:
                self._exhausted = True
                self.close()
                raise StopIteration

            self._events_received += 1
            return item

    def close(self):
        """Release the connection. Safe to call repeatedly and from any thread."""
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()

        self._response.close()

        self.logger.debug(
            "Stream closed",
            path=self.path,
            events_received=self._events_received,
            error=str(self._error) if self._error else None
        )

        emit_event(
            self.on_event,
            RequestEvent.STREAM_CLOSED,
            self.logger,
            method=self.method,
            path=self.path,
            events_received=self._events_received,
            elapsed_seconds=time.time() - self._opened_at,
            error=self._error
        )

    def __enter__(self) -> 'Stream[E]':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _start_reader(self):
        with self._lock:
            if self._reader is not None:
                return
            self._reader = threading.Thread(
                target=self._read_loop,
                name=f"openrouter-stream-{id(self):x}",
                daemon=True
            )
            self._reader.start()

    def _set_error(self, error: OpenRouterError):
        with self._lock:
            if self._error is not None:
                return
            self._error = error

    def _publish(self, item) -> bool:
        while not self._closed.is_set():
            try:
                self._queue.put(item, timeout=self.POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _read_loop(self):
        try:
            for chunk in self._response.iter_content(chunk_size=None):
                if self._closed.is_set():
                    return
                if not chunk:
                    continue

                for frame in self._decoder.feed(chunk):
                    if frame.is_done:
                        self.logger.debug("Stream finished", path=self.path)
                        return
                    event = self._parse_event(frame.data)
                    if not self._publish(event):
                        return

            if self._closed.is_set():
                return
            # Raises StreamError if the connection ended inside a frame
            for frame in self._decoder.finish():
                if frame.is_done:
                    self.logger.debug("Stream finished", path=self.path)
                    return
                if not self._publish(self._parse_event(frame.data)):
                    return
            self.logger.debug("Stream ended without [DONE]", path=self.path)

        except OpenRouterError as e:
            self._record_failure(e)

        except (requests.exceptions.RequestException, OSError) as e:
            if self._closed.is_set():
                self.logger.debug("Read interrupted by close", path=self.path, error=str(e))
            else:
                self._record_failure(classify_exception(e))

        except Exception as e:
            # urllib3 raises assorted errors when the socket is closed under it
            if self._closed.is_set():
                self.logger.debug("Read interrupted by close", path=self.path, error=str(e))
            else:
                self._record_failure(StreamError("unexpected failure reading stream", cause=e))

        finally:
            self._publish(_END)
            if not self._closed.is_set():
                self._response.close()

    def _record_failure(self, error: OpenRouterError):
        self.logger.warning(
            "Stream failed",
            path=self.path,
            error_kind=error.kind.value,
            error=str(error),
            events_received=self._events_received
        )
        self._set_error(error)
