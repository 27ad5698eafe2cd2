"""
Tests for Stream: event delivery, error termination, close and cancel.
"""

import threading
import time
from functools import partial

import pytest
import requests

from openrouter_client.errors import APIError, RequestCancelledError, StreamError, TransportError
from openrouter_client.events import RequestEvent
from openrouter_client.models import StreamEvent
from openrouter_client.streaming import Stream
from openrouter_client.transport import ResponseParser

from fakes import chat_chunk, make_response, sse


def open_stream(chunks, cancel=None, events=None):
    response = make_response(200, chunks=chunks)
    stream = Stream(
        response,
        partial(ResponseParser().parse_stream_event, model=StreamEvent),
        cancel=cancel,
        on_event=events.append if events is not None else None,
        path="/chat/completions",
    )
    return stream, response


def chunked(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


class TestDelivery:

    def test_single_event_then_done(self):
        body = b'data: {"choices":[{"delta":{"content":"Hi"}}]}\n\ndata: [DONE]\n\n'
        stream, response = open_stream([body])

        events = list(stream)

        assert [e.content for e in events] == ["Hi"]
        assert stream.error is None
        assert stream.closed
        response.close.assert_called()

    @pytest.mark.parametrize("size", [1, 3, 7, 64, 4096])
    def test_events_in_order_under_any_chunking(self, size):
        words = [f"tok{i} " for i in range(20)]
        data = sse(*[chat_chunk(w) for w in words])
        stream, _ = open_stream(chunked(data, size))

        received = [e.content for e in stream]

        assert received == words
        assert stream.error is None
        assert stream.events_received == 20

    def test_clean_eof_without_done(self):
        stream, _ = open_stream([sse(chat_chunk("a"), chat_chunk("b"), done=False)])

        assert [e.content for e in stream] == ["a", "b"]
        assert stream.error is None

    def test_final_frame_ended_by_carriage_return(self):
        stream, _ = open_stream([sse(chat_chunk("x"), done=False).replace(b"\n", b"\r")])

        assert [e.content for e in stream] == ["x"]
        assert stream.error is None

    def test_iterating_after_end_stays_exhausted(self):
        stream, _ = open_stream([sse(chat_chunk("a"))])

        list(stream)

        assert list(stream) == []


class TestErrorTermination:

    def test_connection_drop_mid_stream(self):
        def chunks():
            yield sse(chat_chunk("one"), chat_chunk("two"), done=False)
            raise requests.exceptions.ChunkedEncodingError("connection broken")

        stream, _ = open_stream(chunks())

        received = [e.content for e in stream]

        assert received == ["one", "two"]
        assert isinstance(stream.error, TransportError)
        assert isinstance(stream.error.cause, requests.exceptions.ChunkedEncodingError)
        assert stream.error.retryable

    def test_eof_mid_frame(self):
        stream, _ = open_stream([sse(chat_chunk("ok"), done=False) + b'data: {"choices": [{"del'])

        received = [e.content for e in stream]

        assert received == ["ok"]
        assert isinstance(stream.error, StreamError)
        assert "mid-frame" in str(stream.error)

    def test_invalid_json_payload(self):
        stream, _ = open_stream([sse(chat_chunk("ok"), "{not json", chat_chunk("never"))])

        received = [e.content for e in stream]

        assert received == ["ok"]
        assert isinstance(stream.error, StreamError)

    def test_error_payload_mid_stream(self):
        error = {"error": {"code": 502, "message": "provider died", "metadata": {"provider_name": "Acme"}}}
        stream, _ = open_stream([sse(chat_chunk("partial"), error)])

        received = [e.content for e in stream]

        assert received == ["partial"]
        assert isinstance(stream.error, APIError)
        assert stream.error.status_code == 502
        assert stream.error.message == "provider died"

    def test_raise_for_error(self):
        stream, _ = open_stream([b"data: {bad\n\n"])
        list(stream)

        with pytest.raises(StreamError):
            stream.raise_for_error()

    def test_first_error_wins(self):
        stream, _ = open_stream([b"data: {bad\n\n"])
        list(stream)
        first = stream.error

        stream._set_error(TransportError("later"))

        assert stream.error is first


class TestClose:

    def test_close_before_iterating(self):
        stream, response = open_stream([sse(chat_chunk("a"))])

        stream.close()

        assert stream._reader is None
        response.close.assert_called_once()
        assert list(stream) == []
        assert stream.error is None

    def test_close_is_idempotent(self):
        events = []
        stream, response = open_stream([sse(chat_chunk("a"))], events=events)

        stream.close()
        stream.close()

        response.close.assert_called_once()
        closed = [e for e in events if e.event_type == RequestEvent.STREAM_CLOSED]
        assert len(closed) == 1

    def test_close_during_iteration_discards_queued_events(self):
        data = sse(*[chat_chunk(str(i)) for i in range(10)])
        stream, _ = open_stream([data])

        first = next(stream)
        # Give the reader time to queue the rest
        time.sleep(0.1)
        stream.close()

        assert first.content == "0"
        with pytest.raises(StopIteration):
            next(stream)
        assert stream.error is None

    def test_context_manager_closes(self):
        events = []
        stream, response = open_stream([sse(chat_chunk("a"), chat_chunk("b"))], events=events)

        with stream as s:
            next(s)

        assert stream.closed
        response.close.assert_called()
        closed = [e for e in events if e.event_type == RequestEvent.STREAM_CLOSED]
        assert len(closed) == 1
        assert closed[0].events_received == 1


class TestCancel:

    def test_cancel_stops_blocked_stream(self):
        release = threading.Event()
        cancel = threading.Event()

        def chunks():
            yield sse(chat_chunk("first"), done=False)
            release.wait(5)

        stream, response = open_stream(chunks(), cancel=cancel)
        try:
            assert next(stream).content == "first"

            timer = threading.Timer(0.1, cancel.set)
            timer.start()
            started = time.monotonic()

            with pytest.raises(StopIteration):
                next(stream)

            assert time.monotonic() - started < 2
            assert isinstance(stream.error, RequestCancelledError)
            assert stream.closed
            response.close.assert_called()
        finally:
            release.set()

    def test_cancel_already_set(self):
        cancel = threading.Event()
        cancel.set()
        stream, _ = open_stream([sse(chat_chunk("a"))], cancel=cancel)

        assert list(stream) == []
        assert isinstance(stream.error, RequestCancelledError)
