"""
Tests for the Dispatcher: validation, headers, retries, decoding, stream setup.
"""

import threading

import pytest
import requests
from unittest.mock import MagicMock, call, patch

from openrouter_client import ClientConfig, OpenRouterClient, RetryConfig
from openrouter_client.dispatcher import Dispatcher
from openrouter_client.errors import (
    APIError,
    MalformedResponseError,
    RequestCancelledError,
    TransportError,
    ValidationError,
)
from openrouter_client.events import RequestEvent
from openrouter_client.models import ChatCompletionRequest, ChatCompletionResponse, Message
from openrouter_client.transport import OpenRouterTransport

from fakes import make_response, sent_headers, sent_json, sent_url


@pytest.fixture
def dispatcher(client):
    return client.dispatcher


class TestRetryScenarios:

    @patch('openrouter_client.transport.retry_policy.time.sleep')
    def test_503_503_200(self, mock_sleep, session_manager, session):
        """Two 503s then success: ~1s + 2s of backoff, exactly 3 attempts."""
        config = ClientConfig(api_key="sk-or-test", retry=RetryConfig(max_attempts=3, base_delay=1.0))
        client = OpenRouterClient(config, session_manager=session_manager)
        session.request.side_effect = [
            make_response(503, {"error": {"code": 503, "message": "unavailable"}}),
            make_response(503, {"error": {"code": 503, "message": "unavailable"}}),
            make_response(200, {"id": "x"}),
        ]

        result = client.dispatcher.dispatch("GET", "/thing", response_model=ChatCompletionResponse)

        assert result.id == "x"
        assert session.request.call_count == 3
        assert mock_sleep.call_args_list == [call(1.0), call(2.0)]

    def test_all_attempts_fail(self, dispatcher, session):
        session.request.side_effect = [
            make_response(500, b"first"),
            make_response(502, b"second"),
            make_response(503, {"error": {"code": 503, "message": "last"}}),
        ]

        with pytest.raises(APIError) as exc_info:
            dispatcher.dispatch("GET", "/credits")

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "last"
        assert session.request.call_count == 3

    def test_bad_request_single_attempt(self, dispatcher, session):
        session.request.side_effect = [
            make_response(400, {"error": {"code": 400, "message": "bad", "type": "invalid_request_error"}}),
        ]

        with pytest.raises(APIError) as exc_info:
            dispatcher.dispatch("POST", "/chat/completions", body={"model": "x"})

        assert exc_info.value.error_type == "invalid_request_error"
        assert session.request.call_count == 1

    def test_transport_error_retried(self, dispatcher, session):
        session.request.side_effect = [
            requests.exceptions.ConnectionError("refused"),
            requests.exceptions.ReadTimeout("slow"),
            make_response(200, {"data": {"total_credits": 1}}),
        ]

        result = dispatcher.dispatch("GET", "/credits")

        assert result == {"data": {"total_credits": 1}}
        assert session.request.call_count == 3

    def test_transport_error_exhausted(self, dispatcher, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TransportError) as exc_info:
            dispatcher.dispatch("GET", "/credits")

        assert isinstance(exc_info.value.cause, requests.exceptions.ConnectionError)
        assert session.request.call_count == 3

    def test_garbage_2xx_not_retried(self, dispatcher, session):
        session.request.side_effect = [make_response(200, b"<html>oops</html>")]

        with pytest.raises(MalformedResponseError) as exc_info:
            dispatcher.dispatch("GET", "/models", response_model=ChatCompletionResponse)

        assert exc_info.value.raw_body == "<html>oops</html>"
        assert session.request.call_count == 1

    def test_wrong_shape_2xx_is_malformed(self, dispatcher, session):
        session.request.side_effect = [make_response(200, {"choices": "not-a-list"})]

        with pytest.raises(MalformedResponseError):
            dispatcher.dispatch("POST", "/chat/completions", body={}, response_model=ChatCompletionResponse)

    def test_empty_2xx_body_yields_defaults(self, dispatcher, session):
        session.request.side_effect = [make_response(200, b"")]

        result = dispatcher.dispatch("GET", "/thing", response_model=ChatCompletionResponse)

        assert result.choices == []

    def test_cancel_before_dispatch(self, dispatcher, session):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(RequestCancelledError):
            dispatcher.dispatch("GET", "/credits", cancel=cancel)
        session.request.assert_not_called()


class TestValidation:
    """Precondition failures never reach the network."""

    def test_missing_api_key(self, session_manager, session):
        client = OpenRouterClient(ClientConfig(api_key=""), session_manager=session_manager)

        with pytest.raises(ValidationError) as exc_info:
            client.dispatcher.dispatch("GET", "/credits")

        assert exc_info.value.field == "api_key"
        session.request.assert_not_called()

    @pytest.mark.parametrize("method,path,body,field", [
        ("FETCH", "/credits", None, "method"),
        ("GET", "credits", None, "path"),
        ("GET", "", None, "path"),
        ("POST", "/keys", ["not", "a", "model"], "body"),
    ])
    def test_malformed_inputs(self, dispatcher, session, method, path, body, field):
        with pytest.raises(ValidationError) as exc_info:
            dispatcher.dispatch(method, path, body=body)

        assert exc_info.value.field == field
        session.request.assert_not_called()

    @pytest.mark.parametrize("overrides,field", [
        ({"api_key": "sk-or-…abc"}, "api_key"),
        ({"api_key": "sk-or-abc\r\nX-Injected: 1"}, "api_key"),
        ({"referer": "https://example.com\n"}, "referer"),
        ({"app_name": "Café ☕"}, "app_name"),
        ({"headers": {"X-Bad": "a\nb"}}, "headers[X-Bad]"),
        ({"headers": {"X-über☃": "ok"}}, "headers[X-über☃]"),
    ])
    def test_unsendable_header_config(self, session_manager, session, events, overrides, field):
        config = ClientConfig(**{"api_key": "sk-or-test", **overrides})
        client = OpenRouterClient(config, session_manager=session_manager, on_event=events.append)

        with pytest.raises(ValidationError) as exc_info:
            client.dispatcher.dispatch("GET", "/credits")

        assert exc_info.value.field == field
        assert session.request.call_count == 0
        assert events == []

    def test_unsendable_metadata_value(self, dispatcher, session, events):
        request = ChatCompletionRequest(
            model="openai/gpt-4o",
            messages=[Message(role="user", content="hi")],
            metadata={"trace_id": "abc\r\n123"},
        )

        with pytest.raises(ValidationError) as exc_info:
            dispatcher.dispatch("POST", "/chat/completions", body=request)

        assert exc_info.value.field == "metadata[trace_id]"
        assert session.request.call_count == 0
        assert events == []

    def test_unsendable_header_rejected_before_stream(self, session_manager, session):
        client = OpenRouterClient(ClientConfig(api_key="sk-or-…"), session_manager=session_manager)

        with pytest.raises(ValidationError) as exc_info:
            client.dispatcher.open_stream("/chat/completions", {"model": "x"})

        assert exc_info.value.field == "api_key"
        assert session.request.call_count == 0

    def test_latin1_header_accepted(self, session_manager, session):
        client = OpenRouterClient(
            ClientConfig(api_key="sk-or-test", app_name="Café"),
            session_manager=session_manager
        )
        session.request.side_effect = [make_response(200, b"{}")]

        client.dispatcher.dispatch("GET", "/credits")

        assert sent_headers(session)["X-Title"] == "Café"

    def test_invalid_header_from_requests_not_retried(self, dispatcher, session, events):
        session.request.side_effect = requests.exceptions.InvalidHeader("Invalid leading whitespace")

        with pytest.raises(ValidationError):
            dispatcher.dispatch("GET", "/credits")

        assert session.request.call_count == 1
        assert RequestEvent.RETRY not in [e.event_type for e in events]


class TestRequestBuilding:

    def test_headers(self, dispatcher, session):
        session.request.side_effect = [make_response(200, b"{}")]

        dispatcher.dispatch("GET", "/credits")

        headers = sent_headers(session)
        assert headers["Authorization"] == "Bearer sk-or-test"
        assert headers["Content-Type"] == "application/json"
        assert headers["HTTP-Referer"] == "https://example.com"
        assert headers["X-Title"] == "Test App"
        assert "Accept" not in headers

    def test_url_and_method(self, dispatcher, session):
        session.request.side_effect = [make_response(200, b"{}")]

        dispatcher.dispatch("delete", "/keys/abc")

        assert sent_url(session) == ("DELETE", "https://openrouter.test/api/v1/keys/abc")

    def test_model_body_encoding(self, dispatcher, session):
        session.request.side_effect = [make_response(200, b"{}")]
        request = ChatCompletionRequest(
            model="openai/gpt-4o",
            messages=[Message(role="user", content="hi")],
            temperature=0.2,
            metadata={"trace_id": "abc-123", "count": 3},
        )

        dispatcher.dispatch("POST", "/chat/completions", body=request)

        body = sent_json(session)
        assert body == {
            "model": "openai/gpt-4o",
            "messages": [{"role": "user", "content": "hi"}],
            "temperature": 0.2,
            "stream": False,
        }
        headers = sent_headers(session)
        assert headers["X-trace_id"] == "abc-123"
        assert "X-count" not in headers

    def test_none_params_dropped(self, dispatcher, session):
        session.request.side_effect = [make_response(200, b"{}")]

        dispatcher.dispatch("GET", "/models", params={"category": None})

        assert session.request.call_args.kwargs['params'] is None

    def test_custom_headers_and_timeout(self, session_manager, session):
        config = ClientConfig(api_key="k", timeout=12.5, headers={"X-Custom": "yes"})
        client = OpenRouterClient(config, session_manager=session_manager)
        session.request.side_effect = [make_response(200, b"{}")]

        client.dispatcher.dispatch("GET", "/key")

        kwargs = session.request.call_args.kwargs
        assert kwargs['headers']["X-Custom"] == "yes"
        assert kwargs['timeout'] == 12.5
        assert "HTTP-Referer" not in kwargs['headers']


class TestLifecycleEvents:

    def test_events_for_retry_then_success(self, dispatcher, session, events):
        session.request.side_effect = [make_response(503, b""), make_response(200, b"{}")]

        dispatcher.dispatch("GET", "/credits")

        assert [e.event_type for e in events] == [
            RequestEvent.ATTEMPT,
            RequestEvent.RETRY,
            RequestEvent.ATTEMPT,
            RequestEvent.SUCCEEDED,
        ]
        assert events[-1].attempt == 2
        assert events[-1].status_code == 200

    def test_failed_event(self, dispatcher, session, events):
        session.request.side_effect = [make_response(401, b"")]

        with pytest.raises(APIError):
            dispatcher.dispatch("GET", "/credits")

        assert events[-1].event_type == RequestEvent.FAILED
        assert events[-1].status_code == 401
        assert isinstance(events[-1].error, APIError)


class TestOpenStream:

    def test_single_attempt_even_when_retryable(self, dispatcher, session):
        failed = make_response(503, {"error": {"code": 503, "message": "busy"}})
        session.request.side_effect = [failed, make_response(200, b"")]

        with pytest.raises(APIError) as exc_info:
            dispatcher.open_stream("/chat/completions", {"model": "x", "stream": True})

        assert exc_info.value.message == "busy"
        assert session.request.call_count == 1
        failed.close.assert_called_once()

    def test_stream_headers(self, dispatcher, session):
        session.request.side_effect = [make_response(200, chunks=[])]

        response = dispatcher.open_stream("/chat/completions", {"model": "x"})

        kwargs = session.request.call_args.kwargs
        assert kwargs['stream'] is True
        assert kwargs['headers']["Accept"] == "text/event-stream"
        assert kwargs['headers']["Cache-Control"] == "no-cache"
        response.close.assert_not_called()

    def test_connect_failure_is_transport_error(self, dispatcher, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TransportError):
            dispatcher.open_stream("/chat/completions", {"model": "x"})
        assert session.request.call_count == 1

    def test_validation_before_connect(self, session_manager, session):
        client = OpenRouterClient(ClientConfig(api_key=""), session_manager=session_manager)

        with pytest.raises(ValidationError):
            client.dispatcher.open_stream("/chat/completions", {"model": "x"})
        session.request.assert_not_called()

    def test_cancelled_before_connect(self, dispatcher, session):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(RequestCancelledError):
            dispatcher.open_stream("/chat/completions", {"model": "x"}, cancel=cancel)
        session.request.assert_not_called()


class TestComposition:

    def test_standalone_dispatcher_builds_its_layers(self, config):
        dispatcher = Dispatcher(config)

        assert isinstance(dispatcher.transport, OpenRouterTransport)
        assert dispatcher.retry.max_attempts == 3

    def test_injected_transport_used(self, config):
        transport = MagicMock()
        transport.request.return_value = (200, b'{"ok": true}')
        dispatcher = Dispatcher(config, transport=transport)

        assert dispatcher.dispatch("GET", "/key") == {"ok": True}
        transport.request.assert_called_once_with(
            "GET", "/key", json_body=None, params=None, metadata=None
        )
