#!/usr/bin/env python3
"""
Request dispatcher.

Turns ``(method, path, body)`` into an authenticated HTTP call, runs it under
the retry policy and decodes the result. Streaming calls share the same
validation and headers but make exactly one attempt, then hand the open
response to a Stream.
"""

import threading
import time
from functools import partial
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union

import requests
from pydantic import BaseModel

from .config import ClientConfig
from .errors import OpenRouterError, RequestCancelledError, ValidationError
from .events import EventCallback, RequestEvent, emit_event
from .logger import ClientLogger, get_logger
from .streaming import Stream
from .transport import OpenRouterTransport, ResponseParser, RetryPolicy, is_success

M = TypeVar('M', bound=BaseModel)

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

Body = Union[BaseModel, Dict[str, Any], None]


class Dispatcher:
    """
    Orchestrates one API operation across the HTTP layers.

    Components:
    - OpenRouterTransport: headers and a single HTTP round trip
    - RetryPolicy: backoff between attempts, cancellation
    - ResponseParser: JSON decoding into response models

    Holds no per-call state, so one Dispatcher serves any number of threads.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[OpenRouterTransport] = None,
        retry: Optional[RetryPolicy] = None,
        parser: Optional[ResponseParser] = None,
        logger: Optional[ClientLogger] = None,
        on_event: Optional[EventCallback] = None
    ):
        self.config = config
        self.logger = logger or get_logger(__name__)
        self.on_event = on_event
        self.transport = transport or OpenRouterTransport(config, logger=self.logger)
        self.retry = retry or RetryPolicy(config.retry, logger=self.logger, on_event=on_event)
        self.parser = parser or ResponseParser(logger=self.logger)

    def _validate(self, method: str, path: str, body: Body) -> str:
        if not self.config.api_key:
            raise ValidationError("api_key", "API key is required")

        method = (method or "").upper()
        if method not in ALLOWED_METHODS:
            raise ValidationError("method", f"unsupported HTTP method {method!r}")

        if not path or not path.startswith("/"):
            raise ValidationError("path", f"path must start with '/', got {path!r}")

        if body is not None and not isinstance(body, (BaseModel, dict)):
            raise ValidationError(
                "body",
                f"request body must be a model or dict, got {type(body).__name__}"
            )

        return method

    def _encode(self, body: Body) -> Tuple[Optional[Dict[str, Any]], Optional[Mapping[str, Any]]]:
        if body is None:
            return None, None
        if isinstance(body, BaseModel):
            payload = body.model_dump(mode="json", exclude_none=True, by_alias=True)
            return payload, getattr(body, 'metadata', None)
        return dict(body), None

    def _prepare(
        self,
        method: str,
        path: str,
        body: Body
    ) -> Tuple[str, Optional[Dict[str, Any]], Optional[Mapping[str, Any]]]:
        """Validate and encode a call; every ValidationError surfaces here, before I/O."""
        method = self._validate(method, path, body)
        json_body, metadata = self._encode(body)
        # Header names and values are checked while building
        self.transport.build_headers(metadata=metadata)
        return method, json_body, metadata

    def dispatch(
        self,
        method: str,
        path: str,
        body: Body = None,
        response_model: Optional[Type[M]] = None,
        params: Optional[Dict[str, Any]] = None,
        cancel: Optional[threading.Event] = None
    ) -> Any:
        """
        Perform one API operation with retries.

        Args:
            method: HTTP method
            path: Endpoint path relative to the base URL (e.g. "/chat/completions")
            body: Request model or dict; None for body-less requests
            response_model: Model to decode a 2xx body into; None returns plain JSON
            params: Query parameters; None values are dropped
            cancel: Event that aborts the call at the next attempt or backoff wait

        Returns:
            Decoded response

        Raises:
            ValidationError: Local precondition failed (no network call made)
            APIError: Non-2xx status after retries, or an undecodable 2xx body
            TransportError: Network failure after retries
            RequestCancelledError: ``cancel`` fired
        """
        try:
            method, json_body, metadata = self._prepare(method, path, body)
        except ValidationError as e:
            self.logger.debug("Request rejected before sending", path=path, field=e.field, reason=e.reason)
            raise

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        start = time.time()
        attempts = 0

        def attempt():
            nonlocal attempts
            attempts += 1
            emit_event(
                self.on_event,
                RequestEvent.ATTEMPT,
                self.logger,
                method=method,
                path=path,
                attempt=attempts,
                elapsed_seconds=time.time() - start
            )
            return self.transport.request(
                method,
                path,
                json_body=json_body,
                params=params or None,
                metadata=metadata
            )

        try:
            status_code, raw = self.retry.execute(attempt, cancel=cancel, method=method, path=path)
            result = self.parser.decode(raw, response_model, status_code=status_code)
        except OpenRouterError as e:
            emit_event(
                self.on_event,
                RequestEvent.FAILED,
                self.logger,
                method=method,
                path=path,
                attempt=attempts,
                status_code=getattr(e, 'status_code', None),
                elapsed_seconds=time.time() - start,
                error=e
            )
            raise

        self.logger.debug(
            "Request succeeded",
            method=method,
            path=path,
            status_code=status_code,
            attempts=attempts,
            elapsed_seconds=time.time() - start
        )
        emit_event(
            self.on_event,
            RequestEvent.SUCCEEDED,
            self.logger,
            method=method,
            path=path,
            attempt=attempts,
            status_code=status_code,
            elapsed_seconds=time.time() - start
        )
        return result

    def open_stream(
        self,
        path: str,
        body: Body,
        cancel: Optional[threading.Event] = None
    ) -> requests.Response:
        """
        Establish an event stream with a single attempt.

        Retrying is never safe once output may have reached the caller, so a
        failed handshake is raised as-is. Returns the open response on 2xx.
        """
        try:
            method, json_body, metadata = self._prepare("POST", path, body)
        except ValidationError as e:
            self.logger.debug("Stream rejected before sending", path=path, field=e.field, reason=e.reason)
            raise

        if cancel is not None and cancel.is_set():
            raise RequestCancelledError("stream cancelled before connecting")

        start = time.time()

        emit_event(self.on_event, RequestEvent.ATTEMPT, self.logger, method=method, path=path, attempt=1)

        try:
            response = self.transport.send(method, path, json_body=json_body, metadata=metadata, stream=True)
            if not is_success(response.status_code):
                raise self.transport.read_error(response)
        except OpenRouterError as e:
            emit_event(
                self.on_event,
                RequestEvent.FAILED,
                self.logger,
                method=method,
                path=path,
                attempt=1,
                status_code=getattr(e, 'status_code', None),
                elapsed_seconds=time.time() - start,
                error=e
            )
            raise

        self.logger.debug("Stream opened", path=path, status_code=response.status_code)
        emit_event(
            self.on_event,
            RequestEvent.STREAM_OPENED,
            self.logger,
            method=method,
            path=path,
            attempt=1,
            status_code=response.status_code,
            elapsed_seconds=time.time() - start
        )
        return response

    def stream(
        self,
        path: str,
        body: Body,
        event_model: Type[M],
        cancel: Optional[threading.Event] = None
    ) -> Stream[M]:
        response = self.open_stream(path, body, cancel=cancel)
        return Stream(
            response,
            partial(self.parser.parse_stream_event, model=event_model),
            cancel=cancel,
            logger=self.logger,
            on_event=self.on_event,
            method="POST",
            path=path
        )
