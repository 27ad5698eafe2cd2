#!/usr/bin/env python3
import time
from typing import Any, Dict, Mapping, Optional, Tuple

import requests

from ..config import ClientConfig
from ..errors import ValidationError, classify_exception, classify_response
from ..logger import ClientLogger, get_logger
from .http_session import ThreadLocalSessionManager


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def check_header(field: str, text: str) -> str:
    """Reject header text that http.client would refuse or split."""
    if "\r" in text or "\n" in text:
        raise ValidationError(field, "header value must not contain CR or LF")
    try:
        text.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ValidationError(
            field,
            f"header value is not latin-1 encodable (character {e.object[e.start]!r} at position {e.start})"
        ) from e
    return text


class OpenRouterTransport:
    """Sends one HTTP round trip to the OpenRouter API.

    No retries happen here: ``request`` makes exactly one attempt and raises a
    classified error (APIError for non-2xx, TransportError for network
    failures). RetryPolicy decides whether to call it again.
    """

    def __init__(
        self,
        config: ClientConfig,
        session_manager: Optional[ThreadLocalSessionManager] = None,
        logger: Optional[ClientLogger] = None
    ):
        self.config = config
        self.session_manager = session_manager or ThreadLocalSessionManager()
        self.logger = logger or get_logger(__name__)

    def url_for(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def build_headers(
        self,
        metadata: Optional[Mapping[str, Any]] = None,
        stream: bool = False
    ) -> Dict[str, str]:
        """Assemble request headers.

        Raises ValidationError, naming the offending config or metadata field,
        for any name or value the HTTP stack would reject locally.
        """
        headers = {
            "Authorization": f"Bearer {check_header('api_key', self.config.api_key)}",
            "Content-Type": "application/json",
        }

        if self.config.referer:
            headers["HTTP-Referer"] = check_header("referer", self.config.referer)
        if self.config.app_name:
            headers["X-Title"] = check_header("app_name", self.config.app_name)

        for name, value in self.config.headers.items():
            field = f"headers[{name}]"
            headers[check_header(field, name)] = check_header(field, value)

        # Request metadata travels as X-<key> headers; non-string values are skipped
        for key, value in (metadata or {}).items():
            if isinstance(value, str):
                field = f"metadata[{key}]"
                headers[f"X-{check_header(field, key)}"] = check_header(field, value)

        if stream:
            headers["Accept"] = "text/event-stream"
            headers["Cache-Control"] = "no-cache"

        return headers

    def send(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
        stream: bool = False
    ) -> requests.Response:
        """Issue the request and return the raw response, whatever its status."""
        session = self.session_manager.get_session()
        headers = self.build_headers(metadata=metadata, stream=stream)

        self.logger.debug(
            "OpenRouter API request",
            method=method,
            path=path,
            stream=stream,
            has_body=json_body is not None,
            timeout=self.config.timeout
        )

        start = time.time()
        try:
            response = session.request(
                method,
                self.url_for(path),
                headers=headers,
                json=json_body,
                params=params,
                stream=stream,
                timeout=self.config.timeout
            )
        except (requests.exceptions.RequestException, OSError) as e:
            error = classify_exception(e)
            self.logger.debug(
                "OpenRouter API request failed before a response",
                method=method,
                path=path,
                error_kind=error.kind.value,
                error=str(e),
                elapsed_seconds=time.time() - start
            )
            raise error from e

        self.logger.debug(
            "OpenRouter API response",
            method=method,
            path=path,
            status_code=response.status_code,
            ok=is_success(response.status_code),
            elapsed_seconds=time.time() - start
        )
        return response

    def read_error(self, response: requests.Response):
        """Read and close a non-2xx response, returning the classified APIError."""
        try:
            body = response.content
        except (requests.exceptions.RequestException, OSError) as e:
            raise classify_exception(e) from e
        finally:
            response.close()
        return classify_response(response.status_code, body, response.headers)

    def request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        metadata: Optional[Mapping[str, Any]] = None
    ) -> Tuple[int, bytes]:
        """One buffered attempt: send, read the full body, classify the status."""
        response = self.send(method, path, json_body=json_body, params=params, metadata=metadata)

        if not is_success(response.status_code):
            raise self.read_error(response)

        try:
            body = response.content
        except (requests.exceptions.RequestException, OSError) as e:
            raise classify_exception(e) from e
        finally:
            response.close()

        return response.status_code, body
