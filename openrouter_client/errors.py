"""
Error taxonomy and classification for OpenRouter calls.

Every failure the client surfaces is an ``OpenRouterError`` subclass with a
``kind`` callers can branch on:

- ValidationError: caller-side contract violation, raised before any network call
- APIError: the service answered with a non-2xx status (or an error payload mid-stream)
- TransportError: connection/DNS/TLS/timeout failure, no status received
- StreamError: protocol violation inside an event stream
- RequestCancelledError: the caller's cancel event fired

``is_retryable`` is the single predicate the retry policy consults.
"""

import json
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

import requests


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    API = "api"
    TRANSPORT = "transport"
    STREAM = "stream"
    CANCELLED = "cancelled"


# 4xx statuses that are worth another attempt
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


class OpenRouterError(Exception):
    kind: ErrorKind = ErrorKind.API

    @property
    def retryable(self) -> bool:
        return False


class ValidationError(OpenRouterError):
    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        if field:
            message = f"validation error for field '{field}': {reason}"
        else:
            message = f"validation error: {reason}"
        super().__init__(message)


class APIError(OpenRouterError):
    kind = ErrorKind.API

    def __init__(
        self,
        status_code: int,
        message: str = "",
        error_type: Optional[str] = None,
        code: Optional[Union[int, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        raw_body: str = "",
        retry_after: Optional[int] = None
    ):
        self.status_code = status_code
        self.message = message
        self.error_type = error_type
        self.code = code
        self.metadata = metadata or {}
        self.raw_body = raw_body
        self.retry_after = retry_after
        super().__init__(self._format())

    def _format(self) -> str:
        message = self.message or "request failed"
        if self.error_type:
            return f"openrouter: {message} (type: {self.error_type}, status: {self.status_code})"
        return f"openrouter: {message} (status: {self.status_code})"

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500 or self.status_code in RETRYABLE_CLIENT_STATUSES

    @property
    def provider_name(self) -> Optional[str]:
        return self.metadata.get('provider_name')

    @property
    def is_rate_limit(self) -> bool:
        return self.status_code == 429

    @property
    def is_authentication(self) -> bool:
        return self.status_code == 401

    @property
    def is_insufficient_credits(self) -> bool:
        return self.status_code == 402

    @property
    def is_permission(self) -> bool:
        return self.status_code == 403

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_timeout(self) -> bool:
        return self.status_code == 408

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


class MalformedResponseError(APIError):
    """A 2xx response whose body could not be decoded. Never retried."""

    def __init__(self, status_code: int, reason: str, raw_body: str = ""):
        self.reason = reason
        super().__init__(status_code, message=reason, raw_body=raw_body)

    def _format(self) -> str:
        return f"openrouter: malformed response (status: {self.status_code}): {self.reason}"

    @property
    def retryable(self) -> bool:
        return False


class TransportError(OpenRouterError):
    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {type(cause).__name__}: {cause}"
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return True


class StreamError(OpenRouterError):
    kind = ErrorKind.STREAM

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            super().__init__(f"stream error: {message}: {cause}")
        else:
            super().__init__(f"stream error: {message}")


class RequestCancelledError(OpenRouterError):
    kind = ErrorKind.CANCELLED


def parse_retry_after(headers: Optional[Mapping[str, str]]) -> Optional[int]:
    if not headers:
        return None
    retry_after = headers.get('Retry-After')
    if not retry_after:
        return None
    try:
        return max(0, int(retry_after))
    except (TypeError, ValueError):
        # HTTP-date form is not used by OpenRouter
        return None


def _decode_body(body: Union[bytes, str, None]) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode('utf-8', errors='replace')
    return body


def api_error_from_payload(
    status_code: int,
    payload: Any,
    raw_body: str = "",
    retry_after: Optional[int] = None
) -> APIError:
    """Build an APIError from a decoded ``{"error": {...}}`` document.

    Anything that is not that shape yields an APIError with an empty message
    and the raw body preserved.
    """
    message = ""
    error_type = None
    code = None
    metadata = None

    if isinstance(payload, dict):
        error = payload.get('error')
        if isinstance(error, dict):
            message = error.get('message') or ""
            error_type = error.get('type')
            code = error.get('code')
            if isinstance(error.get('metadata'), dict):
                metadata = error['metadata']
        elif isinstance(error, str):
            message = error
        elif isinstance(payload.get('message'), str):
            message = payload['message']

    if not isinstance(message, str):
        message = json.dumps(message)

    return APIError(
        status_code=status_code,
        message=message,
        error_type=error_type,
        code=code,
        metadata=metadata,
        raw_body=raw_body,
        retry_after=retry_after
    )


def classify_response(
    status_code: int,
    body: Union[bytes, str, None],
    headers: Optional[Mapping[str, str]] = None
) -> APIError:
    raw_body = _decode_body(body)
    try:
        payload = json.loads(raw_body) if raw_body else None
    except ValueError:
        payload = None

    return api_error_from_payload(
        status_code,
        payload,
        raw_body=raw_body,
        retry_after=parse_retry_after(headers)
    )


def classify_exception(error: BaseException) -> OpenRouterError:
    if isinstance(error, OpenRouterError):
        return error

    if isinstance(error, (
        requests.exceptions.InvalidURL,
        requests.exceptions.MissingSchema,
        requests.exceptions.InvalidSchema,
    )):
        return ValidationError("base_url", str(error))

    if isinstance(error, requests.exceptions.InvalidHeader):
        return ValidationError("headers", str(error))

    if isinstance(error, requests.exceptions.Timeout):
        return TransportError("request timed out", cause=error)

    if isinstance(error, requests.exceptions.ConnectionError):
        return TransportError("connection failed", cause=error)

    if isinstance(error, (
        requests.exceptions.ChunkedEncodingError,
        requests.exceptions.ContentDecodingError,
    )):
        return TransportError("connection interrupted while reading response", cause=error)

    if isinstance(error, (requests.exceptions.RequestException, OSError)):
        return TransportError("transport failure", cause=error)

    return TransportError("unexpected transport failure", cause=error)


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, OpenRouterError) and error.retryable
