import json
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import MalformedResponseError, StreamError, api_error_from_payload
from ..logger import ClientLogger, get_logger

M = TypeVar('M', bound=BaseModel)

# Keep logged bodies short; full bodies stay on the raised error
_LOG_BODY_LIMIT = 500


class ResponseParser:
    def __init__(self, logger: Optional[ClientLogger] = None):
        self.logger = logger or get_logger(__name__)

    def decode(self, raw: bytes, response_model: Optional[Type[M]] = None, status_code: int = 200) -> Any:
        """Decode a 2xx body into ``response_model`` (or plain JSON when None).

        An empty body yields the model's defaults. A body that is not JSON, or
        that does not fit the model, raises MalformedResponseError.
        """
        text = raw.decode('utf-8', errors='replace') if isinstance(raw, bytes) else (raw or "")

        if not text.strip():
            return response_model.model_validate({}) if response_model is not None else None

        try:
            payload = json.loads(text)
        except ValueError as e:
            self._log_malformed(response_model, status_code, e, text)
            raise MalformedResponseError(status_code, f"invalid JSON: {e}", raw_body=text) from e

        if response_model is None:
            return payload

        try:
            return response_model.model_validate(payload)
        except PydanticValidationError as e:
            self._log_malformed(response_model, status_code, e, text)
            raise MalformedResponseError(
                status_code,
                f"unexpected shape for {response_model.__name__}: {e.error_count()} validation error(s)",
                raw_body=text
            ) from e

    def parse_stream_event(self, data: str, model: Type[M]) -> M:
        """Decode one SSE data payload.

        A payload with a top-level ``error`` object is the provider failing
        mid-stream and raises APIError; undecodable payloads raise StreamError.
        """
        try:
            payload: Any = json.loads(data)
        except ValueError as e:
            self.logger.error(
                "Undecodable stream event",
                event_model=model.__name__,
                error=str(e),
                data=data[:_LOG_BODY_LIMIT]
            )
            raise StreamError("invalid JSON in event payload", cause=e) from e

        if isinstance(payload, dict) and payload.get('error'):
            error = payload['error']
            status_code = 200
            if isinstance(error, dict) and isinstance(error.get('code'), int):
                status_code = error['code']
            raise api_error_from_payload(status_code, payload, raw_body=data)

        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            self.logger.error(
                "Stream event does not match expected shape",
                event_model=model.__name__,
                error_count=e.error_count(),
                data=data[:_LOG_BODY_LIMIT]
            )
            raise StreamError(f"unexpected shape for {model.__name__}", cause=e) from e

    def _log_malformed(
        self,
        response_model: Optional[Type[BaseModel]],
        status_code: int,
        error: Exception,
        text: str
    ):
        self.logger.error(
            "Malformed API response from OpenRouter",
            response_model=response_model.__name__ if response_model else None,
            status_code=status_code,
            error_type=type(error).__name__,
            error=str(error),
            body=text[:_LOG_BODY_LIMIT]
        )
