from typing import Optional
from urllib.parse import quote

from ..errors import ValidationError
from ..models import (
    CreateKeyRequest,
    CreateKeyResponse,
    DeleteKeyResponse,
    KeyDetailsResponse,
    KeyResponse,
    ListKeysResponse,
    UpdateKeyRequest,
)
from .base import Resource, build_request, require


def _key_path(key_hash: str) -> str:
    require(key_hash, "hash")
    return f"/keys/{quote(key_hash, safe='')}"


class KeysResource(Resource):
    """
    API key management.

    ``current`` works with any key. The others need a provisioning key and
    operate on keys identified by their hash, never by the secret itself.
    """

    def current(self) -> KeyResponse:
        """Limits, usage and rate limit of the key the client is using."""
        return self._dispatcher.dispatch("GET", "/key", response_model=KeyResponse)

    def list(
        self,
        offset: Optional[int] = None,
        include_disabled: Optional[bool] = None
    ) -> ListKeysResponse:
        if offset is not None and offset < 0:
            raise ValidationError("offset", "must be non-negative")

        params = {}
        if offset is not None:
            params['offset'] = offset
        if include_disabled is not None:
            params['include_disabled'] = "true" if include_disabled else "false"

        return self._dispatcher.dispatch(
            "GET",
            "/keys",
            params=params,
            response_model=ListKeysResponse
        )

    def get(self, key_hash: str) -> KeyDetailsResponse:
        return self._dispatcher.dispatch("GET", _key_path(key_hash), response_model=KeyDetailsResponse)

    def create(
        self,
        name: str,
        limit: Optional[float] = None,
        include_byok_in_limit: Optional[bool] = None
    ) -> CreateKeyResponse:
        """Create a key. The secret is only returned in this response's ``key``."""
        require(name, "name")
        request = build_request(CreateKeyRequest, {
            "name": name,
            "limit": limit,
            "include_byok_in_limit": include_byok_in_limit,
        })
        return self._dispatcher.dispatch("POST", "/keys", body=request, response_model=CreateKeyResponse)

    def update(
        self,
        key_hash: str,
        name: Optional[str] = None,
        disabled: Optional[bool] = None,
        limit: Optional[float] = None,
        include_byok_in_limit: Optional[bool] = None
    ) -> KeyDetailsResponse:
        path = _key_path(key_hash)
        request = build_request(UpdateKeyRequest, {
            "name": name,
            "disabled": disabled,
            "limit": limit,
            "include_byok_in_limit": include_byok_in_limit,
        })
        if not request.model_dump(exclude_none=True):
            raise ValidationError("request", "at least one field must be updated")

        return self._dispatcher.dispatch("PATCH", path, body=request, response_model=KeyDetailsResponse)

    def delete(self, key_hash: str) -> DeleteKeyResponse:
        return self._dispatcher.dispatch("DELETE", _key_path(key_hash), response_model=DeleteKeyResponse)
