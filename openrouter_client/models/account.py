from typing import List, Optional

from pydantic import Field

from .chat import RequestModel, ResponseModel


class CreditsData(ResponseModel):
    total_credits: float = 0.0
    total_usage: float = 0.0

    @property
    def remaining(self) -> float:
        return self.total_credits - self.total_usage


class CreditsResponse(ResponseModel):
    data: CreditsData = Field(default_factory=CreditsData)


class ActivityData(ResponseModel):
    date: str = ""
    model: str = ""
    model_permaslug: str = ""
    endpoint_id: str = ""
    provider_name: str = ""
    usage: float = 0.0
    byok_usage_inference: float = 0.0
    requests: float = 0
    prompt_tokens: float = 0
    completion_tokens: float = 0
    reasoning_tokens: float = 0


class ActivityResponse(ResponseModel):
    data: List[ActivityData] = Field(default_factory=list)


class KeyRateLimit(ResponseModel):
    interval: str = ""
    requests: float = 0


class KeyData(ResponseModel):
    """The key the client is authenticated with."""
    label: str = ""
    limit: Optional[float] = None
    usage: float = 0.0
    is_free_tier: bool = False
    limit_remaining: Optional[float] = None
    is_provisioning_key: bool = False
    rate_limit: Optional[KeyRateLimit] = None


class KeyResponse(ResponseModel):
    data: KeyData = Field(default_factory=KeyData)


class APIKey(ResponseModel):
    """A key managed through the provisioning endpoints."""
    hash: str = ""
    name: str = ""
    label: str = ""
    disabled: bool = False
    limit: Optional[float] = None
    usage: Optional[float] = None
    include_byok_in_limit: Optional[bool] = None
    created_at: str = ""
    updated_at: Optional[str] = None


class ListKeysResponse(ResponseModel):
    data: List[APIKey] = Field(default_factory=list)


class KeyDetailsResponse(ResponseModel):
    data: APIKey = Field(default_factory=APIKey)


class CreateKeyRequest(RequestModel):
    name: str
    limit: Optional[float] = Field(default=None, ge=0)
    include_byok_in_limit: Optional[bool] = None


class CreateKeyResponse(ResponseModel):
    data: APIKey = Field(default_factory=APIKey)
    # The secret is only ever returned here
    key: str = ""


class UpdateKeyRequest(RequestModel):
    name: Optional[str] = None
    disabled: Optional[bool] = None
    limit: Optional[float] = Field(default=None, ge=0)
    include_byok_in_limit: Optional[bool] = None


class DeleteKeyData(ResponseModel):
    success: bool = False


class DeleteKeyResponse(ResponseModel):
    data: DeleteKeyData = Field(default_factory=DeleteKeyData)
