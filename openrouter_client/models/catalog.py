from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from .chat import ResponseModel


class ModelArchitecture(ResponseModel):
    input_modalities: List[str] = Field(default_factory=list)
    output_modalities: List[str] = Field(default_factory=list)
    tokenizer: Optional[str] = None
    instruct_type: Optional[str] = None


class ModelTopProvider(ResponseModel):
    context_length: Optional[float] = None
    max_completion_tokens: Optional[float] = None
    is_moderated: bool = False


class ModelPricing(ResponseModel):
    """Prices are decimal strings in USD per token (or per unit)."""
    prompt: str = "0"
    completion: str = "0"
    image: Optional[str] = None
    request: Optional[str] = None
    input_cache_read: Optional[str] = None
    input_cache_write: Optional[str] = None
    web_search: Optional[str] = None
    internal_reasoning: Optional[str] = None


class Model(ResponseModel):
    id: str = ""
    name: str = ""
    canonical_slug: Optional[str] = None
    created: float = 0
    description: str = ""
    context_length: Optional[float] = None
    hugging_face_id: Optional[str] = None
    architecture: ModelArchitecture = Field(default_factory=ModelArchitecture)
    top_provider: ModelTopProvider = Field(default_factory=ModelTopProvider)
    per_request_limits: Optional[Dict[str, Any]] = None
    supported_parameters: List[str] = Field(default_factory=list)
    default_parameters: Optional[Dict[str, Any]] = None
    pricing: ModelPricing = Field(default_factory=ModelPricing)


class ModelsResponse(ResponseModel):
    data: List[Model] = Field(default_factory=list)


class ModelEndpointPricing(ResponseModel):
    request: Optional[str] = None
    image: Optional[str] = None
    prompt: str = "0"
    completion: str = "0"


class ModelEndpoint(ResponseModel):
    name: str = ""
    context_length: float = 0
    pricing: ModelEndpointPricing = Field(default_factory=ModelEndpointPricing)
    provider_name: str = ""
    quantization: Optional[str] = None
    max_completion_tokens: Optional[float] = None
    max_prompt_tokens: Optional[float] = None
    supported_parameters: List[str] = Field(default_factory=list)
    status: Optional[Union[int, str]] = None
    uptime_last_30m: Optional[float] = None


class ModelEndpointsData(ResponseModel):
    id: str = ""
    name: str = ""
    created: float = 0
    description: str = ""
    architecture: ModelArchitecture = Field(default_factory=ModelArchitecture)
    endpoints: List[ModelEndpoint] = Field(default_factory=list)


class ModelEndpointsResponse(ResponseModel):
    data: ModelEndpointsData = Field(default_factory=ModelEndpointsData)


class ProviderInfo(ResponseModel):
    name: str = ""
    slug: str = ""
    privacy_policy_url: Optional[str] = None
    terms_of_service_url: Optional[str] = None
    status_page_url: Optional[str] = None


class ProvidersResponse(ResponseModel):
    data: List[ProviderInfo] = Field(default_factory=list)
