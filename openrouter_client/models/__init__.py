"""
Typed request and response models for the OpenRouter API.
"""

from .chat import (
    RequestModel,
    ResponseModel,
    ImageURL,
    ContentPart,
    MessageContent,
    FunctionCall,
    ToolCall,
    URLCitation,
    Annotation,
    Message,
    FunctionDefinition,
    Tool,
    JSONSchema,
    ResponseFormat,
    MaxPrice,
    ProviderPreferences,
    Plugin,
    WebSearchOptions,
    ChatCompletionRequest,
    CompletionRequest,
    Usage,
    TopLogProb,
    LogProbContent,
    LogProbs,
    Choice,
    ChatCompletionResponse,
    CompletionChoice,
    CompletionResponse,
    ToolCallFunctionDelta,
    ToolCallDelta,
    Delta,
    StreamChoice,
    StreamEvent,
    CompletionStreamChoice,
    CompletionStreamEvent,
)
from .catalog import (
    ModelArchitecture,
    ModelTopProvider,
    ModelPricing,
    Model,
    ModelsResponse,
    ModelEndpointPricing,
    ModelEndpoint,
    ModelEndpointsData,
    ModelEndpointsResponse,
    ProviderInfo,
    ProvidersResponse,
)
from .account import (
    CreditsData,
    CreditsResponse,
    ActivityData,
    ActivityResponse,
    KeyRateLimit,
    KeyData,
    KeyResponse,
    APIKey,
    ListKeysResponse,
    KeyDetailsResponse,
    CreateKeyRequest,
    CreateKeyResponse,
    UpdateKeyRequest,
    DeleteKeyData,
    DeleteKeyResponse,
)

__all__ = [
    "RequestModel",
    "ResponseModel",
    "ImageURL",
    "ContentPart",
    "MessageContent",
    "FunctionCall",
    "ToolCall",
    "URLCitation",
    "Annotation",
    "Message",
    "FunctionDefinition",
    "Tool",
    "JSONSchema",
    "ResponseFormat",
    "MaxPrice",
    "ProviderPreferences",
    "Plugin",
    "WebSearchOptions",
    "ChatCompletionRequest",
    "CompletionRequest",
    "Usage",
    "TopLogProb",
    "LogProbContent",
    "LogProbs",
    "Choice",
    "ChatCompletionResponse",
    "CompletionChoice",
    "CompletionResponse",
    "ToolCallFunctionDelta",
    "ToolCallDelta",
    "Delta",
    "StreamChoice",
    "StreamEvent",
    "CompletionStreamChoice",
    "CompletionStreamEvent",
    "ModelArchitecture",
    "ModelTopProvider",
    "ModelPricing",
    "Model",
    "ModelsResponse",
    "ModelEndpointPricing",
    "ModelEndpoint",
    "ModelEndpointsData",
    "ModelEndpointsResponse",
    "ProviderInfo",
    "ProvidersResponse",
    "CreditsData",
    "CreditsResponse",
    "ActivityData",
    "ActivityResponse",
    "KeyRateLimit",
    "KeyData",
    "KeyResponse",
    "APIKey",
    "ListKeysResponse",
    "KeyDetailsResponse",
    "CreateKeyRequest",
    "CreateKeyResponse",
    "UpdateKeyRequest",
    "DeleteKeyData",
    "DeleteKeyResponse",
]
