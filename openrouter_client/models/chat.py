"""
Chat and legacy-completion request/response models.

Request models serialise with ``exclude_none`` so unset options never reach
the wire; unknown keyword arguments are kept and passed through verbatim so
new gateway parameters work without a client release. ``metadata`` is not
part of the body: the dispatcher sends each string entry as an ``X-<key>``
header.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class ResponseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ===== Message content =====

class ImageURL(RequestModel):
    url: str
    detail: Optional[str] = None


class ContentPart(RequestModel):
    type: str
    text: Optional[str] = None
    image_url: Optional[ImageURL] = None


# Plain text or a list of typed parts (text + images)
MessageContent = Union[str, List[ContentPart]]


class FunctionCall(RequestModel):
    name: str = ""
    arguments: str = ""


class ToolCall(RequestModel):
    id: str = ""
    type: str = "function"
    function: FunctionCall = Field(default_factory=FunctionCall)


class URLCitation(RequestModel):
    url: str
    title: str = ""
    content: Optional[str] = None
    start_index: int = 0
    end_index: int = 0


class Annotation(RequestModel):
    type: str
    url_citation: Optional[URLCitation] = None


class Message(RequestModel):
    role: str
    content: Optional[MessageContent] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None
    annotations: Optional[List[Annotation]] = None

    @property
    def text(self) -> str:
        """Content as plain text; multipart content keeps only its text parts."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(part.text or "" for part in self.content if part.type == "text")


# ===== Tools & structured output =====

class FunctionDefinition(RequestModel):
    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


class Tool(RequestModel):
    type: str = "function"
    function: FunctionDefinition


class JSONSchema(RequestModel):
    name: str
    strict: bool = False
    schema_: Dict[str, Any] = Field(default_factory=dict, alias="schema")


class ResponseFormat(RequestModel):
    type: str
    json_schema: Optional[JSONSchema] = None


# ===== Routing preferences =====

class MaxPrice(RequestModel):
    """Price ceilings in USD per million tokens (prompt/completion) or per unit."""
    prompt: Optional[float] = None
    completion: Optional[float] = None
    request: Optional[float] = None
    image: Optional[float] = None


class ProviderPreferences(RequestModel):
    """Routing preferences forwarded to the gateway. The client never routes."""
    order: Optional[List[str]] = None
    require_parameters: Optional[bool] = None
    data_collection: Optional[str] = None
    allow_fallbacks: Optional[bool] = None
    ignore: Optional[List[str]] = None
    quantizations: Optional[List[str]] = None
    zdr: Optional[bool] = None
    only: Optional[List[str]] = None
    sort: Optional[str] = None
    max_price: Optional[MaxPrice] = None


class Plugin(RequestModel):
    id: str
    engine: Optional[str] = None
    max_results: Optional[int] = None
    search_prompt: Optional[str] = None


class WebSearchOptions(RequestModel):
    search_context_size: Optional[str] = None


# ===== Requests =====

class _SamplingParams(RequestModel):
    model: str = ""
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, ge=0)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    repetition_penalty: Optional[float] = Field(default=None, gt=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)
    min_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_a: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    seed: Optional[int] = None
    stop: Optional[List[str]] = None
    stream: bool = False
    response_format: Optional[ResponseFormat] = None
    provider: Optional[ProviderPreferences] = None
    transforms: Optional[List[str]] = None
    models: Optional[List[str]] = None
    route: Optional[str] = None
    plugins: Optional[List[Plugin]] = None
    web_search_options: Optional[WebSearchOptions] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, exclude=True)


class ChatCompletionRequest(_SamplingParams):
    messages: List[Message] = Field(default_factory=list)
    logprobs: Optional[bool] = None
    top_logprobs: Optional[int] = Field(default=None, ge=0, le=20)
    tools: Optional[List[Tool]] = None
    tool_choice: Optional[Union[str, Dict[str, Any]]] = None
    parallel_tool_calls: Optional[bool] = None


class CompletionRequest(_SamplingParams):
    prompt: str = ""
    logprobs: Optional[int] = Field(default=None, ge=0)
    echo: Optional[bool] = None
    n: Optional[int] = Field(default=None, ge=1)
    best_of: Optional[int] = Field(default=None, ge=1)
    suffix: Optional[str] = None


# ===== Responses =====

class Usage(ResponseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cost: Optional[float] = None
    completion_tokens_details: Optional[Dict[str, Any]] = None

    @property
    def reasoning_tokens(self) -> int:
        return (self.completion_tokens_details or {}).get('reasoning_tokens', 0)


class TopLogProb(ResponseModel):
    token: str = ""
    logprob: float = 0.0
    bytes: Optional[List[int]] = None


class LogProbContent(ResponseModel):
    token: str = ""
    logprob: float = 0.0
    bytes: Optional[List[int]] = None
    top_logprobs: List[TopLogProb] = Field(default_factory=list)


class LogProbs(ResponseModel):
    content: Optional[List[LogProbContent]] = None


class Choice(ResponseModel):
    index: int = 0
    message: Optional[Message] = None
    finish_reason: Optional[str] = None
    native_finish_reason: Optional[str] = None
    logprobs: Optional[LogProbs] = None


class ChatCompletionResponse(ResponseModel):
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    provider: Optional[str] = None
    choices: List[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None
    system_fingerprint: Optional[str] = None

    @property
    def content(self) -> str:
        if not self.choices or self.choices[0].message is None:
            return ""
        return self.choices[0].message.text

    @property
    def tool_calls(self) -> List[ToolCall]:
        if not self.choices or self.choices[0].message is None:
            return []
        return self.choices[0].message.tool_calls or []


class CompletionChoice(ResponseModel):
    index: int = 0
    text: str = ""
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


class CompletionResponse(ResponseModel):
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    provider: Optional[str] = None
    choices: List[CompletionChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @property
    def text(self) -> str:
        return self.choices[0].text if self.choices else ""


# ===== Stream events =====

class ToolCallFunctionDelta(ResponseModel):
    name: Optional[str] = None
    arguments: Optional[str] = None


class ToolCallDelta(ResponseModel):
    """One fragment of a tool call; fragments share ``index`` across events."""
    index: int = 0
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[ToolCallFunctionDelta] = None


class Delta(ResponseModel):
    role: Optional[str] = None
    content: Optional[str] = None
    reasoning: Optional[str] = None
    tool_calls: Optional[List[ToolCallDelta]] = None


class StreamChoice(ResponseModel):
    index: int = 0
    delta: Delta = Field(default_factory=Delta)
    finish_reason: Optional[str] = None
    native_finish_reason: Optional[str] = None


class StreamEvent(ResponseModel):
    """One decoded chat-completion chunk."""
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    provider: Optional[str] = None
    choices: List[StreamChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @property
    def content(self) -> str:
        return "".join(choice.delta.content or "" for choice in self.choices)

    @property
    def finish_reason(self) -> Optional[str]:
        for choice in self.choices:
            if choice.finish_reason:
                return choice.finish_reason
        return None


class CompletionStreamChoice(ResponseModel):
    index: int = 0
    text: str = ""
    finish_reason: Optional[str] = None


class CompletionStreamEvent(ResponseModel):
    """One decoded legacy-completion chunk."""
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: List[CompletionStreamChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @property
    def text(self) -> str:
        return "".join(choice.text for choice in self.choices)
