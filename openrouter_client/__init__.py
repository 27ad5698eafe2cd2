"""
Resilient client for the OpenRouter LLM gateway.

    from openrouter_client import OpenRouterClient, user_message

    client = OpenRouterClient(api_key="sk-or-...", default_model="openai/gpt-4o-mini")
    reply = client.chat.create([user_message("Hello")])
    print(reply.content)

    with client.chat.stream([user_message("Count to five")]) as stream:
        for event in stream:
            print(event.content, end="")
    stream.raise_for_error()
"""

from .client import OpenRouterClient
from .config import ClientConfig, RetryConfig, load_config
from .dispatcher import Dispatcher
from .errors import (
    APIError,
    ErrorKind,
    MalformedResponseError,
    OpenRouterError,
    RequestCancelledError,
    StreamError,
    TransportError,
    ValidationError,
    classify_exception,
    classify_response,
    is_retryable,
)
from .events import EventData, RequestEvent
from .logger import ClientLogger, configure_logging, get_logger
from .models import *  # noqa: F401,F403
from .models import __all__ as _model_names
from .resources import (
    assistant_message,
    few_shot_prompt,
    multimodal_message,
    system_message,
    tool_message,
    user_message,
)
from .routing import apply_model_suffix
from .schema import (
    function_tool,
    json_object_format,
    json_schema_format,
    schema_from_model,
    tool_choice,
)
from .streaming import (
    SSEDecoder,
    SSEFrame,
    Stream,
    accumulate_tool_calls,
    concatenate_chat_stream,
    concatenate_completion_stream,
    final_usage,
)
from .web_search import (
    WebSearchContextSize,
    WebSearchEngine,
    default_search_prompt,
    online_model,
    parse_annotations,
    web_plugin,
    web_search_options,
)

__version__ = "0.1.0"

__all__ = [
    'OpenRouterClient',
    'ClientConfig',
    'RetryConfig',
    'load_config',
    'Dispatcher',
    'APIError',
    'ErrorKind',
    'MalformedResponseError',
    'OpenRouterError',
    'RequestCancelledError',
    'StreamError',
    'TransportError',
    'ValidationError',
    'classify_exception',
    'classify_response',
    'is_retryable',
    'EventData',
    'RequestEvent',
    'ClientLogger',
    'configure_logging',
    'get_logger',
    'assistant_message',
    'few_shot_prompt',
    'multimodal_message',
    'system_message',
    'tool_message',
    'user_message',
    'apply_model_suffix',
    'function_tool',
    'json_object_format',
    'json_schema_format',
    'schema_from_model',
    'tool_choice',
    'SSEDecoder',
    'SSEFrame',
    'Stream',
    'accumulate_tool_calls',
    'concatenate_chat_stream',
    'concatenate_completion_stream',
    'final_usage',
    'WebSearchContextSize',
    'WebSearchEngine',
    'default_search_prompt',
    'online_model',
    'parse_annotations',
    'web_plugin',
    'web_search_options',
] + list(_model_names)
