"""
Endpoint groups exposed as attributes of OpenRouterClient.

Each resource validates its inputs, then hands ``(method, path, request)`` to
the shared Dispatcher. Only chat and completions open streams.
"""

from .base import Resource, build_request
from .chat import (
    ChatResource,
    assistant_message,
    multimodal_message,
    system_message,
    tool_message,
    user_message,
)
from .completions import CompletionsResource, few_shot_prompt
from .catalog import ModelsResource, ProvidersResource
from .account import ActivityResource, CreditsResource
from .keys import KeysResource

__all__ = [
    'Resource',
    'build_request',
    'ChatResource',
    'CompletionsResource',
    'ModelsResource',
    'ProvidersResource',
    'CreditsResource',
    'ActivityResource',
    'KeysResource',
    'few_shot_prompt',
    'system_message',
    'user_message',
    'assistant_message',
    'tool_message',
    'multimodal_message',
]
