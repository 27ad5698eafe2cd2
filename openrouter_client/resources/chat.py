import threading
from typing import Any, Dict, Optional, Sequence, Union

from ..errors import ValidationError
from ..models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ContentPart,
    ImageURL,
    Message,
    StreamEvent,
)
from ..routing import apply_model_suffix
from ..streaming import Stream
from .base import Resource, build_request

CHAT_COMPLETIONS_PATH = "/chat/completions"

VALID_ROLES = ("system", "user", "assistant", "tool")

MessageLike = Union[Message, Dict[str, Any]]


def system_message(content: str) -> Message:
    return Message(role="system", content=content)


def user_message(content: str) -> Message:
    return Message(role="user", content=content)


def assistant_message(content: str) -> Message:
    return Message(role="assistant", content=content)


def tool_message(content: str, tool_call_id: str) -> Message:
    return Message(role="tool", content=content, tool_call_id=tool_call_id)


def multimodal_message(role: str, text: str, image_url: str, detail: Optional[str] = None) -> Message:
    """A message carrying one text part and one image (URL or base64 data URL)."""
    return Message(
        role=role,
        content=[
            ContentPart(type="text", text=text),
            ContentPart(type="image_url", image_url=ImageURL(url=image_url, detail=detail)),
        ]
    )


def validate_messages(messages: Sequence[Message]):
    if not messages:
        raise ValidationError("messages", "at least one message is required")

    for i, message in enumerate(messages):
        if not message.role:
            raise ValidationError(f"messages[{i}].role", "role is required")

        if message.role not in VALID_ROLES:
            raise ValidationError(
                f"messages[{i}].role",
                f"invalid role '{message.role}', must be one of: {', '.join(VALID_ROLES)}"
            )

        # Assistant turns may carry only tool calls
        if message.content is None and message.role != "assistant":
            raise ValidationError(
                f"messages[{i}].content",
                "content is required for non-assistant messages"
            )


class ChatResource(Resource):
    """``/chat/completions``: buffered and streamed chat completions."""

    def build(
        self,
        messages: Optional[Sequence[MessageLike]] = None,
        request: Optional[ChatCompletionRequest] = None,
        stream: bool = False,
        **params
    ) -> ChatCompletionRequest:
        """Assemble and validate a request without sending it.

        Either pass ``messages`` plus keyword parameters, or a prepared
        ``request`` (keyword parameters then override its fields).
        """
        if not self.config.api_key:
            raise ValidationError("api_key", "API key is required")

        if request is None:
            fields: Dict[str, Any] = {"messages": list(messages or []), **params}
        else:
            fields = request.model_dump(exclude_none=True)
            fields['metadata'] = request.metadata
            if messages is not None:
                fields['messages'] = list(messages)
            fields.update(params)

        fields['stream'] = stream
        fields['model'] = fields.get('model') or self.config.default_model or ""

        chat_request = build_request(ChatCompletionRequest, fields)

        validate_messages(chat_request.messages)
        if not chat_request.model:
            raise ValidationError("model", "model is required")

        model, provider = apply_model_suffix(chat_request.model, chat_request.provider)
        return chat_request.model_copy(update={"model": model, "provider": provider})

    def create(
        self,
        messages: Optional[Sequence[MessageLike]] = None,
        request: Optional[ChatCompletionRequest] = None,
        cancel: Optional[threading.Event] = None,
        **params
    ) -> ChatCompletionResponse:
        """
        Create a chat completion.

        Args:
            messages: Conversation so far (Message objects or dicts)
            request: Prepared request, as an alternative to keyword parameters
            cancel: Event that aborts retries
            **params: Any ChatCompletionRequest field (model, temperature, tools, ...)

        Returns:
            ChatCompletionResponse
        """
        chat_request = self.build(messages, request=request, **params)
        return self._dispatcher.dispatch(
            "POST",
            CHAT_COMPLETIONS_PATH,
            body=chat_request,
            response_model=ChatCompletionResponse,
            cancel=cancel
        )

    def stream(
        self,
        messages: Optional[Sequence[MessageLike]] = None,
        request: Optional[ChatCompletionRequest] = None,
        cancel: Optional[threading.Event] = None,
        **params
    ) -> Stream[StreamEvent]:
        """Open a streamed chat completion. Close the returned Stream when done."""
        chat_request = self.build(messages, request=request, stream=True, **params)
        return self._dispatcher.stream(
            CHAT_COMPLETIONS_PATH,
            chat_request,
            StreamEvent,
            cancel=cancel
        )

    def send(self, prompt: str, **params) -> ChatCompletionResponse:
        """Single-turn shortcut: one user message."""
        return self.create([user_message(prompt)], **params)

    def send_stream(self, prompt: str, **params) -> Stream[StreamEvent]:
        return self.stream([user_message(prompt)], **params)
