import threading
from typing import Any, Dict, Optional, Sequence

from ..errors import ValidationError
from ..models import CompletionRequest, CompletionResponse, CompletionStreamEvent
from ..routing import apply_model_suffix
from ..streaming import Stream
from .base import Resource, build_request

COMPLETIONS_PATH = "/completions"


class CompletionsResource(Resource):
    """``/completions``: legacy prompt-in, text-out completions."""

    def build(
        self,
        prompt: Optional[str] = None,
        request: Optional[CompletionRequest] = None,
        stream: bool = False,
        **params
    ) -> CompletionRequest:
        if not self.config.api_key:
            raise ValidationError("api_key", "API key is required")

        if request is None:
            fields: Dict[str, Any] = {"prompt": prompt or "", **params}
        else:
            fields = request.model_dump(exclude_none=True)
            fields['metadata'] = request.metadata
            if prompt is not None:
                fields['prompt'] = prompt
            fields.update(params)

        fields['stream'] = stream
        fields['model'] = fields.get('model') or self.config.default_model or ""

        completion_request = build_request(CompletionRequest, fields)

        if not completion_request.prompt:
            raise ValidationError("prompt", "prompt is required")
        if not completion_request.model:
            raise ValidationError("model", "model is required")

        model, provider = apply_model_suffix(completion_request.model, completion_request.provider)
        return completion_request.model_copy(update={"model": model, "provider": provider})

    def create(
        self,
        prompt: Optional[str] = None,
        request: Optional[CompletionRequest] = None,
        cancel: Optional[threading.Event] = None,
        **params
    ) -> CompletionResponse:
        completion_request = self.build(prompt, request=request, **params)
        return self._dispatcher.dispatch(
            "POST",
            COMPLETIONS_PATH,
            body=completion_request,
            response_model=CompletionResponse,
            cancel=cancel
        )

    def stream(
        self,
        prompt: Optional[str] = None,
        request: Optional[CompletionRequest] = None,
        cancel: Optional[threading.Event] = None,
        **params
    ) -> Stream[CompletionStreamEvent]:
        completion_request = self.build(prompt, request=request, stream=True, **params)
        return self._dispatcher.stream(
            COMPLETIONS_PATH,
            completion_request,
            CompletionStreamEvent,
            cancel=cancel
        )

    def create_with_context(self, context: str, prompt: str, **params) -> CompletionResponse:
        """Complete ``prompt`` with ``context`` prepended, separated by a blank line."""
        return self.create(f"{context}\n\n{prompt}", **params)

    def create_with_examples(
        self,
        instruction: str,
        examples: Sequence[str],
        prompt: str,
        **params
    ) -> CompletionResponse:
        """Few-shot completion: instruction, numbered examples, then the prompt."""
        return self.create(few_shot_prompt(instruction, examples, prompt), **params)


def few_shot_prompt(instruction: str, examples: Sequence[str], prompt: str) -> str:
    full_prompt = instruction

    if examples:
        full_prompt += "\n\nExamples:\n"
        for i, example in enumerate(examples, start=1):
            full_prompt += f"{i}. {example}\n"

    full_prompt += f"\n\nNow: {prompt}"
    return full_prompt
