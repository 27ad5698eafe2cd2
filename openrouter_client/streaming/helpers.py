from typing import Dict, Iterable, List, Optional

from ..models import (
    CompletionStreamEvent,
    FunctionCall,
    StreamEvent,
    ToolCall,
    Usage,
)


def concatenate_chat_stream(events: Iterable[StreamEvent]) -> str:
    """Join the text deltas of a chat stream, in arrival order."""
    return "".join(event.content for event in events)


def concatenate_completion_stream(events: Iterable[CompletionStreamEvent]) -> str:
    return "".join(event.text for event in events)


def accumulate_tool_calls(events: Iterable[StreamEvent]) -> List[ToolCall]:
    """
    Rebuild complete tool calls from streamed fragments.

    Fragments are merged by ``tool_calls[].index``: the first fragment carrying
    an id/name sets it, and ``function.arguments`` pieces are concatenated in
    the order they arrived. Results are ordered by index.
    """
    calls: Dict[int, Dict[str, str]] = {}

    for event in events:
        for choice in event.choices:
            for fragment in choice.delta.tool_calls or []:
                call = calls.setdefault(
                    fragment.index,
                    {"id": "", "type": "function", "name": "", "arguments": ""}
                )
                if fragment.id and not call["id"]:
                    call["id"] = fragment.id
                if fragment.type:
                    call["type"] = fragment.type
                if fragment.function is not None:
                    if fragment.function.name and not call["name"]:
                        call["name"] = fragment.function.name
                    if fragment.function.arguments:
                        call["arguments"] += fragment.function.arguments

    return [
        ToolCall(
            id=call["id"],
            type=call["type"],
            function=FunctionCall(name=call["name"], arguments=call["arguments"])
        )
        for _, call in sorted(calls.items())
    ]


def final_usage(events: Iterable[StreamEvent]) -> Optional[Usage]:
    """Usage reported by the stream; OpenRouter sends it on the last chunk."""
    usage = None
    for event in events:
        if event.usage is not None:
            usage = event.usage
    return usage
