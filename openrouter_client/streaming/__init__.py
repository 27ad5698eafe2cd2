"""
Server-Sent Events streaming.

- decoder.py: incremental byte-to-frame SSE parser
- stream.py: cancellable single-consumer Stream handle with a reader thread
- helpers.py: reassembly of text and tool calls from streamed fragments
"""

from .decoder import DONE_SENTINEL, DecoderState, SSEDecoder, SSEFrame
from .stream import Stream
from .helpers import (
    accumulate_tool_calls,
    concatenate_chat_stream,
    concatenate_completion_stream,
    final_usage,
)

__all__ = [
    'DONE_SENTINEL',
    'DecoderState',
    'SSEDecoder',
    'SSEFrame',
    'Stream',
    'accumulate_tool_calls',
    'concatenate_chat_stream',
    'concatenate_completion_stream',
    'final_usage',
]
