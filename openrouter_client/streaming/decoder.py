#!/usr/bin/env python3
"""
Incremental Server-Sent Events decoder.

Bytes go in through ``feed`` in whatever pieces the network delivers them;
complete frames come out in arrival order. A frame is the run of field lines
ending at a blank line:

    : keep-alive comment (ignored)
    event: message
    data: {"choices": [...]}
    <blank line>

Multiple ``data:`` lines in one frame are joined with ``\\n``. The payload
``[DONE]`` marks the normal end of an OpenRouter stream.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..errors import StreamError

DONE_SENTINEL = "[DONE]"

_LINE_BREAK = re.compile(rb"\r\n|\r|\n")


class DecoderState(str, Enum):
    AWAITING_FRAME = "awaiting_frame"
    ACCUMULATING_FRAME = "accumulating_frame"
    TERMINATED = "terminated"
    ERRORED = "errored"


@dataclass
class SSEFrame:
    data: str
    event: Optional[str] = None
    id: Optional[str] = None
    retry: Optional[int] = None

    @property
    def is_done(self) -> bool:
        return self.data.strip() == DONE_SENTINEL


class SSEDecoder:
    """Turns a byte stream into SSEFrames.

    The decoder holds partial lines between ``feed`` calls, so a frame may be
    split at any byte offset, including inside a multi-byte UTF-8 character or
    between the ``\\r`` and ``\\n`` of a CRLF.

    Not thread-safe; a Stream's reader thread is its only user.
    """

    def __init__(self):
        self.state = DecoderState.AWAITING_FRAME
        self._buffer = bytearray()
        # Bytes of _buffer before this offset are known to hold no line break
        self._scan_from = 0
        self._data_lines: List[str] = []
        self._event: Optional[str] = None
        self._id: Optional[str] = None
        self._retry: Optional[int] = None
        self._has_fields = False

    @property
    def pending(self) -> bool:
        """True when bytes or fields of an unfinished frame are buffered."""
        return bool(self._buffer) or self._has_fields

    def feed(self, chunk: bytes) -> List[SSEFrame]:
        if self.state in (DecoderState.TERMINATED, DecoderState.ERRORED):
            return []

        self._buffer.extend(chunk)
        frames = []

        while True:
            match = _LINE_BREAK.search(self._buffer, self._scan_from)
            if match is None:
                self._scan_from = len(self._buffer)
                break
            # A lone trailing \r may be the first half of \r\n
            if match.group() == b"\r" and match.end() == len(self._buffer):
                self._scan_from = match.start()
                break

            line = bytes(self._buffer[:match.start()])
            del self._buffer[:match.end()]
            self._scan_from = 0

            frame = self._process_line(line)
            if frame is not None:
                frames.append(frame)
                if frame.is_done:
                    self.state = DecoderState.TERMINATED
                    self._buffer.clear()
                    self._scan_from = 0
                    break

        return frames

    def finish(self) -> List[SSEFrame]:
        """Signal end of input.

        A trailing ``[DONE]`` without its blank line is accepted. Any other
        unfinished frame means the connection dropped mid-frame.
        """
        if self.state in (DecoderState.TERMINATED, DecoderState.ERRORED):
            return []

        frames = []
        if self._buffer:
            line = bytes(self._buffer)
            self._buffer.clear()
            self._scan_from = 0
            # Only a held-back lone \r can remain; it ends the line
            frame = self._process_line(line[:-1] if line.endswith(b"\r") else line)
            if frame is not None:
                frames.append(frame)

        if frames and frames[-1].is_done:
            self.state = DecoderState.TERMINATED
            return frames

        if not self._has_fields:
            return frames

        frame = self._build_frame()
        if frame is not None and frame.is_done:
            self.state = DecoderState.TERMINATED
            return frames + [frame]

        self.state = DecoderState.ERRORED
        raise StreamError("stream ended mid-frame")

    def _process_line(self, raw_line: bytes) -> Optional[SSEFrame]:
        try:
            line = raw_line.decode('utf-8')
        except UnicodeDecodeError as e:
            self.state = DecoderState.ERRORED
            raise StreamError("invalid UTF-8 in event stream", cause=e) from e

        if line == "":
            if not self._has_fields:
                return None
            self.state = DecoderState.AWAITING_FRAME
            return self._build_frame()

        if line.startswith(":"):
            return None

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        self.state = DecoderState.ACCUMULATING_FRAME
        self._has_fields = True

        if field == "data":
            self._data_lines.append(value)
        elif field == "event":
            self._event = value
        elif field == "id":
            # EventSource ignores ids containing NUL
            if "\0" not in value:
                self._id = value
        elif field == "retry":
            if value.isascii() and value.isdigit():
                self._retry = int(value)
        # Unknown fields are ignored

        return None

    def _build_frame(self) -> Optional[SSEFrame]:
        data_lines = self._data_lines
        frame = None
        if data_lines:
            frame = SSEFrame(
                data="\n".join(data_lines),
                event=self._event,
                id=self._id,
                retry=self._retry
            )

        self._data_lines = []
        self._event = None
        self._retry = None
        self._has_fields = False
        return frame
