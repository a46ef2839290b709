"""
Pull-based line framer for the relayed chat-completion event stream.

Bytes are fed in whatever chunks the transport delivers; deltas come out once
a complete ``data:`` line is available, independent of chunk boundaries.
"""
import codecs
import json
from typing import Any, List, Optional

import structlog

log = structlog.get_logger()

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def extract_delta(obj: Any) -> Optional[str]:
    """Return ``choices[0].delta.content`` when it is a non-empty string."""
    if not isinstance(obj, dict):
        return None
    choices = obj.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class SSEStreamDecoder:
    """
    Incremental decoder for ``data: <json>`` event lines.

    - Bytes are UTF-8 decoded incrementally, so a multi-byte character split
      across chunks is reassembled.
    - Empty lines and ``:`` comments are skipped, as is anything that is not a
      ``data:`` line.
    - ``data: [DONE]`` ends the stream; later bytes are ignored.
    - A ``data:`` line whose JSON does not parse is pushed back onto the buffer
      and retried when more bytes arrive. If it still does not parse on the
      retry it is dropped, so one bad line cannot stall the stream.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._pushed_back: Optional[str] = None
        self.done = False
        self.dropped_lines = 0

    @property
    def buffered(self) -> str:
        return self._buffer

    def feed(self, chunk: bytes) -> List[str]:
        """Add raw bytes and return the deltas that became available."""
        if self.done:
            return []
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def flush(self) -> List[str]:
        """
        Signal end-of-stream. A trailing line without a newline is treated
        as complete.
        """
        if self.done:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer and not self._buffer.endswith("\n"):
            self._buffer += "\n"
        deltas = self._drain()
        # no more bytes will arrive: give each pushed-back line its retry now
        while self._pushed_back is not None and not self.done:
            deltas.extend(self._drain())
        return deltas

    def _drain(self) -> List[str]:
        deltas: List[str] = []
        while not self.done:
            newline_index = self._buffer.find("\n")
            if newline_index == -1:
                break

            line = self._buffer[:newline_index]
            self._buffer = self._buffer[newline_index + 1:]

            if line.endswith("\r"):
                line = line[:-1]
            if line.startswith(":") or line.strip() == "":
                continue
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):].strip()
            if payload == DONE_SENTINEL:
                self.done = True
                self._buffer = ""
                break

            try:
                parsed = json.loads(payload)
            except json.JSONDecodeError:
                if self._pushed_back == line:
                    self._pushed_back = None
                    self.dropped_lines += 1
                    log.debug("stream_line_dropped", line=line[:200])
                    continue
                self._pushed_back = line
                self._buffer = line + "\n" + self._buffer
                break

            self._pushed_back = None
            content = extract_delta(parsed)
            if content:
                deltas.append(content)
        return deltas
