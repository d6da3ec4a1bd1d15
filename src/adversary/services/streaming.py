"""Server-sent event framing for debate token streams.

Wire format, one frame per token::

    data: {"content": "<token>"}\n\n
    ...
    data: [DONE]\n\n

A stream that ends without the ``[DONE]`` frame is incomplete. The decode
side is tolerant: lines that are not ``data:`` lines, or whose payload is
not valid JSON, are skipped rather than aborting the read.
"""

from __future__ import annotations

import codecs
import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Iterable, Iterator, List, NamedTuple, Optional, Union

from starlette.concurrency import iterate_in_threadpool

LOG = logging.getLogger("adversary.stream")

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DONE_FRAME = f"{DATA_PREFIX}{DONE_SENTINEL}\n\n"

# Stands in for an empty completion so a client never renders a blank reply.
EMPTY_RESPONSE_PLACEHOLDER = (
    "I have nothing sharp to add on that yet. Restate your strongest point and I'll go after it."
)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def sse_frame(content: str) -> str:
    return f"{DATA_PREFIX}{json.dumps({'content': content})}\n\n"


class DataLine(NamedTuple):
    done: bool
    payload: Any = None


def parse_data_line(line: str) -> Optional[DataLine]:
    """Classify one event-stream line.

    Returns ``None`` for lines that carry nothing usable (comments, blank
    lines, other fields, malformed JSON).
    """
    if not line.startswith(DATA_PREFIX):
        return None
    data = line[len(DATA_PREFIX):].strip()
    if data == DONE_SENTINEL:
        return DataLine(done=True)
    try:
        return DataLine(done=False, payload=json.loads(data))
    except json.JSONDecodeError:
        LOG.debug("stream_frame_skipped", extra={"frame": data[:80]})
        return None


# ----------------------------------------------------------------------
# Encode side
# ----------------------------------------------------------------------
def iter_as_async(it: Iterable[str]) -> AsyncIterator[str]:
    """Drive a blocking token iterator from the thread pool."""
    return iterate_in_threadpool(iter(it))


async def relay_frames(first: Optional[str], rest: AsyncIterator[str]) -> AsyncIterator[str]:
    """Re-frame provider tokens as SSE frames, closing with ``[DONE]``.

    ``first`` is the token already pulled by the caller to surface dispatch
    errors before the response started. A failure after that point ends the
    stream without the sentinel.
    """
    emitted = False
    try:
        if first:
            emitted = True
            yield sse_frame(first)
        async for token in rest:
            if not token:
                continue
            emitted = True
            yield sse_frame(token)
    except Exception as exc:
        LOG.warning("stream_aborted", extra={"err": str(exc)})
        return
    if not emitted:
        yield sse_frame(EMPTY_RESPONSE_PLACEHOLDER)
    yield DONE_FRAME


# ----------------------------------------------------------------------
# Decode side
# ----------------------------------------------------------------------
class StreamDecoder:
    """Incremental decoder that buffers partial lines across chunks."""

    def __init__(self) -> None:
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._parts: List[str] = []
        self.done = False
        self.skipped = 0

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def feed(self, chunk: Union[str, bytes]) -> Iterator[str]:
        """Consume a chunk, yielding each content token after it is accumulated."""
        if self.done:
            return
        text = self._utf8.decode(chunk) if isinstance(chunk, bytes) else chunk
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            yield from self._consume(line.rstrip("\r"))
            if self.done:
                self._buffer = ""
                return

    def close(self) -> Iterator[str]:
        """Flush a trailing line that arrived without a newline."""
        if self.done:
            return
        tail, self._buffer = self._buffer + self._utf8.decode(b"", final=True), ""
        if tail:
            yield from self._consume(tail.rstrip("\r"))

    def _consume(self, line: str) -> Iterator[str]:
        if not line.startswith(DATA_PREFIX):
            return
        parsed = parse_data_line(line)
        if parsed is None:
            self.skipped += 1
            return
        if parsed.done:
            self.done = True
            return
        content = parsed.payload.get("content") if isinstance(parsed.payload, dict) else None
        if isinstance(content, str) and content:
            self._parts.append(content)
            yield content


@dataclass
class DecodeResult:
    text: str
    completed: bool
    cancelled: bool = False
    skipped: int = 0


def decode_stream(
    chunks: Iterable[Union[str, bytes]],
    on_update: Optional[Callable[[str], None]] = None,
    cancel: Optional[threading.Event] = None,
) -> DecodeResult:
    """Pull chunks until ``[DONE]`` or end of stream.

    ``on_update`` receives the accumulated text after every token. When
    ``cancel`` is set the read stops and the partial text is discarded.
    """
    decoder = StreamDecoder()

    def _cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    for chunk in chunks:
        if _cancelled():
            return DecodeResult(text="", completed=False, cancelled=True, skipped=decoder.skipped)
        for _token in decoder.feed(chunk):
            if on_update is not None:
                on_update(decoder.text)
        if decoder.done:
            break
    else:
        if _cancelled():
            return DecodeResult(text="", completed=False, cancelled=True, skipped=decoder.skipped)
        for _token in decoder.close():
            if on_update is not None:
                on_update(decoder.text)
    return DecodeResult(text=decoder.text, completed=decoder.done, skipped=decoder.skipped)
