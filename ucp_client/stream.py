"""Incremental decoding of newline-delimited JSON search results.

The streaming search endpoint writes one JSON record per line, but the
transport hands us arbitrary byte chunks. :class:`LineBuffer` reassembles
complete lines across chunk boundaries and :func:`decode_stream` drives it
from an async chunk source.

Malformed lines do not end the stream: they are yielded as
:class:`~ucp_client.exceptions.DecodeError` items at the position where they
occurred. Blank lines and a trailing line without a newline produce nothing.
"""

from __future__ import annotations

from typing import AsyncIterable, AsyncIterator, List, Union

import httpx
from pydantic import ValidationError

from .classifier import classify_transport_error
from .exceptions import DecodeError, UcpError
from .logging import logger
from .types import MemoryResponse

StreamItem = Union[MemoryResponse, UcpError]


class LineBuffer:
    """Accumulates bytes and emits one item per complete line."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet terminated by a newline."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> List[StreamItem]:
        self._buffer.extend(chunk)
        # the buffered tail never holds a newline, so only a new chunk can end a line
        if b"\n" not in chunk:
            return []
        *lines, tail = self._buffer.split(b"\n")
        self._buffer = bytearray(tail)
        return [self._decode_line(bytes(line)) for line in lines if line.strip()]

    def _decode_line(self, line: bytes) -> StreamItem:
        try:
            text = line.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("ucp_stream_line_error", reason="utf-8", size=len(line))
            return DecodeError(
                "Invalid UTF-8 in response", line=line.decode("utf-8", "replace")
            )
        try:
            return MemoryResponse.model_validate_json(text)
        except ValidationError as exc:
            reason = exc.errors()[0]["msg"]
            logger.warning("ucp_stream_line_error", reason=reason, size=len(line))
            return DecodeError(reason, line=text)

    def clear(self) -> None:
        self._buffer.clear()


async def decode_stream(chunks: AsyncIterable[bytes]) -> AsyncIterator[StreamItem]:
    """Yield records (or per-line errors) as chunks arrive.

    A transport failure while reading is yielded as a final
    :class:`~ucp_client.exceptions.TransportError` and ends the stream.
    """
    buffer = LineBuffer()
    try:
        async for chunk in chunks:
            for item in buffer.feed(chunk):
                yield item
    except httpx.TransportError as exc:
        logger.error(
            "ucp_stream_transport_error", error=str(exc), discarded=buffer.pending
        )
        yield classify_transport_error(exc)
    finally:
        if buffer.pending:
            logger.debug("ucp_stream_partial_line_dropped", size=buffer.pending)
        buffer.clear()


__all__ = ["LineBuffer", "StreamItem", "decode_stream"]
