"""
ollamalink Stream Decoder - Newline-delimited JSON framing

The server streams one JSON document per line. Network reads can split a
line anywhere (even inside a multi-byte UTF-8 character), so the decoder
buffers bytes until a newline arrives and only then decodes the line.

Usage:
    decoder = StreamDecoder()
    async for data in response.aiter_bytes():
        for message in decoder.feed(data):
            handle(message)
    decoder.close()   # raises if the stream ended mid-line
"""

import json
from typing import Any, Iterable, Iterator, List

from ..errors import StreamDecodeError


class StreamDecoder:
    """
    Incremental NDJSON decoder.

    Feeding the same bytes in any partition produces the same messages in the
    same order. A stream must end on a line boundary; trailing bytes without a
    newline are reported as truncation by ``close()``.
    """

    def __init__(self):
        self._buffer = bytearray()
        self._line_number = 0
        self._closed = False

    @property
    def line_number(self) -> int:
        """Number of lines consumed so far (including blank ones)."""
        return self._line_number

    @property
    def pending(self) -> int:
        """Bytes buffered after the last newline."""
        return len(self._buffer)

    def feed(self, data: bytes) -> Iterator[Any]:
        """
        Add bytes from one read.

        Returns:
            An iterator over the messages completed so far, in stream order.
            Messages are decoded lazily, so every message before a malformed
            line is yielded before the error is raised.

        Raises:
            StreamDecodeError: A completed line is not valid JSON (raised
                while iterating)
        """
        if self._closed:
            raise StreamDecodeError("stream decoder is closed", line=self._line_number)
        self._buffer.extend(data)
        return self._drain()

    def close(self) -> List[Any]:
        """
        Mark end of stream.

        Returns:
            Complete messages still buffered (only when an earlier ``feed``
            iterator was not exhausted)

        Raises:
            StreamDecodeError: The stream ended with an unterminated line
        """
        messages = list(self._drain())
        self._closed = True
        remainder = bytes(self._buffer)
        self._buffer.clear()
        if remainder.strip():
            raise StreamDecodeError(
                f"stream truncated: {len(remainder)} bytes after the last newline "
                f"(line {self._line_number + 1})",
                line=self._line_number + 1,
            )
        return messages

    def _drain(self) -> Iterator[Any]:
        while True:
            newline = self._buffer.find(b"\n")
            if newline < 0:
                return
            line = bytes(self._buffer[:newline])
            del self._buffer[:newline + 1]
            self._line_number += 1

            message = self._decode_line(line)
            if message is not _BLANK:
                yield message

    def _decode_line(self, line: bytes) -> Any:
        if not line.strip():
            return _BLANK
        try:
            return json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StreamDecodeError(
                f"invalid JSON on line {self._line_number}: {e}",
                line=self._line_number,
            ) from e


_BLANK = object()


def decode_lines(chunks: Iterable[bytes]) -> List[Any]:
    """Decode a complete stream given as a sequence of reads."""
    decoder = StreamDecoder()
    messages = []
    for chunk in chunks:
        messages.extend(decoder.feed(chunk))
    messages.extend(decoder.close())
    return messages
