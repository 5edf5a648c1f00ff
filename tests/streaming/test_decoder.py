"""
Tests for ollamalink Stream Decoder.

Tests:
- Framing across arbitrary read boundaries
- Blank lines and CRLF line endings
- Malformed lines and truncated streams
"""

import json

import pytest

from ollamalink.errors import StreamDecodeError
from ollamalink.streaming import StreamDecoder, decode_lines


DOCUMENTS = [
    {"message": {"role": "assistant", "content": "héllo"}, "done": False},
    {"message": {"role": "assistant", "content": " wörld ☃"}, "done": False},
    {"message": {"role": "assistant", "content": ""}, "done": True},
]

STREAM = b"".join(json.dumps(d, ensure_ascii=False).encode("utf-8") + b"\n" for d in DOCUMENTS)


def _split(data: bytes, cuts):
    parts, last = [], 0
    for cut in cuts:
        parts.append(data[last:cut])
        last = cut
    parts.append(data[last:])
    return parts


# ============================================================================
# Framing
# ============================================================================

class TestFraming:
    """Same bytes, any partition, same messages"""

    def test_single_read(self):
        assert decode_lines([STREAM]) == DOCUMENTS

    def test_one_byte_reads(self):
        reads = [STREAM[i:i + 1] for i in range(len(STREAM))]
        assert decode_lines(reads) == DOCUMENTS

    @pytest.mark.parametrize("cuts", [
        [5],
        [10, 11, 12],
        [len(STREAM) // 2],
        [len(STREAM) - 1],
    ])
    def test_arbitrary_boundaries(self, cuts):
        assert decode_lines(_split(STREAM, cuts)) == DOCUMENTS

    def test_split_inside_multibyte_character(self):
        cut = STREAM.index("☃".encode("utf-8")) + 1
        assert decode_lines([STREAM[:cut], STREAM[cut:]]) == DOCUMENTS

    def test_empty_reads_are_harmless(self):
        assert decode_lines([b"", STREAM, b""]) == DOCUMENTS

    def test_messages_released_only_at_newline(self):
        decoder = StreamDecoder()
        assert list(decoder.feed(b'{"a": 1}')) == []
        assert decoder.pending == 8
        assert list(decoder.feed(b"\n")) == [{"a": 1}]
        assert decoder.pending == 0

    def test_line_number_counts_lines(self):
        decoder = StreamDecoder()
        list(decoder.feed(b'{"a": 1}\n\n{"b": 2}\n'))
        assert decoder.line_number == 3


# ============================================================================
# Tolerated input
# ============================================================================

class TestTolerance:

    def test_blank_lines_skipped(self):
        assert decode_lines([b'\n{"a": 1}\n\n  \n{"b": 2}\n']) == [{"a": 1}, {"b": 2}]

    def test_crlf_line_endings(self):
        assert decode_lines([b'{"a": 1}\r\n{"b": 2}\r\n']) == [{"a": 1}, {"b": 2}]

    def test_trailing_whitespace_without_newline(self):
        assert decode_lines([b'{"a": 1}\n  ']) == [{"a": 1}]

    def test_empty_stream(self):
        assert decode_lines([]) == []


# ============================================================================
# Failures
# ============================================================================

class TestFailures:

    def test_truncated_final_line(self):
        with pytest.raises(StreamDecodeError) as exc_info:
            decode_lines([b'{"a": 1}\n{"b": '])
        assert "truncated" in str(exc_info.value)
        assert exc_info.value.line == 2

    def test_complete_document_without_newline_is_truncation(self):
        with pytest.raises(StreamDecodeError):
            decode_lines([b'{"a": 1}'])

    def test_invalid_json_line(self):
        with pytest.raises(StreamDecodeError) as exc_info:
            decode_lines([b'{"a": 1}\nnot json\n'])
        assert exc_info.value.line == 2

    def test_messages_before_bad_line_are_yielded(self):
        decoder = StreamDecoder()
        received = []
        with pytest.raises(StreamDecodeError):
            for message in decoder.feed(b'{"a": 1}\n{"b": 2}\n{oops\n'):
                received.append(message)
        assert received == [{"a": 1}, {"b": 2}]

    def test_invalid_utf8(self):
        with pytest.raises(StreamDecodeError):
            decode_lines([b'{"a": "\xff"}\n'])

    def test_feed_after_close(self):
        decoder = StreamDecoder()
        decoder.close()
        with pytest.raises(StreamDecodeError):
            decoder.feed(b"{}\n")

    def test_close_returns_undrained_messages(self):
        decoder = StreamDecoder()
        decoder.feed(b'{"a": 1}\n')   # iterator never consumed
        assert decoder.close() == [{"a": 1}]
