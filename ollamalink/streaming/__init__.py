"""
ollamalink Streaming - Framing for newline-delimited JSON responses
"""

from .decoder import StreamDecoder, decode_lines

__all__ = [
    "StreamDecoder",
    "decode_lines",
]
