"""
ollamalink Errors - Exception hierarchy for the Ollama client

OllamaError
├── ValidationError        request rejected before any network call
├── TransportError         the HTTP exchange failed
│   ├── ConnectionFailedError
│   ├── RequestTimeoutError
│   ├── APIError           server answered with status >= 400
│   └── ResponseDecodeError
│       └── StreamDecodeError
│           └── StreamAbortedError   server sent {"error": ...} mid-stream
└── ToolError
    └── ToolNotFoundError
"""

from typing import Any, Optional


class OllamaError(Exception):
    """Base exception for all ollamalink errors."""


class ValidationError(OllamaError):
    """A request was malformed and was not sent."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"validation error: {message} (field: {field})")


class TransportError(OllamaError):
    """The HTTP exchange with the server failed."""


class ConnectionFailedError(TransportError):
    """The server could not be reached."""


class RequestTimeoutError(TransportError):
    """The request exceeded the configured timeout."""


class APIError(TransportError):
    """
    The server reported an error.

    Usually a status >= 400; a 200 whose JSON body is ``{"error": ...}``
    is reported with that 200 status.
    """

    def __init__(self, status_code: int, message: str = "", url: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.url = url
        if message:
            text = f"API request failed with status {status_code}: {message}"
        else:
            text = f"API request failed with status {status_code}"
        super().__init__(text)


class ResponseDecodeError(TransportError):
    """A response body could not be decoded into the expected shape."""


class StreamDecodeError(ResponseDecodeError):
    """
    A streamed message could not be decoded.

    Attributes:
        chunks_delivered: Chunks handed to the callback before the failure.
            Zero means nothing was delivered.
        line: 1-based line number of the offending message, if known
    """

    def __init__(self, message: str, chunks_delivered: int = 0, line: Optional[int] = None):
        self.chunks_delivered = chunks_delivered
        self.line = line
        super().__init__(message)

    @property
    def partial(self) -> bool:
        """True if some chunks were delivered before the failure."""
        return self.chunks_delivered > 0


class StreamAbortedError(StreamDecodeError):
    """The server ended a stream with an ``{"error": ...}`` line."""

    def __init__(self, message: str, chunks_delivered: int = 0, line: Optional[int] = None):
        self.message = message
        super().__init__(
            f"server aborted stream on line {line}: {message}",
            chunks_delivered=chunks_delivered,
            line=line,
        )


class ToolError(OllamaError):
    """Base class for tool registry errors."""


class ToolNotFoundError(ToolError):
    """No handler is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"tool not registered: {name}")
