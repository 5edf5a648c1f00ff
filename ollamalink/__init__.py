"""
ollamalink - Async Python client for the Ollama HTTP API

ollamalink talks to a local Ollama server: chat, text completion,
embeddings, model management and server status, with fluent request
builders and a registry for answering model-requested tool calls.

Key Features:
- Immutable fluent builders for chat, completion and embeddings
- Streaming via callback or async iterator
- Typed pydantic request/response models
- Thread-safe tool registry with a success/error result envelope
- Silent by default; opt-in diagnostics per client

Quick Start:
    from ollamalink import Ollama

    async with Ollama() as client:
        response = await (
            client.chat()
            .with_model("llama3.1")
            .with_message("user", "Why is the sky blue?")
            .execute()
        )
        print(response.content)

Streaming:
    await (
        client.chat()
        .with_model("llama3.1")
        .with_message("user", "Tell me a story")
        .stream(lambda chunk: print(chunk.content, end=""))
    )

    async for chunk in client.completion().with_model("llama3.1").with_prompt("Hi").chunks():
        print(chunk.response, end="")

Tools:
    from ollamalink import ToolRegistry, tool_from_function

    registry = ToolRegistry()
    registry.register_tool("multiply", lambda args: args["a"] * args["b"])
    result = registry.call_tool("multiply", {"a": 3, "b": 4})   # result.result == 12
"""

__version__ = "1.0.0"

# Client
from .client import Ollama
from .config import ClientConfig, load_config

# Builders & managers
from .builders import ChatBuilder, CompletionBuilder, EmbeddingsBuilder
from .managers import ModelManager, StatusManager

# Low-level
from .endpoints import OllamaAPI
from .transport import Transport
from .streaming import StreamDecoder

# Models
from .models import (
    ChatRequest,
    ChatResponse,
    CompletionRequest,
    CompletionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    Message,
    ModelInfo,
    ModelListResponse,
    ModelProcess,
    ModelProcessResponse,
    Options,
    ShowModelResponse,
    StatusResponse,
    Tool,
    ToolCall,
    ToolCallResult,
    ToolParam,
    VersionResponse,
)

# Tools
from .tools import ToolRegistry, tool_from_function

# Errors
from .errors import (
    APIError,
    ConnectionFailedError,
    OllamaError,
    RequestTimeoutError,
    ResponseDecodeError,
    StreamAbortedError,
    StreamDecodeError,
    ToolError,
    ToolNotFoundError,
    TransportError,
    ValidationError,
)


def version() -> str:
    """Library version."""
    return __version__


__all__ = [
    "__version__", "version",
    # Client
    "Ollama", "ClientConfig", "load_config",
    # Builders
    "ChatBuilder", "CompletionBuilder", "EmbeddingsBuilder",
    "ModelManager", "StatusManager",
    # Low-level
    "OllamaAPI", "Transport", "StreamDecoder",
    # Models
    "ChatRequest", "ChatResponse", "CompletionRequest", "CompletionResponse",
    "EmbeddingRequest", "EmbeddingResponse", "Message", "ModelInfo",
    "ModelListResponse", "ModelProcess", "ModelProcessResponse", "Options",
    "ShowModelResponse", "StatusResponse", "Tool", "ToolCall", "ToolCallResult",
    "ToolParam", "VersionResponse",
    # Tools
    "ToolRegistry", "tool_from_function",
    # Errors
    "OllamaError", "ValidationError", "TransportError", "ConnectionFailedError",
    "RequestTimeoutError", "APIError", "ResponseDecodeError", "StreamDecodeError",
    "StreamAbortedError", "ToolError", "ToolNotFoundError",
]
