"""
ollamalink Endpoints - One operation per Ollama REST endpoint

Streaming contract for chat and generate:
    - ``stream=True``: every chunk goes to ``on_chunk`` in arrival order and
      the call returns None once the stream has ended.
    - ``stream=False``: ``on_chunk`` is never called and the single, complete
      response is returned.

Every other endpoint never streams. A ``stream`` flag set on such a request is
forced to False (non-streaming path) rather than rejected.

Usage:
    api = OllamaAPI(Transport(ClientConfig()))

    response = await api.chat(ChatRequest(
        model="llama3.1",
        messages=[Message.user("Why is the sky blue?")],
    ))
    print(response.message.content)

    await api.chat(request.model_copy(update={"stream": True}), on_chunk=print)
"""

from typing import AsyncIterator, Optional

from .errors import ValidationError
from .models import (
    ChatRequest,
    ChatResponse,
    CompletionRequest,
    CompletionResponse,
    CopyModelRequest,
    EmbeddingRequest,
    EmbeddingResponse,
    ModelListResponse,
    ModelManagementRequest,
    ModelProcessResponse,
    ShowModelRequest,
    ShowModelResponse,
    StatusResponse,
    VersionResponse,
)
from .transport import ChunkCallback, Transport

CHAT_PATH = "/api/chat"
GENERATE_PATH = "/api/generate"
EMBED_PATH = "/api/embed"
TAGS_PATH = "/api/tags"
SHOW_PATH = "/api/show"
CREATE_PATH = "/api/create"
DELETE_PATH = "/api/delete"
COPY_PATH = "/api/copy"
PULL_PATH = "/api/pull"
PUSH_PATH = "/api/push"
VERSION_PATH = "/api/version"
PS_PATH = "/api/ps"


def _require(field: str, value: Optional[str]) -> None:
    if not value or not value.strip():
        raise ValidationError(field, f"{field} is required", value)


class OllamaAPI:
    """
    Endpoint operations bound to a shared Transport.

    Holds no per-call state; safe to use from many tasks at once.
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    @property
    def logger(self):
        return self.transport.logger

    # =========================================================================
    # Chat / Generate (streaming-capable)
    # =========================================================================

    async def chat(
        self,
        request: ChatRequest,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> Optional[ChatResponse]:
        """
        Send a chat request.

        Args:
            request: Chat payload; ``request.stream`` selects the mode
            on_chunk: Required when streaming, ignored otherwise

        Returns:
            The complete response, or None when streaming

        Raises:
            ValidationError: Missing model, no messages, or streaming without a callback
        """
        _require("model", request.model)
        if not request.messages:
            raise ValidationError("messages", "at least one message is required")
        self.logger.debug(f"Processing chat request to model: {request.model}")

        if request.stream:
            if on_chunk is None:
                raise ValidationError("on_chunk", "a callback is required when streaming")
            self.logger.debug("Using streaming mode for chat request")
            await self.transport.invoke_streaming(
                "POST", CHAT_PATH, request, on_chunk, response_model=ChatResponse
            )
            return None

        self.logger.debug("Using non-streaming mode for chat request")
        try:
            response = await self.transport.invoke(
                "POST", CHAT_PATH, request, response_model=ChatResponse
            )
        except Exception as e:
            self.logger.error(f"Chat request failed: {e}")
            raise
        self.logger.debug("Successfully completed chat request")
        return response

    async def chat_stream(self, request: ChatRequest) -> AsyncIterator[ChatResponse]:
        """Stream a chat request as an async iterator of chunks."""
        _require("model", request.model)
        if not request.messages:
            raise ValidationError("messages", "at least one message is required")
        request = request.model_copy(update={"stream": True})
        async for chunk in self.transport.stream(
            "POST", CHAT_PATH, request, response_model=ChatResponse
        ):
            yield chunk

    async def generate(
        self,
        request: CompletionRequest,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> Optional[CompletionResponse]:
        """
        Send a text completion request.

        Same streaming contract as ``chat``.
        """
        _require("model", request.model)
        self.logger.debug(f"Processing completion request to model: {request.model}")

        if request.stream:
            if on_chunk is None:
                raise ValidationError("on_chunk", "a callback is required when streaming")
            self.logger.debug("Using streaming mode for completion request")
            await self.transport.invoke_streaming(
                "POST", GENERATE_PATH, request, on_chunk, response_model=CompletionResponse
            )
            return None

        self.logger.debug("Using non-streaming mode for completion request")
        try:
            response = await self.transport.invoke(
                "POST", GENERATE_PATH, request, response_model=CompletionResponse
            )
        except Exception as e:
            self.logger.error(f"Completion request failed: {e}")
            raise
        self.logger.debug("Successfully completed text generation request")
        return response

    async def generate_stream(self, request: CompletionRequest) -> AsyncIterator[CompletionResponse]:
        """Stream a completion request as an async iterator of chunks."""
        _require("model", request.model)
        request = request.model_copy(update={"stream": True})
        async for chunk in self.transport.stream(
            "POST", GENERATE_PATH, request, response_model=CompletionResponse
        ):
            yield chunk

    # =========================================================================
    # Embeddings
    # =========================================================================

    async def embed(self, request: EmbeddingRequest) -> EmbeddingResponse:
        """Generate one embedding vector per input string."""
        _require("model", request.model)
        if not request.input:
            raise ValidationError("input", "at least one input string is required")
        if request.stream:
            self.logger.debug("Embeddings never stream; sending as a single request")
        request = request.model_copy(update={"stream": None})

        self.logger.debug(f"Processing embeddings request for model: {request.model}")
        response = await self.transport.invoke(
            "POST", EMBED_PATH, request, response_model=EmbeddingResponse
        )
        self.logger.debug(f"Successfully generated embeddings, count: {len(response.embeddings)}")
        return response

    # =========================================================================
    # Model management
    # =========================================================================

    async def list_models(self) -> ModelListResponse:
        """List models available locally."""
        self.logger.debug("Retrieving list of available models")
        response = await self.transport.invoke("GET", TAGS_PATH, response_model=ModelListResponse)
        self.logger.debug(f"Retrieved {len(response.models)} models")
        return response

    async def show_model(self, request: ShowModelRequest) -> ShowModelResponse:
        """Show details (modelfile, parameters, template) for one model."""
        _require("model", request.model)
        self.logger.debug(f"Retrieving details for model: {request.model}")
        return await self.transport.invoke(
            "POST", SHOW_PATH, request, response_model=ShowModelResponse
        )

    async def create_model(self, request: ModelManagementRequest) -> StatusResponse:
        """Create a model from another model or a modelfile."""
        _require("model", request.model)
        self.logger.debug(f"Creating new model: {request.model}")
        response = await self._manage(CREATE_PATH, request)
        self.logger.info(f"Successfully created model: {request.model}")
        return response

    async def delete_model(self, name: str) -> None:
        """Delete a local model."""
        _require("model", name)
        self.logger.debug(f"Deleting model: {name}")
        await self.transport.invoke("DELETE", DELETE_PATH, ModelManagementRequest(model=name))
        self.logger.info(f"Successfully deleted model: {name}")

    async def copy_model(self, source: str, destination: str) -> None:
        """Copy a model under a new name."""
        _require("source", source)
        _require("destination", destination)
        self.logger.debug(f"Copying model from {source} to {destination}")
        await self.transport.invoke(
            "POST", COPY_PATH, CopyModelRequest(source=source, destination=destination)
        )
        self.logger.info(f"Successfully copied model from {source} to {destination}")

    async def pull_model(self, name: str, insecure: bool = False) -> StatusResponse:
        """Download a model from the registry."""
        _require("model", name)
        self.logger.debug(f"Pulling model: {name}")
        response = await self._manage(
            PULL_PATH, ModelManagementRequest(model=name, insecure=insecure or None)
        )
        self.logger.info(f"Successfully pulled model: {name}")
        return response

    async def push_model(self, name: str, insecure: bool = False) -> StatusResponse:
        """Upload a model to the registry."""
        _require("model", name)
        self.logger.debug(f"Pushing model: {name}")
        response = await self._manage(
            PUSH_PATH, ModelManagementRequest(model=name, insecure=insecure or None)
        )
        self.logger.info(f"Successfully pushed model: {name}")
        return response

    async def _manage(self, path: str, request: ModelManagementRequest) -> StatusResponse:
        # The server streams progress unless told otherwise
        if request.stream:
            self.logger.debug(f"{path} never streams; sending as a single request")
        request = request.model_copy(update={"stream": False})
        return await self.transport.invoke("POST", path, request, response_model=StatusResponse)

    # =========================================================================
    # Status
    # =========================================================================

    async def version(self) -> VersionResponse:
        """Get the server version."""
        self.logger.debug("Retrieving API version")
        response = await self.transport.invoke("GET", VERSION_PATH, response_model=VersionResponse)
        self.logger.debug(f"API version: {response.version}")
        return response

    async def running_processes(self) -> ModelProcessResponse:
        """List models currently loaded in memory."""
        self.logger.debug("Retrieving list of running processes")
        response = await self.transport.invoke("GET", PS_PATH, response_model=ModelProcessResponse)
        self.logger.debug(f"Retrieved {len(response.models)} running processes")
        return response

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
