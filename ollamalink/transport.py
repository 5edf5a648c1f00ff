"""
ollamalink Transport - HTTP request/response pipeline

Issues JSON requests against the configured server and either decodes one
JSON document or streams newline-delimited JSON chunks to a consumer.

Usage:
    transport = Transport(ClientConfig())

    version = await transport.invoke("GET", "/api/version", response_model=VersionResponse)

    async def on_chunk(chunk: ChatResponse):
        print(chunk.message.content, end="")

    await transport.invoke_streaming(
        "POST", "/api/chat", request, on_chunk, response_model=ChatResponse
    )
"""

import inspect
import json
import logging
from typing import (
    Any, AsyncGenerator, Awaitable, Callable, Dict, Optional, TextIO, Type, TypeVar, Union
)

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .config import ClientConfig
from .errors import (
    APIError,
    ConnectionFailedError,
    RequestTimeoutError,
    ResponseDecodeError,
    StreamAbortedError,
    StreamDecodeError,
)
from .log import build_logger, set_level, set_output
from .streaming.decoder import StreamDecoder

M = TypeVar("M", bound=BaseModel)

# Called once per chunk; may return an awaitable, which is awaited before the next read
ChunkCallback = Callable[[Any], Union[None, Awaitable[None]]]

Body = Union[BaseModel, Dict[str, Any], None]


class Transport:
    """
    Thin async HTTP layer shared by every endpoint operation.

    The transport holds no per-request state, so one instance can serve many
    concurrent calls. Connection reuse is left to httpx.

    Args:
        config: Base URL, timeout, API key and debug flag
        logger: Diagnostic sink; a silent logger is created when omitted
        http_client: Pre-built httpx.AsyncClient (not closed by the transport)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        logger: Optional[logging.Logger] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or ClientConfig()
        self.logger = logger or build_logger(
            debug=self.config.debug, level=self.config.log_level
        )
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout),
        )

    # ── logging ──

    def set_log_level(self, level: Union[str, int]) -> None:
        """Change this transport's log level (NONE, ERROR, WARN, INFO, DEBUG)."""
        set_level(self.logger, level)

    def set_log_output(self, stream: TextIO) -> None:
        """Send this transport's log output to ``stream``."""
        set_output(self.logger, stream)

    # ── requests ──

    async def invoke(
        self,
        method: str,
        endpoint: str,
        body: Body = None,
        response_model: Optional[Type[M]] = None,
    ) -> Optional[M]:
        """
        Make a single-shot request.

        Args:
            method: HTTP verb
            endpoint: Path relative to the base URL (e.g. "/api/tags")
            body: Request payload; None sends an empty body
            response_model: Model to decode the body into; None discards it

        Returns:
            The decoded response, or None when no model was requested

        Raises:
            APIError: Status code >= 400, or an ``{"error": ...}`` body
            ResponseDecodeError: Body is not valid JSON for ``response_model``
            RequestTimeoutError, ConnectionFailedError: Network failures
        """
        url = self._url(endpoint)
        self.logger.debug(f"Making {method} request to {url}")
        request = self._build_request(method, endpoint, body)

        response = await self._send(request, stream=False)
        try:
            self.logger.debug(f"Received response with status: {response.status_code}")
            await self._raise_for_status(response)

            content = response.content
            if response_model is None:
                return None

            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(f"Response body: {content.decode('utf-8', 'replace')}")
            return self._decode_document(response, response_model)
        finally:
            await response.aclose()

    async def invoke_streaming(
        self,
        method: str,
        endpoint: str,
        body: Body,
        on_chunk: ChunkCallback,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> int:
        """
        Make a streaming request and hand each chunk to ``on_chunk``.

        Chunks are delivered one at a time, in arrival order; the next read
        starts only after the callback (and any awaitable it returns) is done.
        Exceptions raised by the callback propagate unchanged.

        Returns:
            Number of chunks delivered

        Raises:
            APIError: Status code >= 400 (no chunk is delivered)
            StreamDecodeError: A chunk was malformed or the stream was
                truncated; ``chunks_delivered`` tells how many got through
            StreamAbortedError: The server sent an ``{"error": ...}`` line;
                that line is not delivered
        """
        delivered = 0
        chunks = self.stream(method, endpoint, body, response_model)
        try:
            async for chunk in chunks:
                result = on_chunk(chunk)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
        finally:
            await chunks.aclose()
        self.logger.debug("Streaming request completed successfully")
        return delivered

    async def stream(
        self,
        method: str,
        endpoint: str,
        body: Body,
        response_model: Optional[Type[M]] = None,
    ) -> AsyncGenerator[Any, None]:
        """
        Make a streaming request and yield decoded chunks.

        Yields dicts when ``response_model`` is None, model instances otherwise.
        """
        url = self._url(endpoint)
        self.logger.debug(f"Making streaming {method} request to {url}")
        request = self._build_request(method, endpoint, body)

        response = await self._send(request, stream=True)
        try:
            self.logger.debug(f"Received streaming response with status: {response.status_code}")
            await self._raise_for_status(response)

            decoder = StreamDecoder()
            delivered = 0
            debug = self.logger.isEnabledFor(logging.DEBUG)
            try:
                async for data in response.aiter_bytes():
                    for message in decoder.feed(data):
                        if debug:
                            self.logger.debug(f"Stream chunk: {json.dumps(message)}")
                        yield self._validate_chunk(message, response_model, delivered, decoder)
                        delivered += 1
                for message in decoder.close():
                    yield self._validate_chunk(message, response_model, delivered, decoder)
                    delivered += 1
            except StreamDecodeError as e:
                e.chunks_delivered = delivered
                self.logger.error(f"Failed to decode stream after {delivered} chunks: {e}")
                raise
            except httpx.TimeoutException as e:
                self.logger.error(f"Stream timed out after {delivered} chunks: {e}")
                raise RequestTimeoutError(f"Stream from {url} timed out: {e}") from e
            except httpx.TransportError as e:
                self.logger.error(f"Error reading stream after {delivered} chunks: {e}")
                raise ConnectionFailedError(f"Stream from {url} failed: {e}") from e

            self.logger.debug(f"End of stream reached after {delivered} chunks")
        finally:
            await response.aclose()

    async def close(self) -> None:
        """Close the HTTP client if the transport created it."""
        if self._owns_client:
            await self._client.aclose()

    aclose = close

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ── internals ──

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url}{endpoint}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _encode_body(self, body: Body) -> bytes:
        if body is None:
            return b""
        if isinstance(body, BaseModel):
            payload = body.model_dump(mode="json", exclude_none=True, by_alias=True)
        else:
            payload = body
        return json.dumps(payload).encode("utf-8")

    def _build_request(self, method: str, endpoint: str, body: Body) -> httpx.Request:
        try:
            content = self._encode_body(body)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Failed to marshal request body: {e}")
            raise

        if content and self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Request body: {content.decode('utf-8')}")

        return self._client.build_request(
            method,
            self._url(endpoint),
            content=content,
            headers=self._headers(),
            timeout=httpx.Timeout(self.config.timeout),
        )

    async def _send(self, request: httpx.Request, stream: bool) -> httpx.Response:
        try:
            return await self._client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            self.logger.error(f"Request to {request.url} timed out: {e}")
            raise RequestTimeoutError(
                f"Request to {request.url} timed out after {self.config.timeout}s"
            ) from e
        except httpx.TransportError as e:
            self.logger.error(f"Request to {request.url} failed: {e}")
            raise ConnectionFailedError(f"Request to {request.url} failed: {e}") from e

    async def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code < 400:
            return

        await response.aread()
        message = _error_message(response)
        self.logger.error(
            f"API request failed with status: {response.status_code} {message}".rstrip()
        )
        raise APIError(response.status_code, message, url=str(response.request.url))

    def _decode_document(self, response: httpx.Response, response_model: Type[M]) -> M:
        try:
            data = json.loads(response.content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to decode response: {e}")
            raise ResponseDecodeError(f"Malformed JSON response: {e}") from e

        error = _server_error(data)
        if error is not None:
            self.logger.error(f"API reported an error with status {response.status_code}: {error}")
            raise APIError(response.status_code, error, url=str(response.request.url))

        try:
            result = response_model.model_validate(data)
        except PydanticValidationError as e:
            self.logger.error(f"Response does not match {response_model.__name__}: {e}")
            raise ResponseDecodeError(
                f"Response does not match {response_model.__name__}: {e}"
            ) from e

        self.logger.debug("Successfully decoded response")
        return result

    def _validate_chunk(
        self,
        message: Any,
        response_model: Optional[Type[M]],
        delivered: int,
        decoder: StreamDecoder,
    ) -> Any:
        error = _server_error(message)
        if error is not None:
            raise StreamAbortedError(error, chunks_delivered=delivered, line=decoder.line_number)
        if response_model is None:
            return message
        try:
            return response_model.model_validate(message)
        except PydanticValidationError as e:
            raise StreamDecodeError(
                f"Chunk on line {decoder.line_number} does not match "
                f"{response_model.__name__}: {e}",
                chunks_delivered=delivered,
                line=decoder.line_number,
            ) from e


def _error_message(response: httpx.Response) -> str:
    """Pull the server's error text out of an error response."""
    text = response.text.strip()
    if not text:
        return response.reason_phrase or ""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text
    error = _server_error(data)
    return text if error is None else error


def _server_error(data: Any) -> Optional[str]:
    """Return the text of an ``{"error": "..."}`` document, else None."""
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return None
