"""
ollamalink Client - Application entry point
"""

import logging
from typing import Optional, TextIO, Union

import httpx

from .builders import ChatBuilder, CompletionBuilder, EmbeddingsBuilder
from .config import ClientConfig, load_config
from .endpoints import OllamaAPI
from .managers import ModelManager, StatusManager
from .transport import Transport


class Ollama:
    """
    Client for a local Ollama server.

    One instance owns one HTTP connection pool and is safe to share between
    tasks. Builders created from it are independent of each other.

    Args:
        config: ClientConfig, or path to a YAML config file. Defaults to
            ``http://localhost:11434`` with a 30s timeout.
        logger: Diagnostic logger; a silent one is created when omitted
        http_client: Pre-built httpx.AsyncClient (the caller closes it)

    Example:
        async with Ollama() as client:
            response = await (
                client.chat()
                .with_model("llama3.1")
                .with_message("user", "Why is the sky blue?")
                .execute()
            )
            print(response.content)
    """

    def __init__(
        self,
        config: Union[ClientConfig, str, None] = None,
        logger: Optional[logging.Logger] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if isinstance(config, str):
            config = load_config(config)
        self._transport = Transport(config, logger=logger, http_client=http_client)
        self._api = OllamaAPI(self._transport)

    @classmethod
    def from_env(cls, **kwargs) -> "Ollama":
        """Build a client configured from OLLAMA_* environment variables."""
        return cls(ClientConfig.from_env(), **kwargs)

    @property
    def config(self) -> ClientConfig:
        return self._transport.config

    @property
    def raw_client(self) -> OllamaAPI:
        """Endpoint operations without the builder layer."""
        return self._api

    @property
    def logger(self) -> logging.Logger:
        return self._transport.logger

    def chat(self) -> ChatBuilder:
        return ChatBuilder(self._api)

    def completion(self) -> CompletionBuilder:
        return CompletionBuilder(self._api)

    def embeddings(self) -> EmbeddingsBuilder:
        return EmbeddingsBuilder(self._api)

    def models(self) -> ModelManager:
        return ModelManager(self._api)

    def status(self) -> StatusManager:
        return StatusManager(self._api)

    def set_log_level(self, level: Union[str, int]) -> None:
        """Change this client's log level; a silent client starts logging to stderr."""
        self._transport.set_log_level(level)

    def set_log_output(self, stream: TextIO) -> None:
        self._transport.set_log_output(stream)

    async def aclose(self) -> None:
        await self._transport.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"<Ollama base_url={self.config.base_url!r}>"
