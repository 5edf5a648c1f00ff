"""
ollamalink Builders - Fluent request builders

Builders are immutable: every ``with_*`` call returns a new builder and
leaves the receiver untouched, so a partially configured builder can be
shared between tasks and branched freely.

The terminal method picks the streaming mode:
    - ``execute()`` sends ``stream=False`` and returns the complete response
    - ``stream(on_chunk)`` sends ``stream=True`` and feeds every chunk to the callback
    - ``chunks()`` sends ``stream=True`` and yields chunks as an async iterator

Example:
    base = client.chat().with_model("llama3.1").with_system_message("Be brief.")

    response = await base.with_message("user", "What is a monad?").execute()

    await base.with_message("user", "Write a haiku.").stream(
        lambda chunk: print(chunk.message.content, end="")
    )
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, AsyncIterator, Iterable, Optional, Tuple, Union

from .endpoints import OllamaAPI
from .errors import ValidationError
from .models import (
    ChatRequest,
    ChatResponse,
    CompletionRequest,
    CompletionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    Message,
    Options,
    Tool,
    ToolCallResult,
)
from .transport import ChunkCallback

Format = Union[str, dict, None]


def _apply_options(current: Options, options: Optional[Options], fields: dict) -> Options:
    base = options if options is not None else current
    return base.merge(**fields) if fields else base


@dataclass(frozen=True)
class ChatBuilder:
    """Accumulates a chat request."""
    api: OllamaAPI
    model: str = ""
    messages: Tuple[Message, ...] = ()
    tools: Tuple[Tool, ...] = ()
    format: Format = None
    options: Options = field(default_factory=Options)
    keep_alive: Optional[Union[str, int]] = None

    def with_model(self, model: str) -> "ChatBuilder":
        return replace(self, model=model)

    def with_system_message(self, content: str) -> "ChatBuilder":
        return replace(self, messages=self.messages + (Message.system(content),))

    def with_message(
        self, role: str, content: str, images: Optional[Iterable[str]] = None
    ) -> "ChatBuilder":
        message = Message(role=role, content=content, images=list(images) if images else None)
        return replace(self, messages=self.messages + (message,))

    def with_messages(self, messages: Iterable[Message]) -> "ChatBuilder":
        """Replace the whole conversation."""
        return replace(self, messages=tuple(messages))

    def with_tools(self, *tools: Tool) -> "ChatBuilder":
        return replace(self, tools=self.tools + tools)

    def with_tool_result(self, result: Any, name: Optional[str] = None) -> "ChatBuilder":
        """
        Append a tool-role message reporting a tool's output.

        Args:
            result: A ToolCallResult from the registry, or a raw value
            name: Tool name, used when ``result`` is a raw value
        """
        if isinstance(result, ToolCallResult):
            message = result.to_message()
        else:
            content = result if isinstance(result, str) else json.dumps(result, default=str)
            message = Message.tool(content, tool_name=name)
        return replace(self, messages=self.messages + (message,))

    def with_format(self, format: Format) -> "ChatBuilder":
        return replace(self, format=format)

    def with_options(self, options: Optional[Options] = None, **fields: Any) -> "ChatBuilder":
        """Replace the options with ``options`` and/or override individual fields."""
        return replace(self, options=_apply_options(self.options, options, fields))

    def with_temperature(self, temperature: float) -> "ChatBuilder":
        return self.with_options(temperature=temperature)

    def with_top_p(self, top_p: float) -> "ChatBuilder":
        return self.with_options(top_p=top_p)

    def with_top_k(self, top_k: int) -> "ChatBuilder":
        return self.with_options(top_k=top_k)

    def with_keep_alive(self, keep_alive: Union[str, int]) -> "ChatBuilder":
        return replace(self, keep_alive=keep_alive)

    def build(self, stream: bool = False) -> ChatRequest:
        """Assemble the request payload without sending it."""
        return ChatRequest(
            model=self.model,
            messages=list(self.messages),
            tools=list(self.tools) or None,
            format=self.format,
            options=None if self.options.is_empty() else self.options,
            stream=stream,
            keep_alive=self.keep_alive,
        )

    async def execute(self) -> ChatResponse:
        """Send with ``stream=False`` and return the complete response."""
        return await self.api.chat(self.build(stream=False))

    async def stream(self, on_chunk: ChunkCallback) -> None:
        """Send with ``stream=True``; every chunk is passed to ``on_chunk`` in order."""
        if on_chunk is None:
            raise ValidationError("on_chunk", "a callback is required when streaming")
        await self.api.chat(self.build(stream=True), on_chunk)

    def chunks(self) -> AsyncIterator[ChatResponse]:
        """Send with ``stream=True`` and iterate over the chunks."""
        return self.api.chat_stream(self.build(stream=True))


@dataclass(frozen=True)
class CompletionBuilder:
    """Accumulates a text completion request."""
    api: OllamaAPI
    model: str = ""
    prompt: Optional[str] = None
    suffix: Optional[str] = None
    system: Optional[str] = None
    images: Tuple[str, ...] = ()
    format: Format = None
    raw: Optional[bool] = None
    options: Options = field(default_factory=Options)
    keep_alive: Optional[Union[str, int]] = None

    def with_model(self, model: str) -> "CompletionBuilder":
        return replace(self, model=model)

    def with_prompt(self, prompt: str) -> "CompletionBuilder":
        return replace(self, prompt=prompt)

    def with_suffix(self, suffix: str) -> "CompletionBuilder":
        return replace(self, suffix=suffix)

    def with_system(self, system: str) -> "CompletionBuilder":
        return replace(self, system=system)

    def with_images(self, *images: str) -> "CompletionBuilder":
        return replace(self, images=self.images + images)

    def with_format(self, format: Format) -> "CompletionBuilder":
        return replace(self, format=format)

    def with_raw(self, raw: bool) -> "CompletionBuilder":
        return replace(self, raw=raw)

    def with_options(self, options: Optional[Options] = None, **fields: Any) -> "CompletionBuilder":
        return replace(self, options=_apply_options(self.options, options, fields))

    def with_temperature(self, temperature: float) -> "CompletionBuilder":
        return self.with_options(temperature=temperature)

    def with_top_p(self, top_p: float) -> "CompletionBuilder":
        return self.with_options(top_p=top_p)

    def with_top_k(self, top_k: int) -> "CompletionBuilder":
        return self.with_options(top_k=top_k)

    def with_keep_alive(self, keep_alive: Union[str, int]) -> "CompletionBuilder":
        return replace(self, keep_alive=keep_alive)

    def build(self, stream: bool = False) -> CompletionRequest:
        return CompletionRequest(
            model=self.model,
            prompt=self.prompt,
            suffix=self.suffix,
            system=self.system,
            images=list(self.images) or None,
            format=self.format,
            raw=self.raw,
            options=None if self.options.is_empty() else self.options,
            stream=stream,
            keep_alive=self.keep_alive,
        )

    async def execute(self) -> CompletionResponse:
        return await self.api.generate(self.build(stream=False))

    async def stream(self, on_chunk: ChunkCallback) -> None:
        if on_chunk is None:
            raise ValidationError("on_chunk", "a callback is required when streaming")
        await self.api.generate(self.build(stream=True), on_chunk)

    def chunks(self) -> AsyncIterator[CompletionResponse]:
        return self.api.generate_stream(self.build(stream=True))


@dataclass(frozen=True)
class EmbeddingsBuilder:
    """Accumulates an embeddings request. Embeddings never stream."""
    api: OllamaAPI
    model: str = ""
    inputs: Tuple[str, ...] = ()
    truncate: Optional[bool] = None
    options: Options = field(default_factory=Options)
    keep_alive: Optional[Union[str, int]] = None

    def with_model(self, model: str) -> "EmbeddingsBuilder":
        return replace(self, model=model)

    def with_input(self, text: str) -> "EmbeddingsBuilder":
        return replace(self, inputs=self.inputs + (text,))

    def with_inputs(self, texts: Iterable[str]) -> "EmbeddingsBuilder":
        """Replace all inputs."""
        return replace(self, inputs=tuple(texts))

    def with_truncate(self, truncate: bool) -> "EmbeddingsBuilder":
        return replace(self, truncate=truncate)

    def with_options(self, options: Optional[Options] = None, **fields: Any) -> "EmbeddingsBuilder":
        return replace(self, options=_apply_options(self.options, options, fields))

    def with_keep_alive(self, keep_alive: Union[str, int]) -> "EmbeddingsBuilder":
        return replace(self, keep_alive=keep_alive)

    def build(self) -> EmbeddingRequest:
        return EmbeddingRequest(
            model=self.model,
            input=list(self.inputs),
            truncate=self.truncate,
            options=None if self.options.is_empty() else self.options,
            keep_alive=self.keep_alive,
        )

    async def execute(self) -> EmbeddingResponse:
        return await self.api.embed(self.build())
