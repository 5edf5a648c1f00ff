"""
ollamalink Models - Wire types for the Ollama HTTP API

Requests are encoded with ``to_payload()`` (snake_case keys, unset fields
omitted). Responses ignore keys they do not know so newer servers keep
decoding.
"""

import json
import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    field_validator,
)

Role = Literal["system", "user", "assistant", "tool"]

# Mapping of argument name to a JSON value (str, int, float, bool, None, list, dict)
ToolArguments = Dict[str, JsonValue]

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def _trim_fraction(value: Any) -> Any:
    """The server emits nanosecond timestamps; datetime holds microseconds."""
    if isinstance(value, str):
        return _FRACTION_RE.sub(r"\1", value, count=1)
    return value


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """Encode as a JSON-ready dict, leaving out unset fields."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class _Response(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, protected_namespaces=())

    @field_validator("created_at", "modified_at", "expires_at", mode="before", check_fields=False)
    @classmethod
    def trim_timestamps(cls, value: Any) -> Any:
        return _trim_fraction(value)


# =========================================================================
# Options
# =========================================================================


class Options(BaseModel):
    """
    Sampling and generation parameters.

    Every field is optional; a missing field means the server default.
    Instances are immutable, use ``merge`` to derive a changed copy.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    mirostat: Optional[int] = None
    mirostat_tau: Optional[float] = None
    mirostat_eta: Optional[float] = None
    repeat_penalty: Optional[float] = None
    repeat_last_n: Optional[int] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    tfs: Optional[float] = None
    top_a: Optional[float] = None
    typical_p: Optional[float] = None
    grammar: Optional[str] = None
    seed: Optional[int] = None
    num_predict: Optional[int] = None
    num_ctx: Optional[int] = None
    stop: Optional[List[str]] = None

    def merge(self, **changes: Any) -> "Options":
        """Return a new Options with ``changes`` applied on top of this one."""
        return Options(**{**self.model_dump(exclude_none=True), **changes})

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


# =========================================================================
# Tools
# =========================================================================


class ToolParam(BaseModel):
    """One parameter of a tool function."""
    type: str
    description: str = ""
    enum: Optional[List[str]] = None


class ToolParameters(BaseModel):
    """JSON schema object describing a tool function's parameters."""
    type: str = "object"
    properties: Dict[str, ToolParam] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)


class ToolFunction(BaseModel):
    """The function a model may invoke."""
    name: str
    description: str = ""
    parameters: ToolParameters = Field(default_factory=ToolParameters)


class Tool(BaseModel):
    """A callable capability declared to the model."""
    type: str = "function"
    function: ToolFunction

    @classmethod
    def define(
        cls,
        name: str,
        description: str = "",
        parameters: Optional[Dict[str, ToolParam]] = None,
        required: Optional[List[str]] = None,
    ) -> "Tool":
        """
        Shorthand for declaring a function tool.

        Example:
            Tool.define(
                "get_weather",
                "Get the weather for a city",
                {"city": ToolParam(type="string", description="City name")},
                required=["city"],
            )
        """
        return cls(function=ToolFunction(
            name=name,
            description=description,
            parameters=ToolParameters(
                properties=parameters or {},
                required=required or [],
            ),
        ))

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ToolCallFunction(BaseModel):
    """Name and arguments of a requested tool invocation."""
    model_config = ConfigDict(extra="ignore")

    name: str
    arguments: ToolArguments = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def decode_string_arguments(cls, value: Any) -> Any:
        # OpenAI-compatible servers send arguments as a JSON string
        if isinstance(value, str):
            return json.loads(value) if value.strip() else {}
        if value is None:
            return {}
        return value


class ToolCall(BaseModel):
    """The model's request to invoke a tool."""
    model_config = ConfigDict(extra="ignore")

    function: ToolCallFunction


class ToolCallResult(BaseModel):
    """
    Outcome of running a registered tool.

    ``status`` is "error" when the handler failed; ``error`` then holds the
    failure message. ``status`` is "success" otherwise and ``result`` holds
    the handler's return value.
    """
    status: Literal["success", "error"]
    result: Any = None
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success(cls, result: Any, **metadata: Any) -> "ToolCallResult":
        return cls(status="success", result=result, metadata=metadata or None)

    @classmethod
    def failure(cls, error: str, **metadata: Any) -> "ToolCallResult":
        return cls(status="error", error=error, metadata=metadata or None)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def failed(self) -> bool:
        return self.status == "error"

    @property
    def tool_name(self) -> Optional[str]:
        return (self.metadata or {}).get("tool")

    def to_message(self) -> "Message":
        """Build the tool-role message that reports this result to the model."""
        if self.failed:
            content = f"Error: {self.error}"
        elif isinstance(self.result, str):
            content = self.result
        else:
            content = json.dumps(self.result, ensure_ascii=False, default=str)
        return Message(role="tool", content=content, tool_name=self.tool_name)


# =========================================================================
# Messages
# =========================================================================


class Message(BaseModel):
    """A single chat message. Order within a conversation is significant."""
    model_config = ConfigDict(extra="ignore")

    role: Role
    content: str = ""
    images: Optional[List[str]] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_name: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str, images: Optional[List[str]] = None) -> "Message":
        return cls(role="user", content=content, images=images or None)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role="assistant", content=content)

    @classmethod
    def tool(cls, content: str, tool_name: Optional[str] = None) -> "Message":
        return cls(role="tool", content=content, tool_name=tool_name)


# =========================================================================
# Requests
# =========================================================================


class ChatRequest(_Request):
    model: str = ""
    messages: List[Message] = Field(default_factory=list)
    tools: Optional[List[Tool]] = None
    format: Optional[Union[str, Dict[str, Any]]] = None
    options: Optional[Options] = None
    stream: bool = False
    keep_alive: Optional[Union[str, int]] = None


class CompletionRequest(_Request):
    model: str = ""
    prompt: Optional[str] = None
    suffix: Optional[str] = None
    system: Optional[str] = None
    template: Optional[str] = None
    context: Optional[List[int]] = None
    images: Optional[List[str]] = None
    format: Optional[Union[str, Dict[str, Any]]] = None
    options: Optional[Options] = None
    stream: bool = False
    raw: Optional[bool] = None
    keep_alive: Optional[Union[str, int]] = None


class EmbeddingRequest(_Request):
    model: str = ""
    input: List[str] = Field(default_factory=list)
    truncate: Optional[bool] = None
    options: Optional[Options] = None
    keep_alive: Optional[Union[str, int]] = None
    # Accepted for symmetry; embeddings never stream
    stream: Optional[bool] = None


class ShowModelRequest(_Request):
    model: str
    verbose: Optional[bool] = None


class ModelManagementRequest(_Request):
    """Payload for create, delete, pull and push."""
    model: str
    from_: Optional[str] = Field(default=None, alias="from")
    modelfile: Optional[str] = None
    owner: Optional[str] = None
    insecure: Optional[bool] = None
    stream: Optional[bool] = None


class CopyModelRequest(_Request):
    source: str
    destination: str


# =========================================================================
# Responses
# =========================================================================


class _Timed(_Response):
    """Timing and token counters reported on final chunks (nanoseconds)."""
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


class ChatResponse(_Timed):
    model: str = ""
    created_at: Optional[datetime] = None
    message: Message = Field(default_factory=lambda: Message(role="assistant"))
    done: bool = False
    done_reason: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def content(self) -> str:
        return self.message.content

    @property
    def tool_calls(self) -> List[ToolCall]:
        return list(self.message.tool_calls or [])

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.message.tool_calls)


class CompletionResponse(_Timed):
    model: str = ""
    created_at: Optional[datetime] = None
    response: str = ""
    done: bool = False
    done_reason: Optional[str] = None
    context: Optional[List[int]] = None
    metadata: Optional[Dict[str, Any]] = None


class EmbeddingResponse(_Response):
    model: str = ""
    embeddings: List[List[float]] = Field(default_factory=list)
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None

    @property
    def dimensions(self) -> int:
        return len(self.embeddings[0]) if self.embeddings else 0


class ModelDetails(_Response):
    format: Optional[str] = None
    family: Optional[str] = None
    families: Optional[List[str]] = None
    parameter_size: Optional[str] = None
    quantization_level: Optional[str] = None
    parent_model: Optional[str] = None


class ModelInfo(_Response):
    name: str
    model: Optional[str] = None
    modified_at: Optional[datetime] = None
    size: int = 0
    digest: str = ""
    details: Optional[ModelDetails] = None


class ModelListResponse(_Response):
    models: List[ModelInfo] = Field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [m.name for m in self.models]


class ShowModelResponse(_Response):
    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    license: Optional[str] = None
    modelfile: Optional[str] = None
    parameters: Optional[str] = None
    template: Optional[str] = None
    system: Optional[str] = None
    details: Optional[ModelDetails] = None
    model_info: Optional[Dict[str, Any]] = None
    capabilities: Optional[List[str]] = None


class VersionResponse(_Response):
    version: str


class ModelProcess(_Response):
    name: str
    model: Optional[str] = None
    size: int = 0
    digest: str = ""
    expires_at: Optional[datetime] = None
    size_vram: int = Field(default=0, validation_alias=AliasChoices("size_vram", "vram_size"))
    details: Optional[ModelDetails] = None


class ModelProcessResponse(_Response):
    models: List[ModelProcess] = Field(default_factory=list)


class StatusResponse(_Response):
    """Final status of create, pull and push."""
    status: str = ""
    digest: Optional[str] = None
    total: Optional[int] = None
    completed: Optional[int] = None
