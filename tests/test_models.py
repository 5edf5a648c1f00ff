"""Tests for ollamalink.models - wire types"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from ollamalink.models import (
    ChatResponse,
    CompletionRequest,
    Message,
    ModelManagementRequest,
    ModelProcess,
    Options,
    ToolCallFunction,
    ToolCallResult,
)


# =========================================================================
# Options
# =========================================================================


class TestOptions:

    def test_empty(self):
        assert Options().is_empty()
        assert not Options(seed=1).is_empty()

    def test_merge_returns_new(self):
        base = Options(temperature=0.5)
        merged = base.merge(top_k=10)
        assert base == Options(temperature=0.5)
        assert merged == Options(temperature=0.5, top_k=10)

    def test_frozen(self):
        with pytest.raises(PydanticValidationError):
            Options().temperature = 1.0

    def test_unknown_option_rejected(self):
        with pytest.raises(PydanticValidationError):
            Options(temprature=0.1)


# =========================================================================
# Request encoding
# =========================================================================


class TestRequestPayload:

    def test_unset_fields_omitted(self):
        payload = CompletionRequest(model="m", prompt="p").to_payload()
        assert payload == {"model": "m", "prompt": "p", "stream": False}

    def test_from_alias(self):
        request = ModelManagementRequest(model="new", from_="base")
        assert request.to_payload() == {"model": "new", "from": "base"}


# =========================================================================
# Response decoding
# =========================================================================


class TestResponseDecoding:

    def test_nanosecond_timestamp(self):
        response = ChatResponse.model_validate({
            "created_at": "2024-07-01T10:00:00.123456789Z", "done": True,
        })
        assert response.created_at.microsecond == 123456

    def test_unknown_fields_ignored(self):
        response = ChatResponse.model_validate({"done": True, "brand_new_field": 1})
        assert response.done is True

    def test_default_message(self):
        response = ChatResponse.model_validate({"done": False})
        assert response.message.role == "assistant"
        assert response.content == ""
        assert response.tool_calls == []
        assert not response.has_tool_calls

    def test_vram_size_alias(self):
        process = ModelProcess.model_validate({"name": "m", "vram_size": 1024})
        assert process.size_vram == 1024

    def test_string_tool_arguments(self):
        function = ToolCallFunction.model_validate({"name": "f", "arguments": '{"x": [1, 2]}'})
        assert function.arguments == {"x": [1, 2]}

    def test_null_tool_arguments(self):
        function = ToolCallFunction.model_validate({"name": "f", "arguments": None})
        assert function.arguments == {}


# =========================================================================
# Messages and tool results
# =========================================================================


class TestMessages:

    def test_constructors(self):
        assert Message.system("s").role == "system"
        assert Message.user("u", images=["img"]).images == ["img"]
        assert Message.assistant("a").role == "assistant"
        tool = Message.tool("42", tool_name="answer")
        assert (tool.role, tool.tool_name) == ("tool", "answer")

    def test_invalid_role(self):
        with pytest.raises(PydanticValidationError):
            Message(role="narrator", content="x")


class TestToolCallResult:

    def test_success(self):
        result = ToolCallResult.success({"sum": 3}, tool="add")
        assert result.ok and not result.failed
        assert result.metadata == {"tool": "add"}
        assert result.to_message().content == '{"sum": 3}'

    def test_success_string_result_is_verbatim(self):
        assert ToolCallResult.success("plain").to_message().content == "plain"

    def test_failure(self):
        result = ToolCallResult.failure("boom")
        assert result.status == "error"
        assert result.result is None
        assert result.metadata is None
        assert result.to_message().content == "Error: boom"
