"""
Tests for tool_from_function schema generation.
"""

from typing import Annotated, Dict, List, Literal, Optional

from ollamalink.tools import tool_from_function


def get_weather(city: str, unit: Optional[Literal["celsius", "fahrenheit"]] = None) -> str:
    """Get the current weather for a city.

    Args:
        city: City name, e.g. "Paris"
        unit: Temperature unit. Defaults to the
            city's local convention.

    Returns:
        A short weather report
    """
    return "sunny"


class TestTypeMapping:

    def test_primitive_types(self):
        def f(a: str, b: int, c: float, d: bool):
            pass

        params = tool_from_function(f).function.parameters
        assert {n: p.type for n, p in params.properties.items()} == {
            "a": "string", "b": "integer", "c": "number", "d": "boolean",
        }

    def test_containers(self):
        def f(items: List[str], mapping: Dict[str, int], raw: list):
            pass

        props = tool_from_function(f).function.parameters.properties
        assert props["items"].type == "array"
        assert props["mapping"].type == "object"
        assert props["raw"].type == "array"

    def test_unannotated_defaults_to_string(self):
        def f(x):
            pass

        assert tool_from_function(f).function.parameters.properties["x"].type == "string"

    def test_pep604_optional(self):
        def f(limit: int | None = None):
            pass

        params = tool_from_function(f).function.parameters
        assert params.properties["limit"].type == "integer"
        assert params.required == []

    def test_literal_becomes_enum(self):
        props = tool_from_function(get_weather).function.parameters.properties
        assert props["unit"].type == "string"
        assert props["unit"].enum == ["celsius", "fahrenheit"]

    def test_integer_literal_has_no_enum(self):
        def f(level: Literal[1, 2, 3]):
            pass

        prop = tool_from_function(f).function.parameters.properties["level"]
        assert prop.type == "integer"
        assert prop.enum is None


class TestRequired:

    def test_required_excludes_defaults_and_optionals(self):
        def f(a: int, b: int = 2, c: Optional[int] = None, d: Optional[str] = None):
            pass

        assert tool_from_function(f).function.parameters.required == ["a"]

    def test_varargs_and_self_skipped(self):
        class Calculator:
            def add(self, a: int, *rest: int, **extra: str) -> int:
                return a

        params = tool_from_function(Calculator().add).function.parameters
        assert list(params.properties) == ["a"]


class TestDescriptions:

    def test_docstring_summary_and_args(self):
        tool = tool_from_function(get_weather)
        assert tool.type == "function"
        assert tool.function.name == "get_weather"
        assert tool.function.description == "Get the current weather for a city."

        props = tool.function.parameters.properties
        assert props["city"].description == 'City name, e.g. "Paris"'
        assert props["unit"].description == "Temperature unit. Defaults to the city's local convention."
        assert tool.function.parameters.required == ["city"]

    def test_annotated_description_wins(self):
        def search(query: Annotated[str, "Search keywords"]):
            """Search documents.

            Args:
                query: ignored in favour of the annotation
            """

        props = tool_from_function(search).function.parameters.properties
        assert props["query"].description == "Search keywords"
        assert tool_from_function(search).function.parameters.required == ["query"]

    def test_overrides(self):
        tool = tool_from_function(get_weather, name="weather", description="Weather lookup")
        assert tool.function.name == "weather"
        assert tool.function.description == "Weather lookup"

    def test_no_docstring_uses_name(self):
        def ping():
            pass

        tool = tool_from_function(ping)
        assert tool.function.description == "ping"
        assert tool.function.parameters.properties == {}

    def test_payload_shape(self):
        payload = tool_from_function(get_weather).to_payload()
        assert payload["function"]["parameters"]["type"] == "object"
        assert payload["function"]["parameters"]["properties"]["city"] == {
            "type": "string",
            "description": 'City name, e.g. "Paris"',
        }
