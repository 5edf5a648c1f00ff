"""
Build ``Tool`` declarations from typed Python functions.

Parameter types come from the signature's type hints, the tool description
from the first docstring paragraph, and per-parameter descriptions from
either ``Annotated[T, "description"]`` or a Google-style ``Args:`` section.

Usage::

    def get_weather(city: str, unit: Optional[str] = None) -> str:
        \"\"\"Get the current weather.

        Args:
            city: City name
            unit: "celsius" or "fahrenheit"
        \"\"\"

    tool = tool_from_function(get_weather)
    tool.function.parameters.required == ["city"]
"""

import inspect
import re
import types
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from ..models import Tool, ToolParam

_NoneType = type(None)
_UNION_TYPES = (Union, types.UnionType)
_ARG_LINE = re.compile(r"^\s*(\*{0,2}\w+)\s*(?:\([^)]*\))?\s*:\s*(.*)$")


def _unwrap_annotated(annotation: Any) -> Any:
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


def _annotated_description(annotation: Any) -> Optional[str]:
    if get_origin(annotation) is not Annotated:
        return None
    for extra in get_args(annotation)[1:]:
        if isinstance(extra, str):
            return extra
    return None


def _is_optional(annotation: Any) -> bool:
    return get_origin(annotation) in _UNION_TYPES and _NoneType in get_args(annotation)


def _json_type(annotation: Any) -> str:
    """Map a Python annotation to a JSON schema type name."""
    base = _unwrap_annotated(annotation)

    if get_origin(base) in _UNION_TYPES:
        args = [a for a in get_args(base) if a is not _NoneType]
        if len(args) == 1:
            return _json_type(args[0])
        return "string"

    origin = get_origin(base)
    if origin is Literal:
        return _json_type(type(get_args(base)[0]))

    # bool before int: bool is a subclass of int
    if base is bool:
        return "boolean"
    if base is int:
        return "integer"
    if base is float:
        return "number"
    if base is str:
        return "string"
    if base in (list, tuple) or origin in (list, tuple):
        return "array"
    if base is dict or origin is dict:
        return "object"
    return "string"


def _literal_values(annotation: Any) -> Optional[List[str]]:
    """Enum for a ``Literal`` of strings; other literals keep only their type."""
    base = _unwrap_annotated(annotation)
    if _is_optional(base):
        base = next(a for a in get_args(base) if a is not _NoneType)
    if get_origin(base) is not Literal:
        return None
    values = get_args(base)
    if all(isinstance(v, str) for v in values):
        return list(values)
    return None


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def _parse_docstring(doc: str) -> Tuple[str, Dict[str, str]]:
    """Split a docstring into its summary and the ``Args:`` descriptions."""
    if not doc:
        return "", {}

    summary = doc.split("\n\n")[0].strip().replace("\n", " ")
    descriptions: Dict[str, str] = {}
    lines = doc.splitlines()

    try:
        start = next(
            i for i, line in enumerate(lines)
            if line.strip() in ("Args:", "Arguments:", "Parameters:")
        )
    except StopIteration:
        return summary, descriptions

    section_indent = _indent(lines[start])
    arg_indent = None
    current = None

    for line in lines[start + 1:]:
        if not line.strip():
            continue
        indent = _indent(line)
        if indent <= section_indent:
            break
        if arg_indent is None:
            arg_indent = indent

        match = _ARG_LINE.match(line)
        if indent == arg_indent and match:
            current = match.group(1).lstrip("*")
            descriptions[current] = match.group(2).strip()
        elif current is not None:
            descriptions[current] = f"{descriptions[current]} {line.strip()}".strip()

    return summary, descriptions


def tool_from_function(
    func: Callable,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Tool:
    """
    Declare ``func`` as a tool the model may call.

    A parameter is required when it has no default and is not Optional.
    ``self``/``cls`` and ``*args``/``**kwargs`` are skipped.

    Args:
        func: Function whose signature describes the tool
        name: Tool name (defaults to ``func.__name__``)
        description: Tool description (defaults to the docstring summary)
    """
    summary, arg_docs = _parse_docstring(inspect.getdoc(func) or "")
    signature = inspect.signature(func)
    try:
        hints = get_type_hints(func, include_extras=True)
    except (NameError, TypeError):
        hints = {}

    properties: Dict[str, ToolParam] = {}
    required: List[str] = []

    for param_name, param in signature.parameters.items():
        if param_name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = hints.get(param_name, param.annotation)
        if annotation is inspect.Parameter.empty:
            annotation = str

        properties[param_name] = ToolParam(
            type=_json_type(annotation),
            description=_annotated_description(annotation) or arg_docs.get(param_name, ""),
            enum=_literal_values(annotation),
        )

        has_default = param.default is not inspect.Parameter.empty
        if not has_default and not _is_optional(_unwrap_annotated(annotation)):
            required.append(param_name)

    tool_name = name or func.__name__
    return Tool.define(
        tool_name,
        description if description is not None else (summary or tool_name),
        properties,
        required=required,
    )
