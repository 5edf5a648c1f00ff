"""
ollamalink Tools - Tool declarations and the handler registry
"""

from .registry import ToolHandler, ToolRegistry
from .schema import tool_from_function

__all__ = [
    "ToolHandler",
    "ToolRegistry",
    "tool_from_function",
]
