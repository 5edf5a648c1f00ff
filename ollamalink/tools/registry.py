"""
ollamalink Tool Registry - Named handlers for model-requested tool calls
"""

import inspect
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional

from ..errors import ToolError, ToolNotFoundError
from ..models import ChatResponse, ToolCallResult

logger = logging.getLogger(__name__)

# Receives the call's arguments; returns the result or raises on failure
ToolHandler = Callable[[Dict[str, Any]], Any]


class _ReadWriteLock:
    """Many readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class ToolRegistry:
    """
    Maps tool names to handlers and runs them with a uniform result envelope.

    Registration takes the lock exclusively; lookups share it. Handlers run
    after the lock is released, so concurrent calls never block each other
    and a handler may register further tools.

    Usage:
        registry = ToolRegistry()
        registry.register_tool("multiply", lambda args: args["a"] * args["b"])

        result = registry.call_tool("multiply", {"a": 3, "b": 4})
        result.status   # "success"
        result.result   # 12

    Example:
        # Answer every tool call in a chat response
        response = await client.chat().with_tools(*tools).with_message("user", q).execute()
        for result in await registry.aexecute_tool_calls(response):
            builder = builder.with_tool_result(result)
    """

    def __init__(self):
        self._tools: Dict[str, ToolHandler] = {}
        self._lock = _ReadWriteLock()

    def register_tool(self, name: str, handler: ToolHandler) -> None:
        """
        Register a handler under ``name``. A later registration replaces an
        earlier one.

        Raises:
            ValueError: Empty name or non-callable handler
        """
        if not name or not name.strip():
            raise ValueError("Tool name must be a non-empty string")
        if not callable(handler):
            raise ValueError(f"Handler for tool '{name}' is not callable")

        with self._lock.write():
            replaced = name in self._tools
            self._tools[name] = handler

        if replaced:
            logger.debug(f"Tool '{name}' already registered, overwriting")
        else:
            logger.debug(f"Registered tool: {name}")

    def call_tool(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolCallResult:
        """
        Run a synchronous handler.

        Returns:
            A success result with the handler's return value, or an error
            result carrying the exception message

        Raises:
            ToolNotFoundError: No handler registered under ``name``
            ToolError: The handler is async or returns an awaitable (use
                ``acall_tool``)
        """
        handler = self._lookup(name)
        if inspect.iscoroutinefunction(handler):
            raise ToolError(f"Tool '{name}' is async; use acall_tool")

        try:
            value = handler(dict(args or {}))
        except Exception as e:
            logger.warning(f"Tool '{name}' failed: {e}")
            return ToolCallResult.failure(str(e), tool=name)

        if inspect.isawaitable(value):
            # Discard the unawaited coroutine
            if inspect.iscoroutine(value):
                value.close()
            raise ToolError(f"Tool '{name}' returned an awaitable; use acall_tool")

        logger.debug(f"Tool '{name}' completed")
        return ToolCallResult.success(value, tool=name)

    async def acall_tool(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolCallResult:
        """Run a handler, awaiting it if it returns an awaitable."""
        handler = self._lookup(name)
        try:
            value = handler(dict(args or {}))
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.warning(f"Tool '{name}' failed: {e}")
            return ToolCallResult.failure(str(e), tool=name)

        logger.debug(f"Tool '{name}' completed")
        return ToolCallResult.success(value, tool=name)

    def execute_tool_calls(self, response: ChatResponse) -> List[ToolCallResult]:
        """Run every tool call in ``response``, in order."""
        return [
            self.call_tool(call.function.name, call.function.arguments)
            for call in response.tool_calls
        ]

    async def aexecute_tool_calls(self, response: ChatResponse) -> List[ToolCallResult]:
        results = []
        for call in response.tool_calls:
            results.append(await self.acall_tool(call.function.name, call.function.arguments))
        return results

    def has_tool(self, name: str) -> bool:
        with self._lock.read():
            return name in self._tools

    def tool_names(self) -> List[str]:
        with self._lock.read():
            return list(self._tools)

    def _lookup(self, name: str) -> ToolHandler:
        with self._lock.read():
            handler = self._tools.get(name)
        if handler is None:
            logger.warning(f"Unknown tool requested: {name}")
            raise ToolNotFoundError(name)
        return handler

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_tool(name)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._tools)

    def __repr__(self) -> str:
        return f"<ToolRegistry tools={len(self)}>"
