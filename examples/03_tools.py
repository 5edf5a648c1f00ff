"""
03_tools.py - Answering model-requested tool calls
"""

import asyncio

from ollamalink import Ollama, ToolRegistry, tool_from_function


def multiply(a: float, b: float) -> float:
    """Multiply two numbers.

    Args:
        a: First factor
        b: Second factor
    """
    return a * b


async def main():
    registry = ToolRegistry()
    registry.register_tool("multiply", lambda args: multiply(args["a"], args["b"]))

    async with Ollama.from_env() as client:
        chat = (
            client.chat()
            .with_model("llama3.1")
            .with_tools(tool_from_function(multiply))
            .with_message("user", "What is 3 times 4?")
        )
        response = await chat.execute()

        if not response.has_tool_calls:
            print(f"Assistant: {response.content}")
            return

        chat = chat.with_messages([*chat.messages, response.message])
        for result in registry.execute_tool_calls(response):
            print(f"Tool {result.tool_name} -> {result.status}: {result.result or result.error}")
            chat = chat.with_tool_result(result)

        final = await chat.execute()
        print(f"Assistant: {final.content}")


if __name__ == "__main__":
    asyncio.run(main())
