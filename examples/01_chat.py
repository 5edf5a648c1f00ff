"""
01_chat.py - Single chat request, model list and server version
"""

import asyncio

from ollamalink import Ollama


async def main():
    async with Ollama.from_env() as client:
        version = await client.status().version()
        print(f"Server version: {version.version}")

        models = await client.models().list()
        print(f"Local models: {', '.join(models.names) or '(none)'}")

        response = await (
            client.chat()
            .with_model("llama3.1")
            .with_system_message("Answer in one sentence.")
            .with_message("user", "Why is the sky blue?")
            .with_temperature(0.2)
            .execute()
        )
        print(f"Assistant: {response.content}")


if __name__ == "__main__":
    asyncio.run(main())
