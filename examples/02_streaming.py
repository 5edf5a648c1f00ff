"""
02_streaming.py - Streaming with a callback and with an async iterator
"""

import asyncio

from ollamalink import Ollama


async def main():
    async with Ollama.from_env() as client:
        story = (
            client.chat()
            .with_model("llama3.1")
            .with_message("user", "Tell me a very short story about a lighthouse.")
        )

        print("Callback:")
        await story.stream(lambda chunk: print(chunk.content, end="", flush=True))
        print()

        print("\nIterator:")
        completion = client.completion().with_model("llama3.1").with_prompt("Count to five:")
        async for chunk in completion.chunks():
            print(chunk.response, end="", flush=True)
            if chunk.done:
                print(f"\n({chunk.eval_count} tokens)")


if __name__ == "__main__":
    asyncio.run(main())
