"""
Shared fixtures: an in-process fake Ollama server built on httpx.MockTransport.
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from ollamalink import ClientConfig, Ollama
from ollamalink.endpoints import OllamaAPI
from ollamalink.transport import Transport


def ndjson(*documents: Any) -> bytes:
    """Encode documents as newline-delimited JSON."""
    return b"".join(json.dumps(doc).encode("utf-8") + b"\n" for doc in documents)


async def byte_chunks(*chunks: bytes, delay: float = 0.0):
    """Async body that yields each read separately."""
    for chunk in chunks:
        if delay:
            await asyncio.sleep(delay)
        yield chunk


class FakeServer:
    """Routes requests to canned responses and records every request."""

    ndjson = staticmethod(ndjson)

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], Any]] = {}
        self.requests: List[httpx.Request] = []

    def route(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        content: Any = None,
        handler: Optional[Callable[[httpx.Request], Any]] = None,
    ) -> None:
        if handler is None:
            def handler(request, status=status, json_body=json_body, content=content):
                if content is not None:
                    return httpx.Response(status, content=content)
                if json_body is not None:
                    return httpx.Response(status, json=json_body)
                return httpx.Response(status)
        self.routes[(method, path)] = handler

    def stream(self, method: str, path: str, *chunks: bytes, status: int = 200, delay: float = 0.0):
        """Serve a body split into the given reads."""
        self.route(
            method,
            path,
            handler=lambda request: httpx.Response(
                status, content=byte_chunks(*chunks, delay=delay)
            ),
        )

    def handle(self, request: httpx.Request):
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        return handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        body = self.last.content
        return json.loads(body) if body else None

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))

    def transport(self, **config: Any) -> Transport:
        return Transport(ClientConfig(**config), http_client=self.http_client())

    def api(self, **config: Any) -> OllamaAPI:
        return OllamaAPI(self.transport(**config))

    def client(self, **config: Any) -> Ollama:
        return Ollama(ClientConfig(**config), http_client=self.http_client())


@pytest.fixture
def server():
    return FakeServer()


_CHAT_CHUNKS = [
    {"model": "llama3.1", "created_at": "2024-07-01T10:00:00.123456789Z",
     "message": {"role": "assistant", "content": "The"}, "done": False},
    {"model": "llama3.1", "created_at": "2024-07-01T10:00:00.223456789Z",
     "message": {"role": "assistant", "content": " sky"}, "done": False},
    {"model": "llama3.1", "created_at": "2024-07-01T10:00:00.323456789Z",
     "message": {"role": "assistant", "content": " is blue."}, "done": True,
     "done_reason": "stop", "total_duration": 1200000, "eval_count": 3},
]


@pytest.fixture
def chat_chunks():
    """Three streamed chat chunks; only the last is done."""
    return json.loads(json.dumps(_CHAT_CHUNKS))
