"""Tests for the Ollama façade and the model/status managers"""

import tempfile
from pathlib import Path

import httpx
import pytest

import ollamalink
from ollamalink import ClientConfig, Ollama, OllamaAPI


class TestConstruction:

    @pytest.mark.asyncio
    async def test_default_config(self):
        async with Ollama() as client:
            assert client.config == ClientConfig()
            assert isinstance(client.raw_client, OllamaAPI)
            assert repr(client) == "<Ollama base_url='http://localhost:11434'>"

    @pytest.mark.asyncio
    async def test_config_from_yaml_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config_file = Path(tmpdir) / "ollamalink.yaml"
            config_file.write_text("ollama:\n  base_url: http://gpu-box:11434\n  timeout: 5\n")
            async with Ollama(str(config_file)) as client:
                assert client.config.base_url == "http://gpu-box:11434"
                assert client.config.timeout == 5

    @pytest.mark.asyncio
    async def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_HOST", "remote:11434")
        async with Ollama.from_env() as client:
            assert client.config.base_url == "http://remote:11434"

    @pytest.mark.asyncio
    async def test_injected_http_client_left_open(self, server):
        http_client = server.http_client()
        async with Ollama(http_client=http_client):
            pass
        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_http_client_closed(self):
        client = Ollama()
        await client.aclose()
        assert client.raw_client.transport._client.is_closed


class TestVersion:

    def test_version(self):
        assert ollamalink.version() == ollamalink.__version__ == "1.0.0"


class TestModelManager:

    @pytest.mark.asyncio
    async def test_list(self, server):
        server.route("GET", "/api/tags", json_body={"models": [{"name": "a"}, {"name": "b"}]})
        async with server.client() as client:
            models = await client.models().list()
        assert models.names == ["a", "b"]

    @pytest.mark.asyncio
    async def test_show_verbose(self, server):
        server.route("POST", "/api/show", json_body={"template": "{{ .Prompt }}"})
        async with server.client() as client:
            info = await client.models().show("llama3.1", verbose=True)
        assert info.template == "{{ .Prompt }}"
        assert server.last_json() == {"model": "llama3.1", "verbose": True}

    @pytest.mark.asyncio
    async def test_create(self, server):
        server.route("POST", "/api/create", json_body={"status": "success"})
        async with server.client() as client:
            status = await client.models().create("mario", from_model="llama3.1")
        assert status.status == "success"
        assert server.last_json() == {"model": "mario", "from": "llama3.1", "stream": False}

    @pytest.mark.asyncio
    async def test_copy_and_delete(self, server):
        server.route("POST", "/api/copy", status=200)
        server.route("DELETE", "/api/delete", status=200)
        async with server.client() as client:
            await client.models().copy("mario", "mario-backup")
            await client.models().delete("mario")

        assert [r.url.path for r in server.requests] == ["/api/copy", "/api/delete"]

    @pytest.mark.asyncio
    async def test_pull_and_push(self, server):
        server.route("POST", "/api/pull", json_body={"status": "success"})
        server.route("POST", "/api/push", json_body={"status": "success", "digest": "sha256:1"})
        async with server.client() as client:
            pulled = await client.models().pull("llama3.1")
            pushed = await client.models().push("me/mario", insecure=True)

        assert pulled.status == "success"
        assert pushed.digest == "sha256:1"
        assert server.last_json() == {"model": "me/mario", "insecure": True, "stream": False}


class TestStatusManager:

    @pytest.mark.asyncio
    async def test_version_and_processes(self, server):
        server.route("GET", "/api/version", json_body={"version": "0.5.1"})
        server.route("GET", "/api/ps", json_body={"models": []})
        async with server.client() as client:
            version = await client.status().version()
            processes = await client.status().running_processes()

        assert version.version == "0.5.1"
        assert processes.models == []

    @pytest.mark.asyncio
    async def test_server_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        async with Ollama(http_client=http_client) as client:
            with pytest.raises(ollamalink.ConnectionFailedError):
                await client.status().version()
        await http_client.aclose()
