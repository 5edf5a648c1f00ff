"""
ollamalink Managers - Model lifecycle and server status
"""

from typing import Optional

from .endpoints import OllamaAPI
from .models import (
    ModelListResponse,
    ModelManagementRequest,
    ModelProcessResponse,
    ShowModelRequest,
    ShowModelResponse,
    StatusResponse,
    VersionResponse,
)


class ModelManager:
    """List, inspect, create, copy, delete, pull and push models."""

    def __init__(self, api: OllamaAPI):
        self.api = api

    async def list(self) -> ModelListResponse:
        return await self.api.list_models()

    async def show(self, model: str, verbose: bool = False) -> ShowModelResponse:
        return await self.api.show_model(ShowModelRequest(model=model, verbose=verbose or None))

    async def create(
        self,
        name: str,
        from_model: Optional[str] = None,
        modelfile: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> StatusResponse:
        """
        Create a model.

        Args:
            name: Name of the new model
            from_model: Existing model to base it on
            modelfile: Modelfile contents (older servers)
            owner: Optional owner tag
        """
        return await self.api.create_model(ModelManagementRequest(
            model=name,
            from_=from_model,
            modelfile=modelfile,
            owner=owner,
        ))

    async def delete(self, name: str) -> None:
        await self.api.delete_model(name)

    async def copy(self, source: str, destination: str) -> None:
        await self.api.copy_model(source, destination)

    async def pull(self, name: str, insecure: bool = False) -> StatusResponse:
        return await self.api.pull_model(name, insecure=insecure)

    async def push(self, name: str, insecure: bool = False) -> StatusResponse:
        return await self.api.push_model(name, insecure=insecure)


class StatusManager:
    """Server version and loaded models."""

    def __init__(self, api: OllamaAPI):
        self.api = api

    async def version(self) -> VersionResponse:
        return await self.api.version()

    async def running_processes(self) -> ModelProcessResponse:
        return await self.api.running_processes()
