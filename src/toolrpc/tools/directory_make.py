"""directory_make — create a directory."""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import Field

from toolrpc.errors import AlreadyExistsError, NotFoundError
from toolrpc.tools.base import Tool, ToolOutput, ToolParams


class DirectoryMakeParams(ToolParams):
    path: str = Field(..., description="Directory to create.")
    parents: bool = Field(default=False, description="Create missing parent directories.")
    exist_ok: bool = Field(default=False, description="Succeed if the directory already exists.")


class DirectoryMakeOutput(ToolOutput):
    path: str
    created: bool = Field(..., description="False when the directory already existed.")


class DirectoryMake(Tool[DirectoryMakeParams, DirectoryMakeOutput]):
    name = "directory_make"
    description = "Create a directory"
    params_model = DirectoryMakeParams
    output_model = DirectoryMakeOutput

    async def execute(self, params: DirectoryMakeParams) -> DirectoryMakeOutput:
        path = Path(params.path)

        if await asyncio.to_thread(path.exists):
            if not await asyncio.to_thread(path.is_dir):
                raise AlreadyExistsError(f"Path exists but is not a directory: {params.path}")
            if not params.exist_ok:
                raise AlreadyExistsError(f"Directory already exists: {params.path}")
            return DirectoryMakeOutput(path=params.path, created=False)

        try:
            await asyncio.to_thread(path.mkdir, parents=params.parents, exist_ok=params.exist_ok)
        except FileNotFoundError as exc:
            raise NotFoundError(f"Parent directory does not exist: {path.parent}") from exc

        return DirectoryMakeOutput(path=params.path, created=True)
