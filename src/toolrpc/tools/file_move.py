"""file_move — move or rename a file or directory."""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

from pydantic import Field

from toolrpc.errors import AlreadyExistsError, InvalidArgumentError, NotFoundError
from toolrpc.tools.base import Tool, ToolOutput, ToolParams


class FileMoveParams(ToolParams):
    source: str = Field(..., description="Existing file or directory.")
    destination: str = Field(..., description="New path.")
    overwrite: bool = Field(default=False, description="Replace an existing destination file.")
    create_dirs: bool = Field(default=False, description="Create missing parent directories of the destination.")


class FileMoveOutput(ToolOutput):
    source: str
    destination: str
    overwritten: bool


def _move(source: Path, destination: Path) -> None:
    try:
        os.replace(source, destination)
    except OSError:
        # Cross-device moves cannot be renamed in place.
        if not source.exists():
            raise
        shutil.move(os.fspath(source), os.fspath(destination))


class FileMove(Tool[FileMoveParams, FileMoveOutput]):
    name = "file_move"
    description = "Move or rename a file"
    params_model = FileMoveParams
    output_model = FileMoveOutput

    async def execute(self, params: FileMoveParams) -> FileMoveOutput:
        source = Path(params.source)
        destination = Path(params.destination)

        if not await asyncio.to_thread(os.path.lexists, source):
            raise NotFoundError(f"Source not found: {params.source}")

        parent = destination.parent
        if not await asyncio.to_thread(parent.exists):
            if not params.create_dirs:
                raise NotFoundError(f"Destination parent directory does not exist: {parent}")
            await asyncio.to_thread(parent.mkdir, parents=True, exist_ok=True)

        dest_exists = await asyncio.to_thread(os.path.lexists, destination)
        if dest_exists:
            if not params.overwrite:
                raise AlreadyExistsError(f"Destination already exists: {params.destination}")
            if await asyncio.to_thread(destination.is_dir):
                raise InvalidArgumentError(
                    f"Refusing to overwrite a directory: {params.destination}"
                )

        await asyncio.to_thread(_move, source, destination)

        return FileMoveOutput(
            source=params.source,
            destination=params.destination,
            overwritten=dest_exists,
        )
