"""file_write — create or replace a file atomically."""

from __future__ import annotations

import asyncio
import base64
import binascii
from pathlib import Path
from typing import Literal

from pydantic import Field

from toolrpc.errors import InvalidArgumentError, NotFoundError
from toolrpc.tools._fs import atomic_write
from toolrpc.tools.base import Tool, ToolOutput, ToolParams


class FileWriteParams(ToolParams):
    path: str = Field(..., description="File to write.")
    content: str = Field(..., description="Text, or base64 when content_type is 'binary'.")
    content_type: Literal["text", "binary"] = Field(default="text")
    create_dirs: bool = Field(default=False, description="Create missing parent directories.")


class FileWriteOutput(ToolOutput):
    path: str
    size: int
    content_type: Literal["text", "binary"]
    created: bool = Field(..., description="True if the file did not exist before.")


def decode_base64(content: str, *, what: str = "content") -> bytes:
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid base64 {what}: {exc}") from exc


class FileWrite(Tool[FileWriteParams, FileWriteOutput]):
    name = "file_write"
    description = "Write content to a file"
    params_model = FileWriteParams
    output_model = FileWriteOutput

    async def execute(self, params: FileWriteParams) -> FileWriteOutput:
        path = Path(params.path)

        if params.content_type == "binary":
            data = decode_base64(params.content)
        else:
            data = params.content.encode("utf-8")

        parent = path.parent
        if not await asyncio.to_thread(parent.exists):
            if not params.create_dirs:
                raise NotFoundError(f"Parent directory does not exist: {parent}")
            await asyncio.to_thread(parent.mkdir, parents=True, exist_ok=True)

        if await asyncio.to_thread(path.is_dir):
            raise InvalidArgumentError(f"Path is a directory: {params.path}")

        created = not await asyncio.to_thread(path.exists)
        await atomic_write(path, data)

        return FileWriteOutput(
            path=params.path,
            size=len(data),
            content_type=params.content_type,
            created=created,
        )
