"""directory_list — list the entries of one directory."""

from __future__ import annotations

import asyncio
import fnmatch
import os
from pathlib import Path

from pydantic import Field

from toolrpc.tools._fs import isoformat_mtime, require_dir
from toolrpc.tools.base import Tool, ToolOutput, ToolParams


class DirectoryListParams(ToolParams):
    path: str = Field(..., description="Directory to list.")
    pattern: str | None = Field(default=None, description="Glob applied to entry names (e.g. '*.txt').")
    include_hidden: bool = Field(default=False, description="Include names starting with a dot.")
    directories_only: bool = Field(default=False, description="Only list directories.")
    files_only: bool = Field(default=False, description="Only list non-directories.")


class DirectoryEntry(ToolOutput):
    name: str
    path: str
    is_directory: bool
    size: int = Field(..., description="Size in bytes; 0 for directories.")
    modified: str | None = Field(default=None, description="Last modification time, RFC 3339.")


class DirectoryListOutput(ToolOutput):
    entries: list[DirectoryEntry]
    count: int


def _scan(path: Path, params: DirectoryListParams) -> list[DirectoryEntry]:
    entries: list[DirectoryEntry] = []
    with os.scandir(path) as it:
        for item in it:
            if not params.include_hidden and item.name.startswith("."):
                continue
            try:
                is_dir = item.is_dir()
                stat = item.stat()
            except OSError:
                continue
            if params.directories_only and not is_dir:
                continue
            if params.files_only and is_dir:
                continue
            if params.pattern is not None and not fnmatch.fnmatchcase(item.name, params.pattern):
                continue
            entries.append(
                DirectoryEntry(
                    name=item.name,
                    path=os.path.join(params.path, item.name),
                    is_directory=is_dir,
                    size=0 if is_dir else stat.st_size,
                    modified=isoformat_mtime(stat.st_mtime),
                )
            )
    entries.sort(key=lambda entry: entry.name)
    return entries


class DirectoryList(Tool[DirectoryListParams, DirectoryListOutput]):
    name = "directory_list"
    description = "List contents of a directory"
    params_model = DirectoryListParams
    output_model = DirectoryListOutput

    async def execute(self, params: DirectoryListParams) -> DirectoryListOutput:
        path = await require_dir(params.path)
        entries = await asyncio.to_thread(_scan, path, params)
        return DirectoryListOutput(entries=entries, count=len(entries))
