"""file_find — find files and directories by name, glob or path substring."""

from __future__ import annotations

import asyncio
import fnmatch
from pathlib import Path
from typing import Literal

from pydantic import Field, NonNegativeInt

from toolrpc.tools._fs import require_dir, walk_depth
from toolrpc.tools.base import Tool, ToolOutput, ToolParams

_GLOB_CHARS = frozenset("*?[")


class FileFindParams(ToolParams):
    directory: str = Field(..., description="Directory to search.")
    pattern: str = Field(..., description="Name, glob or path fragment to look for.")
    mode: Literal["name", "pattern", "path"] = Field(
        default="name",
        description="'name' matches file names (exact or glob), 'pattern' globs the full path, "
        "'path' matches a substring of the full path.",
    )
    file_type: Literal["file", "directory", "all"] = Field(default="all")
    recursive: bool = Field(default=True)
    max_depth: NonNegativeInt = Field(default=0, description="0 for unlimited.")
    limit: NonNegativeInt = Field(default=0, description="Maximum entries returned; 0 for unlimited.")
    follow_links: bool = Field(default=False)
    ignore: list[str] = Field(default_factory=list, description="Globs of full paths to skip.")


class FoundEntry(ToolOutput):
    path: str
    name: str
    is_dir: bool
    size: int | None = None
    modified: int | None = Field(default=None, description="Modification time, seconds since the epoch.")


class FileFindOutput(ToolOutput):
    directory: str
    pattern: str
    entries: list[FoundEntry]
    total: int = Field(..., description="Number of matches, including those cut by the limit.")
    limited: bool


def _matches(path: Path, params: FileFindParams) -> bool:
    text = str(path)
    if any(fnmatch.fnmatchcase(text, pattern) for pattern in params.ignore):
        return False
    if params.mode == "name":
        if path.name == params.pattern:
            return True
        return bool(_GLOB_CHARS & set(params.pattern)) and fnmatch.fnmatchcase(path.name, params.pattern)
    if params.mode == "pattern":
        return fnmatch.fnmatchcase(text, params.pattern)
    return params.pattern in text


def _entry(path: Path, is_dir: bool) -> FoundEntry:
    try:
        stat = path.stat()
    except OSError:
        return FoundEntry(path=str(path), name=path.name, is_dir=is_dir)
    return FoundEntry(
        path=str(path),
        name=path.name,
        is_dir=is_dir,
        size=None if is_dir else stat.st_size,
        modified=int(stat.st_mtime),
    )


def _search(root: Path, params: FileFindParams) -> tuple[list[FoundEntry], int, bool]:
    if not params.recursive:
        max_depth: int | None = 1
    else:
        max_depth = params.max_depth or None

    matched: list[tuple[Path, bool]] = []
    for path, is_dir in walk_depth(root, max_depth, follow_links=params.follow_links):
        if params.file_type == "file" and is_dir:
            continue
        if params.file_type == "directory" and not is_dir:
            continue
        if _matches(path, params):
            matched.append((path, is_dir))

    total = len(matched)
    limited = bool(params.limit) and total > params.limit
    if limited:
        matched = matched[: params.limit]
    entries = [_entry(path, is_dir) for path, is_dir in matched]
    entries.sort(key=lambda entry: entry.path)
    return entries, total, limited


class FileFind(Tool[FileFindParams, FileFindOutput]):
    name = "file_find"
    description = "Find files matching a pattern"
    params_model = FileFindParams
    output_model = FileFindOutput

    async def execute(self, params: FileFindParams) -> FileFindOutput:
        directory = await require_dir(params.directory)
        root = await asyncio.to_thread(directory.resolve)
        entries, total, limited = await asyncio.to_thread(_search, root, params)
        return FileFindOutput(
            directory=str(root),
            pattern=params.pattern,
            entries=entries,
            total=total,
            limited=limited,
        )
