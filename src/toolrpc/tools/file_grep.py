"""file_grep — search file contents under a directory."""

from __future__ import annotations

import asyncio
import fnmatch
import re
from pathlib import Path

from pydantic import Field, NonNegativeInt

from toolrpc.errors import InvalidArgumentError
from toolrpc.tools._fs import require_dir, split_lines, walk_depth
from toolrpc.tools.base import Tool, ToolOutput, ToolParams


class FileGrepParams(ToolParams):
    directory: str = Field(..., description="Directory to search.")
    pattern: str = Field(..., description="Literal text, or a regular expression when regex is set.")
    regex: bool = Field(default=False)
    case_insensitive: bool = Field(default=False)
    recursive: bool = Field(default=True)
    max_depth: NonNegativeInt = Field(default=0, description="0 for unlimited.")
    limit: NonNegativeInt = Field(default=0, description="Maximum matching files; 0 for unlimited.")
    follow_links: bool = Field(default=False)
    include: str | None = Field(default=None, description="Only search files whose path matches this glob.")
    exclude: list[str] = Field(default_factory=list, description="Skip files whose path matches any glob.")
    before_context: NonNegativeInt = Field(default=0)
    after_context: NonNegativeInt = Field(default=0)
    file_names_only: bool = Field(default=False, description="Report matching files without line detail.")


class LineMatch(ToolOutput):
    line_number: int
    line: str
    before_context: list[str] | None = None
    after_context: list[str] | None = None


class FileMatch(ToolOutput):
    path: str
    size: int
    matches: list[LineMatch] | None = None


class FileGrepOutput(ToolOutput):
    directory: str
    pattern: str
    files: list[FileMatch]
    files_searched: int
    files_matched: int
    total_matches: int
    limited: bool


def _compile(params: FileGrepParams) -> re.Pattern[str]:
    flags = re.IGNORECASE if params.case_insensitive else 0
    source = params.pattern if params.regex else re.escape(params.pattern)
    try:
        return re.compile(source, flags)
    except re.error as exc:
        raise InvalidArgumentError(f"Invalid regular expression {params.pattern!r}: {exc}") from exc


def _candidates(root: Path, params: FileGrepParams) -> list[Path]:
    if not params.recursive:
        max_depth: int | None = 1
    else:
        max_depth = params.max_depth or None
    files: list[Path] = []
    for path, is_dir in walk_depth(root, max_depth, follow_links=params.follow_links):
        if is_dir or not path.is_file():
            continue
        text = str(path)
        if any(fnmatch.fnmatchcase(text, pattern) for pattern in params.exclude):
            continue
        if params.include is not None and not fnmatch.fnmatchcase(text, params.include):
            continue
        files.append(path)
    return files


def _search_file(path: Path, compiled: re.Pattern[str], params: FileGrepParams) -> FileMatch | None:
    try:
        data = path.read_bytes()
        content = data.decode("utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    if params.file_names_only:
        if compiled.search(content) is None:
            return None
        return FileMatch(path=str(path), size=len(data))

    lines = split_lines(content)
    matches: list[LineMatch] = []
    for index, line in enumerate(lines):
        if compiled.search(line) is None:
            continue
        before_start = max(0, index - params.before_context)
        after_end = min(len(lines), index + 1 + params.after_context)
        before = [f"{n + 1}:{lines[n]}" for n in range(before_start, index)]
        after = [f"{n + 1}:{lines[n]}" for n in range(index + 1, after_end)]
        matches.append(
            LineMatch(
                line_number=index + 1,
                line=line,
                before_context=before or None,
                after_context=after or None,
            )
        )
    if not matches:
        return None
    return FileMatch(path=str(path), size=len(data), matches=matches)


def _grep(root: Path, compiled: re.Pattern[str], params: FileGrepParams) -> FileGrepOutput:
    candidates = _candidates(root, params)
    files: list[FileMatch] = []
    limited = False
    for path in candidates:
        if params.limit and len(files) >= params.limit:
            limited = True
            break
        found = _search_file(path, compiled, params)
        if found is not None:
            files.append(found)
    files.sort(key=lambda match: match.path)
    return FileGrepOutput(
        directory=str(root),
        pattern=params.pattern,
        files=files,
        files_searched=len(candidates),
        files_matched=len(files),
        total_matches=sum(len(f.matches or []) for f in files),
        limited=limited,
    )


class FileGrep(Tool[FileGrepParams, FileGrepOutput]):
    name = "file_grep"
    description = "Search file contents for a pattern"
    params_model = FileGrepParams
    output_model = FileGrepOutput

    async def execute(self, params: FileGrepParams) -> FileGrepOutput:
        compiled = _compile(params)
        directory = await require_dir(params.directory)
        root = await asyncio.to_thread(directory.resolve)
        return await asyncio.to_thread(_grep, root, compiled, params)
