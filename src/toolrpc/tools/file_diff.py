"""file_diff — line diff of two text files."""

from __future__ import annotations

import asyncio
import difflib
from typing import Literal

from pydantic import Field, NonNegativeInt

from toolrpc.errors import InvalidArgumentError
from toolrpc.tools._fs import require_file, split_lines
from toolrpc.tools.base import Tool, ToolOutput, ToolParams


class FileDiffParams(ToolParams):
    file1: str = Field(..., description="Original file.")
    file2: str = Field(..., description="Modified file.")
    diff_type: Literal["unified", "line"] = Field(
        default="unified",
        description="'unified' groups changes into hunks with context, 'line' reports every line.",
    )
    context_lines: NonNegativeInt = Field(default=3)
    ignore_whitespace: bool = Field(default=False, description="Collapse runs of whitespace before comparing.")
    ignore_case: bool = Field(default=False)


class DiffLine(ToolOutput):
    line1: int | None = None
    line2: int | None = None
    change_type: Literal["equal", "delete", "insert"]
    content: str


class DiffHunk(ToolOutput):
    start1: int
    end1: int
    start2: int
    end2: int
    lines: list[DiffLine]


class FileDiffOutput(ToolOutput):
    file1: str
    file2: str
    diff_type: Literal["unified", "line"]
    identical: bool
    hunks: list[DiffHunk]
    diff_text: str


def _normalize(line: str, params: FileDiffParams) -> str:
    if params.ignore_whitespace:
        line = " ".join(line.split())
    if params.ignore_case:
        line = line.lower()
    return line


def _hunk(groups: list[tuple[str, int, int, int, int]], lines1: list[str], lines2: list[str]) -> DiffHunk:
    diff_lines: list[DiffLine] = []
    for tag, i1, i2, j1, j2 in groups:
        if tag == "equal":
            for offset in range(i2 - i1):
                diff_lines.append(
                    DiffLine(line1=i1 + offset + 1, line2=j1 + offset + 1, change_type="equal", content=lines1[i1 + offset])
                )
            continue
        if tag in ("delete", "replace"):
            for index in range(i1, i2):
                diff_lines.append(DiffLine(line1=index + 1, change_type="delete", content=lines1[index]))
        if tag in ("insert", "replace"):
            for index in range(j1, j2):
                diff_lines.append(DiffLine(line2=index + 1, change_type="insert", content=lines2[index]))
    first, last = groups[0], groups[-1]
    return DiffHunk(start1=first[1] + 1, end1=last[2], start2=first[3] + 1, end2=last[4], lines=diff_lines)


def _render(hunks: list[DiffHunk], file1: str, file2: str) -> str:
    if not hunks:
        return ""
    out = [f"--- {file1}", f"+++ {file2}"]
    markers = {"equal": " ", "delete": "-", "insert": "+"}
    for hunk in hunks:
        count1 = hunk.end1 - hunk.start1 + 1
        count2 = hunk.end2 - hunk.start2 + 1
        start1 = hunk.start1 if count1 else hunk.start1 - 1
        start2 = hunk.start2 if count2 else hunk.start2 - 1
        out.append(f"@@ -{start1},{count1} +{start2},{count2} @@")
        out.extend(markers[line.change_type] + line.content for line in hunk.lines)
    return "\n".join(out) + "\n"


def diff_lines(
    lines1: list[str],
    lines2: list[str],
    params: FileDiffParams,
) -> tuple[list[DiffHunk], bool]:
    keys1 = [_normalize(line, params) for line in lines1]
    keys2 = [_normalize(line, params) for line in lines2]
    identical = keys1 == keys2
    if identical:
        return [], True

    matcher = difflib.SequenceMatcher(a=keys1, b=keys2, autojunk=False)
    if params.diff_type == "line":
        groups = [matcher.get_opcodes()]
    else:
        groups = list(matcher.get_grouped_opcodes(params.context_lines))
    return [_hunk(group, lines1, lines2) for group in groups], False


def _read_text(path: str, data: bytes) -> list[str]:
    try:
        return split_lines(data.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise InvalidArgumentError(f"File is not valid UTF-8: {path}") from exc


class FileDiff(Tool[FileDiffParams, FileDiffOutput]):
    name = "file_diff"
    description = "Compare two files"
    params_model = FileDiffParams
    output_model = FileDiffOutput

    async def execute(self, params: FileDiffParams) -> FileDiffOutput:
        path1 = await require_file(params.file1)
        path2 = await require_file(params.file2)
        data1, data2 = await asyncio.gather(
            asyncio.to_thread(path1.read_bytes),
            asyncio.to_thread(path2.read_bytes),
        )
        lines1 = _read_text(params.file1, data1)
        lines2 = _read_text(params.file2, data2)

        hunks, identical = diff_lines(lines1, lines2, params)
        return FileDiffOutput(
            file1=params.file1,
            file2=params.file2,
            diff_type=params.diff_type,
            identical=identical,
            hunks=hunks,
            diff_text=_render(hunks, params.file1, params.file2),
        )
