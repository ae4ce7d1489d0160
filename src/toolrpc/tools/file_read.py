"""file_read — read a file as text (optionally windowed and numbered) or base64."""

from __future__ import annotations

import asyncio
import base64
import mimetypes
from pathlib import Path
from typing import Literal

from pydantic import Field, NonNegativeInt

from toolrpc.errors import InvalidArgumentError
from toolrpc.tools._fs import require_file, split_lines
from toolrpc.tools.base import Tool, ToolOutput, ToolParams

_TEXT_EXTENSIONS = frozenset({
    "txt", "md", "rs", "py", "js", "ts", "json", "yml", "yaml", "toml",
    "html", "css", "csv", "ini", "cfg", "sh", "xml", "log",
})

_KNOWN_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "pdf": "application/pdf",
    "zip": "application/zip",
    "gz": "application/gzip",
    "tar": "application/x-tar",
}

_TEXT_APPLICATION_TYPES = frozenset({
    "application/json",
    "application/xml",
    "application/javascript",
})


def guess_mime_type(path: Path) -> str:
    extension = path.suffix.lstrip(".").lower()
    if extension in _TEXT_EXTENSIONS:
        return "text/plain"
    if extension in _KNOWN_MIME_TYPES:
        return _KNOWN_MIME_TYPES[extension]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def is_text_mime_type(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in _TEXT_APPLICATION_TYPES


class FileReadParams(ToolParams):
    path: str = Field(..., description="File to read.")
    content_type: Literal["text", "binary", "auto"] = Field(
        default="auto",
        description="'text' (UTF-8), 'binary' (base64) or 'auto' (by MIME type).",
    )
    offset: NonNegativeInt | None = Field(default=None, description="First line to return (0-based, text only).")
    limit: NonNegativeInt | None = Field(default=None, description="Maximum number of lines (text only).")
    line_numbers: bool = Field(default=False, description="Prefix lines with 1-based numbers (text only).")


class FileReadOutput(ToolOutput):
    content: str
    size: int
    mime_type: str
    content_type: Literal["text", "binary"]
    line_count: int | None = Field(default=None, description="Total lines; set when line_numbers is requested.")


def _render_text(content: str, params: FileReadParams) -> tuple[str, int | None]:
    windowed = params.offset is not None or params.limit is not None
    if not windowed and not params.line_numbers:
        return content, None

    lines = split_lines(content)
    line_count = len(lines) if params.line_numbers else None
    start = params.offset or 0
    end = len(lines) if params.limit is None else min(start + params.limit, len(lines))
    selected = lines[start:end]

    if params.line_numbers:
        rendered = [f"{start + i + 1:>6}  {line}" for i, line in enumerate(selected)]
    else:
        rendered = selected
    return "\n".join(rendered), line_count


class FileRead(Tool[FileReadParams, FileReadOutput]):
    name = "file_read"
    description = "Read a file from the filesystem"
    params_model = FileReadParams
    output_model = FileReadOutput

    async def execute(self, params: FileReadParams) -> FileReadOutput:
        path = await require_file(params.path)
        data = await asyncio.to_thread(path.read_bytes)
        mime_type = guess_mime_type(path)

        content_type = params.content_type
        if content_type == "auto":
            content_type = "text" if is_text_mime_type(mime_type) else "binary"

        if content_type == "binary":
            return FileReadOutput(
                content=base64.b64encode(data).decode("ascii"),
                size=len(data),
                mime_type=mime_type,
                content_type="binary",
            )

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidArgumentError(
                f"File is not valid UTF-8, read it with content_type='binary': {params.path}"
            ) from exc

        content, line_count = _render_text(text, params)
        return FileReadOutput(
            content=content,
            size=len(data),
            mime_type=mime_type,
            content_type="text",
            line_count=line_count,
        )
