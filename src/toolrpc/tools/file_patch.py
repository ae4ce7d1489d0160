"""file_patch — apply a unified diff or a binary offset patch to a file."""

from __future__ import annotations

import asyncio
import re
import shutil
from dataclasses import dataclass, field
from typing import Literal

from pydantic import Field

from toolrpc.errors import ConflictError, InvalidArgumentError
from toolrpc.tools._fs import atomic_write, require_file, split_lines
from toolrpc.tools.base import Tool, ToolOutput, ToolParams
from toolrpc.tools.file_write import decode_base64

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class FilePatchParams(ToolParams):
    path: str = Field(..., description="File to patch.")
    patch: str = Field(..., description="Unified diff, or 'offset:base64' lines for binary patches.")
    patch_type: Literal["unified", "binary"] = Field(default="unified")
    create_backup: bool = Field(default=False, description="Copy the original to '<path>.bak' first.")


class FilePatchOutput(ToolOutput):
    path: str
    original_size: int
    new_size: int
    patch_type: Literal["unified", "binary"]
    backup_path: str | None = None


@dataclass
class Hunk:
    old_start: int
    old_count: int
    lines: list[tuple[str, str]] = field(default_factory=list)

    @property
    def old_lines(self) -> list[str]:
        return [text for op, text in self.lines if op in (" ", "-")]

    @property
    def new_lines(self) -> list[str]:
        return [text for op, text in self.lines if op in (" ", "+")]


def parse_unified(patch: str) -> list[Hunk]:
    """Parse the hunks of a unified diff; file headers are skipped."""
    hunks: list[Hunk] = []
    lines = split_lines(patch)
    i = 0
    while i < len(lines):
        match = _HUNK_HEADER.match(lines[i])
        i += 1
        if match is None:
            continue
        old_count = int(match.group(2)) if match.group(2) is not None else 1
        new_count = int(match.group(4)) if match.group(4) is not None else 1
        hunk = Hunk(old_start=int(match.group(1)), old_count=old_count)
        old_left, new_left = old_count, new_count
        while old_left > 0 or new_left > 0:
            if i >= len(lines):
                raise InvalidArgumentError(f"Truncated hunk starting at old line {hunk.old_start}")
            line = lines[i]
            i += 1
            if line.startswith("\\"):
                continue
            op, text = (line[0], line[1:]) if line else (" ", "")
            if op == " ":
                old_left -= 1
                new_left -= 1
            elif op == "-":
                old_left -= 1
            elif op == "+":
                new_left -= 1
            else:
                raise InvalidArgumentError(f"Unexpected line in hunk: {line!r}")
            hunk.lines.append((op, text))
        hunks.append(hunk)
    if not hunks:
        raise InvalidArgumentError("Patch contains no hunks")
    return hunks


def apply_unified(content: str, patch: str) -> str:
    """Apply a unified diff to *content*; context and removals must match exactly."""
    newline = "\r\n" if "\r\n" in content else "\n"
    trailing_newline = content.endswith("\n") or not content
    lines = split_lines(content)
    delta = 0

    for hunk in parse_unified(patch):
        old, new = hunk.old_lines, hunk.new_lines
        start = (hunk.old_start - 1 if hunk.old_count > 0 else hunk.old_start) + delta
        current = lines[start:start + len(old)]
        if start < 0 or current != old:
            for offset, expected in enumerate(old):
                found = current[offset] if offset < len(current) else ""
                if found != expected:
                    raise ConflictError(
                        f"Patch does not apply at line {start + offset + 1}: "
                        f"expected {expected!r}, found {found!r}",
                        details={"line": start + offset + 1},
                    )
            raise ConflictError(f"Patch does not apply at line {start + 1}")
        lines[start:start + len(old)] = new
        delta += len(new) - len(old)

    result = newline.join(lines)
    if lines and trailing_newline:
        result += newline
    return result


def apply_binary(original: bytes, patch: str) -> bytes:
    """Apply ``offset:base64`` lines, extending the data with zeros as needed."""
    patched = bytearray(original)
    for line in patch.splitlines():
        if not line.strip():
            continue
        offset_text, sep, payload = line.partition(":")
        if not sep:
            raise InvalidArgumentError(f"Invalid binary patch line: {line!r}")
        try:
            offset = int(offset_text)
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid offset in binary patch: {offset_text!r}") from exc
        if offset < 0:
            raise InvalidArgumentError(f"Negative offset in binary patch: {offset}")
        data = decode_base64(payload.strip(), what="data in binary patch")
        end = offset + len(data)
        if end > len(patched):
            patched.extend(b"\x00" * (end - len(patched)))
        patched[offset:end] = data
    return bytes(patched)


class FilePatch(Tool[FilePatchParams, FilePatchOutput]):
    name = "file_patch"
    description = "Apply a patch to a file"
    params_model = FilePatchParams
    output_model = FilePatchOutput

    async def execute(self, params: FilePatchParams) -> FilePatchOutput:
        path = await require_file(params.path)
        original = await asyncio.to_thread(path.read_bytes)

        if params.patch_type == "binary":
            patched = apply_binary(original, params.patch)
        else:
            try:
                text = original.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidArgumentError(
                    f"File is not valid UTF-8, use patch_type='binary': {params.path}"
                ) from exc
            patched = apply_unified(text, params.patch).encode("utf-8")

        backup_path: str | None = None
        if params.create_backup:
            backup_path = f"{params.path}.bak"
            await asyncio.to_thread(shutil.copy2, path, backup_path)

        await atomic_write(path, patched)

        return FilePatchOutput(
            path=params.path,
            original_size=len(original),
            new_size=len(patched),
            patch_type=params.patch_type,
            backup_path=backup_path,
        )
