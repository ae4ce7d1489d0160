"""Filesystem helpers shared by the built-in tools.

Blocking calls run in worker threads so a slow disk suspends the calling
task instead of the event loop.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from toolrpc.errors import InvalidArgumentError, NotFoundError


async def require_dir(raw: str, *, label: str = "Directory") -> Path:
    """Return *raw* as a :class:`Path`, failing unless it is an existing directory."""
    path = Path(raw)
    if not await asyncio.to_thread(path.exists):
        raise NotFoundError(f"{label} not found: {raw}")
    if not await asyncio.to_thread(path.is_dir):
        raise InvalidArgumentError(f"Path is not a directory: {raw}")
    return path


async def require_file(raw: str) -> Path:
    """Return *raw* as a :class:`Path`, failing unless it is an existing regular file."""
    path = Path(raw)
    if not await asyncio.to_thread(path.exists):
        raise NotFoundError(f"File not found: {raw}")
    if not await asyncio.to_thread(path.is_file):
        raise InvalidArgumentError(f"Path is not a file: {raw}")
    return path


# mkstemp creates files 0600; new files get the usual umask-derived mode instead.
_UMASK = os.umask(0)
os.umask(_UMASK)


def _write_replace(path: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        mode = path.stat().st_mode & 0o7777 if path.exists() else 0o666 & ~_UMASK
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


async def atomic_write(path: Path, data: bytes) -> None:
    """Write *data* to a temp file beside *path*, then rename it into place."""
    await asyncio.to_thread(_write_replace, path, data)


def isoformat_mtime(timestamp: float) -> str:
    """Render a POSIX mtime as an RFC 3339 UTC string."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and drop a trailing ``\\r``; a final newline adds no empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def walk_depth(root: Path, max_depth: int | None, *, follow_links: bool) -> list[tuple[Path, bool]]:
    """List ``(path, is_dir)`` for every entry under *root*, depth-limited.

    Depth 1 is the direct children of *root*; ``None`` means unlimited.
    Unreadable directories are skipped.
    """
    results: list[tuple[Path, bool]] = []
    root_depth = len(root.parts)
    for current, dirnames, filenames in os.walk(root, followlinks=follow_links):
        current_path = Path(current)
        depth = len(current_path.parts) - root_depth + 1
        if max_depth is not None and depth > max_depth:
            dirnames[:] = []
            continue
        for dirname in sorted(dirnames):
            results.append((current_path / dirname, True))
        for filename in sorted(filenames):
            results.append((current_path / filename, False))
        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []
    return results
