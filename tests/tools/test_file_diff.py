"""Tests for file_diff."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

from toolrpc.errors import InvalidArgumentError, NotFoundError
from toolrpc.tools.file_diff import FileDiff, FileDiffParams


def _pair(tmp_path: Path, left: str, right: str) -> tuple[str, str]:
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text(left)
    b.write_text(right)
    return str(a), str(b)


class TestFileDiff:
    async def test_unified(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "a\nb\nc\n", "a\nB\nc\n")
        out = await FileDiff().execute(FileDiffParams(file1=f1, file2=f2))
        assert not out.identical
        assert len(out.hunks) == 1
        hunk = out.hunks[0]
        assert (hunk.start1, hunk.end1, hunk.start2, hunk.end2) == (1, 3, 1, 3)
        assert [(line.change_type, line.content) for line in hunk.lines] == [
            ("equal", "a"),
            ("delete", "b"),
            ("insert", "B"),
            ("equal", "c"),
        ]
        assert hunk.lines[1].line1 == 2
        assert hunk.lines[1].line2 is None
        assert hunk.lines[2].line2 == 2
        assert out.diff_text == f"--- {f1}\n+++ {f2}\n@@ -1,3 +1,3 @@\n a\n-b\n+B\n c\n"

    async def test_identical(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "same\n", "same\n")
        out = await FileDiff().execute(FileDiffParams(file1=f1, file2=f2))
        assert out.identical
        assert out.hunks == []
        assert out.diff_text == ""

    async def test_ignore_case(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "Hello\n", "hELLO\n")
        out = await FileDiff().execute(FileDiffParams(file1=f1, file2=f2, ignore_case=True))
        assert out.identical

    async def test_ignore_whitespace(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "a  b\n", " a b \n")
        out = await FileDiff().execute(FileDiffParams(file1=f1, file2=f2, ignore_whitespace=True))
        assert out.identical

    async def test_separate_hunks_without_context(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "1\n2\n3\n4\n5\n", "1\nX\n3\nY\n5\n")
        out = await FileDiff().execute(FileDiffParams(file1=f1, file2=f2, context_lines=0))
        assert len(out.hunks) == 2
        assert (out.hunks[0].start1, out.hunks[0].end1) == (2, 2)
        assert (out.hunks[1].start1, out.hunks[1].end1) == (4, 4)

    async def test_line_mode_single_hunk(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "1\n2\n3\n4\n5\n", "1\nX\n3\nY\n5\n")
        out = await FileDiff().execute(FileDiffParams(file1=f1, file2=f2, diff_type="line"))
        assert len(out.hunks) == 1
        assert len(out.hunks[0].lines) == 7

    async def test_insert_into_empty(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "", "new\n")
        out = await FileDiff().execute(FileDiffParams(file1=f1, file2=f2))
        assert "@@ -0,0 +1,1 @@" in out.diff_text

    async def test_missing_file(self, tmp_path: Path) -> None:
        f1, _ = _pair(tmp_path, "", "")
        with pytest.raises(NotFoundError):
            await FileDiff().execute(FileDiffParams(file1=f1, file2=str(tmp_path / "nope")))

    async def test_binary_rejected(self, tmp_path: Path) -> None:
        f1, f2 = _pair(tmp_path, "", "")
        (tmp_path / "b.txt").write_bytes(b"\xff\x00")
        with pytest.raises(InvalidArgumentError, match="UTF-8"):
            await FileDiff().execute(FileDiffParams(file1=f1, file2=f2))
