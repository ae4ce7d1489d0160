"""Tests for file_read, file_write and file_move."""

from __future__ import annotations

import base64
import os
import stat
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

from toolrpc.errors import AlreadyExistsError, InvalidArgumentError, NotFoundError
from toolrpc.tools.file_move import FileMove, FileMoveParams
from toolrpc.tools.file_read import FileRead, FileReadParams, guess_mime_type, is_text_mime_type
from toolrpc.tools.file_write import FileWrite, FileWriteParams


class TestMimeTypes:
    def test_guess(self, tmp_path: Path) -> None:
        assert guess_mime_type(tmp_path / "x.py") == "text/plain"
        assert guess_mime_type(tmp_path / "x.PNG") == "image/png"
        assert guess_mime_type(tmp_path / "x.unknownext") == "application/octet-stream"

    def test_is_text(self) -> None:
        assert is_text_mime_type("text/html")
        assert is_text_mime_type("application/json")
        assert not is_text_mime_type("image/png")


class TestFileRead:
    async def test_text(self, tmp_path: Path) -> None:
        f = tmp_path / "a.txt"
        f.write_text("one\ntwo\n")
        out = await FileRead().execute(FileReadParams(path=str(f)))
        assert out.content == "one\ntwo\n"
        assert out.content_type == "text"
        assert out.size == 8
        assert out.line_count is None

    async def test_binary_auto(self, tmp_path: Path) -> None:
        f = tmp_path / "img.png"
        f.write_bytes(b"\x89PNG\x00\x01")
        out = await FileRead().execute(FileReadParams(path=str(f)))
        assert out.content_type == "binary"
        assert base64.b64decode(out.content) == b"\x89PNG\x00\x01"

    async def test_forced_binary(self, tmp_path: Path) -> None:
        f = tmp_path / "a.txt"
        f.write_text("hi")
        out = await FileRead().execute(FileReadParams(path=str(f), content_type="binary"))
        assert out.content == base64.b64encode(b"hi").decode()

    async def test_window_and_numbers(self, tmp_path: Path) -> None:
        f = tmp_path / "a.txt"
        f.write_text("l1\nl2\nl3\nl4\n")
        out = await FileRead().execute(FileReadParams(path=str(f), offset=1, limit=2, line_numbers=True))
        assert out.content == "     2  l2\n     3  l3"
        assert out.line_count == 4

    async def test_window_without_numbers(self, tmp_path: Path) -> None:
        f = tmp_path / "a.txt"
        f.write_text("l1\r\nl2\r\nl3\r\n")
        out = await FileRead().execute(FileReadParams(path=str(f), offset=2))
        assert out.content == "l3"

    async def test_invalid_utf8_as_text(self, tmp_path: Path) -> None:
        f = tmp_path / "a.txt"
        f.write_bytes(b"\xff\xfe")
        with pytest.raises(InvalidArgumentError, match="UTF-8"):
            await FileRead().execute(FileReadParams(path=str(f), content_type="text"))

    async def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError, match="File not found"):
            await FileRead().execute(FileReadParams(path=str(tmp_path / "nope")))

    async def test_directory(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidArgumentError, match="not a file"):
            await FileRead().execute(FileReadParams(path=str(tmp_path)))


class TestFileWrite:
    async def test_create(self, tmp_path: Path) -> None:
        f = tmp_path / "out.txt"
        out = await FileWrite().execute(FileWriteParams(path=str(f), content="héllo"))
        assert f.read_text(encoding="utf-8") == "héllo"
        assert out.created
        assert out.size == len("héllo".encode())

    async def test_overwrite_keeps_mode(self, tmp_path: Path) -> None:
        f = tmp_path / "out.txt"
        f.write_text("old")
        os.chmod(f, 0o640)
        out = await FileWrite().execute(FileWriteParams(path=str(f), content="new"))
        assert not out.created
        assert f.read_text() == "new"
        assert stat.S_IMODE(f.stat().st_mode) == 0o640

    async def test_no_temp_files_left(self, tmp_path: Path) -> None:
        await FileWrite().execute(FileWriteParams(path=str(tmp_path / "x"), content="1"))
        assert [p.name for p in tmp_path.iterdir()] == ["x"]

    async def test_binary(self, tmp_path: Path) -> None:
        f = tmp_path / "b.bin"
        payload = base64.b64encode(b"\x00\x01\x02").decode()
        out = await FileWrite().execute(FileWriteParams(path=str(f), content=payload, content_type="binary"))
        assert f.read_bytes() == b"\x00\x01\x02"
        assert out.size == 3

    async def test_bad_base64(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidArgumentError, match="base64"):
            await FileWrite().execute(
                FileWriteParams(path=str(tmp_path / "b"), content="!!!", content_type="binary")
            )

    async def test_missing_parent(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError, match="Parent directory"):
            await FileWrite().execute(FileWriteParams(path=str(tmp_path / "d" / "f"), content="x"))

    async def test_create_dirs(self, tmp_path: Path) -> None:
        f = tmp_path / "d" / "e" / "f"
        await FileWrite().execute(FileWriteParams(path=str(f), content="x", create_dirs=True))
        assert f.read_text() == "x"

    async def test_directory_target(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidArgumentError, match="is a directory"):
            await FileWrite().execute(FileWriteParams(path=str(tmp_path), content="x"))


class TestFileMove:
    async def test_rename(self, tmp_path: Path) -> None:
        src = tmp_path / "a"
        src.write_text("data")
        dst = tmp_path / "b"
        out = await FileMove().execute(FileMoveParams(source=str(src), destination=str(dst)))
        assert not src.exists()
        assert dst.read_text() == "data"
        assert not out.overwritten

    async def test_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(NotFoundError, match="Source not found"):
            await FileMove().execute(FileMoveParams(source=str(tmp_path / "a"), destination=str(tmp_path / "b")))

    async def test_existing_destination(self, tmp_path: Path) -> None:
        (tmp_path / "a").write_text("1")
        (tmp_path / "b").write_text("2")
        with pytest.raises(AlreadyExistsError):
            await FileMove().execute(FileMoveParams(source=str(tmp_path / "a"), destination=str(tmp_path / "b")))

    async def test_overwrite(self, tmp_path: Path) -> None:
        (tmp_path / "a").write_text("1")
        (tmp_path / "b").write_text("2")
        out = await FileMove().execute(
            FileMoveParams(source=str(tmp_path / "a"), destination=str(tmp_path / "b"), overwrite=True)
        )
        assert out.overwritten
        assert (tmp_path / "b").read_text() == "1"

    async def test_overwrite_directory_refused(self, tmp_path: Path) -> None:
        (tmp_path / "a").write_text("1")
        (tmp_path / "d").mkdir()
        with pytest.raises(InvalidArgumentError, match="directory"):
            await FileMove().execute(
                FileMoveParams(source=str(tmp_path / "a"), destination=str(tmp_path / "d"), overwrite=True)
            )

    async def test_missing_parent(self, tmp_path: Path) -> None:
        (tmp_path / "a").write_text("1")
        with pytest.raises(NotFoundError, match="parent"):
            await FileMove().execute(
                FileMoveParams(source=str(tmp_path / "a"), destination=str(tmp_path / "x" / "b"))
            )

    async def test_create_dirs(self, tmp_path: Path) -> None:
        (tmp_path / "a").write_text("1")
        dst = tmp_path / "x" / "y" / "b"
        await FileMove().execute(
            FileMoveParams(source=str(tmp_path / "a"), destination=str(dst), create_dirs=True)
        )
        assert dst.read_text() == "1"

    async def test_move_directory(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "f").write_text("x")
        await FileMove().execute(FileMoveParams(source=str(tmp_path / "src"), destination=str(tmp_path / "dst")))
        assert (tmp_path / "dst" / "f").read_text() == "x"
