"""Smoke test to verify the package imports and wires up."""

from __future__ import annotations


def test_import() -> None:
    import toolrpc

    assert toolrpc.__version__ == "0.1.0"


def test_tool_imports() -> None:
    from toolrpc.tools import (
        DirectoryList,
        DirectoryMake,
        FileDiff,
        FileFind,
        FileGrep,
        FileMove,
        FilePatch,
        FileRead,
        FileWrite,
        Shell,
    )

    names = {
        tool.name
        for tool in (
            DirectoryList,
            DirectoryMake,
            FileDiff,
            FileFind,
            FileGrep,
            FileMove,
            FilePatch,
            FileRead,
            FileWrite,
            Shell,
        )
    }
    assert len(names) == 10


def test_lazy_import_from_toolrpc() -> None:
    import toolrpc

    assert toolrpc.Dispatcher is not None
    assert toolrpc.ToolRegistry is not None
    assert toolrpc.FormatConfig is not None
    assert callable(toolrpc.create_default_dispatcher)


def test_unknown_attribute() -> None:
    import pytest

    import toolrpc

    with pytest.raises(AttributeError, match="no attribute"):
        toolrpc.does_not_exist  # noqa: B018
