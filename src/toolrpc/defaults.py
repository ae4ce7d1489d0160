"""Built-in tool set and ready-made dispatcher factories."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from toolrpc.config import DispatcherSettings
from toolrpc.dispatcher import Dispatcher
from toolrpc.errors import ConfigError
from toolrpc.registry import ToolRegistry
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
from toolrpc.tools.base import Tool
from toolrpc.transform import FormatConfig

_BUILTIN_TOOLS: tuple[type[Tool[Any, Any]], ...] = (
    DirectoryList,
    FileRead,
    FileWrite,
    FilePatch,
    DirectoryMake,
    FileMove,
    FileFind,
    FileGrep,
    FileDiff,
    Shell,
)


def builtin_tool_names() -> list[str]:
    return sorted(tool_cls.name for tool_cls in _BUILTIN_TOOLS)


def default_tools(names: Iterable[str] | None = None) -> ToolRegistry:
    """Build a registry of the built-in tools, optionally restricted to *names*.

    Raises:
        ConfigError: If a requested name is not a built-in tool.
    """
    by_name = {tool_cls.name: tool_cls for tool_cls in _BUILTIN_TOOLS}
    if names is None:
        selected = list(_BUILTIN_TOOLS)
    else:
        wanted = list(dict.fromkeys(names))
        unknown = [name for name in wanted if name not in by_name]
        if unknown:
            raise ConfigError(
                f"Unknown tool(s): {', '.join(unknown)}. Available: {', '.join(builtin_tool_names())}"
            )
        selected = [by_name[name] for name in wanted]
    return ToolRegistry(tool_cls() for tool_cls in selected)


def create_dispatcher(
    formats: FormatConfig | None = None,
    *,
    tools: Iterable[str] | None = None,
) -> Dispatcher:
    """Dispatcher over the built-in tools with the given format pair."""
    return Dispatcher(default_tools(tools), formats=formats)


def create_default_dispatcher() -> Dispatcher:
    return create_dispatcher(FormatConfig.plain())


def create_wrapped_dispatcher() -> Dispatcher:
    return create_dispatcher(FormatConfig.wrapped())


def create_plain_to_wrapped_dispatcher() -> Dispatcher:
    return create_dispatcher(FormatConfig.plain_to_wrapped())


def create_wrapped_to_plain_dispatcher() -> Dispatcher:
    return create_dispatcher(FormatConfig.wrapped_to_plain())


def create_dispatcher_from_settings(settings: DispatcherSettings) -> Dispatcher:
    return create_dispatcher(settings.format_config(), tools=settings.tools)
