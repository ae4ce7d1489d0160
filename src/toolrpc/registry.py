"""ToolRegistry — maps JSON-RPC method names to tool invokers."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator
from typing import Any

from toolrpc.errors import DuplicateToolError, ToolNotFoundError
from toolrpc.schema import ToolSchema
from toolrpc.tools.base import FunctionInvoker, Tool, ToolInvoker, ToolParams, TypedToolInvoker

logger = logging.getLogger(__name__)


def as_invoker(tool: Tool[Any, Any] | ToolInvoker) -> ToolInvoker:
    """Return *tool* behind the type-erased :class:`ToolInvoker` interface."""
    if isinstance(tool, Tool):
        return TypedToolInvoker(tool)
    if isinstance(tool, ToolInvoker):
        return tool
    msg = f"Expected a Tool or ToolInvoker, got {type(tool).__name__}"
    raise TypeError(msg)


class ToolRegistry:
    """Name-to-invoker map built once, before a dispatcher is constructed.

    Usage::

        registry = ToolRegistry([DirectoryList(), FileRead()])
        registry.register(Shell())
        dispatcher = Dispatcher(registry)

    Registering a second tool under an existing name raises
    :class:`~toolrpc.errors.DuplicateToolError`.
    """

    def __init__(self, tools: Iterable[Tool[Any, Any] | ToolInvoker] = ()) -> None:
        self._invokers: dict[str, ToolInvoker] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool[Any, Any] | ToolInvoker) -> ToolInvoker:
        """Add *tool* under its name and return its invoker."""
        invoker = as_invoker(tool)
        if invoker.name in self._invokers:
            raise DuplicateToolError(invoker.name)
        self._invokers[invoker.name] = invoker
        logger.debug("Registered tool %s", invoker.name)
        return invoker

    def register_function(
        self,
        name: str,
        fn: Callable[[Any], Awaitable[Any]],
        *,
        params_model: type[ToolParams],
        description: str = "",
    ) -> ToolInvoker:
        """Register a plain async callable as a tool."""
        return self.register(
            FunctionInvoker(name, fn, params_model=params_model, description=description)
        )

    def get(self, name: str) -> ToolInvoker | None:
        return self._invokers.get(name)

    def resolve(self, name: str) -> ToolInvoker:
        """Return the invoker for *name* or raise :class:`ToolNotFoundError`."""
        invoker = self._invokers.get(name)
        if invoker is None:
            raise ToolNotFoundError(name)
        return invoker

    def names(self) -> list[str]:
        return sorted(self._invokers)

    def items(self) -> list[tuple[str, ToolInvoker]]:
        return list(self._invokers.items())

    def schemas(self) -> list[ToolSchema]:
        """Describe every registered tool, sorted by name."""
        return [ToolSchema.from_invoker(self._invokers[name]) for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._invokers

    def __len__(self) -> int:
        return len(self._invokers)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
