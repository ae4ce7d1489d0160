"""Shared error types for the dispatcher, registry and tool layers."""

from __future__ import annotations

from typing import Any


class ToolRpcError(Exception):
    """Base error for all toolrpc failures."""


# ---------------------------------------------------------------------------
# Registry / configuration
# ---------------------------------------------------------------------------


class RegistryError(ToolRpcError):
    """A tool registry operation failed."""


class DuplicateToolError(RegistryError):
    """A tool with the same method name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name}")


class ToolNotFoundError(RegistryError):
    """No tool is registered under the requested method name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")


class ConfigError(ToolRpcError):
    """Dispatcher settings could not be read or validated."""


class InvalidParamsError(ToolRpcError):
    """Request parameters do not match the tool's parameter model."""

    def __init__(self, tool: str, errors: list[dict[str, Any]] | None = None, detail: str = "") -> None:
        self.tool = tool
        self.errors = errors or []
        self.detail = detail
        msg = f"Invalid params for {tool}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


# ---------------------------------------------------------------------------
# Tool-level failures
# ---------------------------------------------------------------------------


class ToolError(ToolRpcError):
    """A tool invocation failed.

    Subclasses set ``kind``, a stable identifier forwarded to callers in the
    JSON-RPC error ``data`` payload.
    """

    kind = "tool_error"

    def __init__(
        self,
        message: str,
        *,
        tool: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.tool = tool
        self.details = details or {}
        super().__init__(message)

    def to_data(self) -> dict[str, Any]:
        """Return the structured payload used as JSON-RPC error ``data``."""
        data: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.tool is not None:
            data["tool"] = self.tool
        if self.details:
            data["details"] = dict(self.details)
        return data


class NotFoundError(ToolError):
    """A file, directory or executable does not exist."""

    kind = "not_found"


class PermissionDeniedError(ToolError):
    """The operating system refused access."""

    kind = "permission_denied"


class InvalidArgumentError(ToolError):
    """A parameter is well-typed but unusable (wrong path kind, bad encoding...)."""

    kind = "invalid_argument"


class AlreadyExistsError(ToolError):
    """The target of a create or move already exists."""

    kind = "already_exists"


class ExecutionFailedError(ToolError):
    """The operation was attempted and failed."""

    kind = "execution_failed"


class ConflictError(ToolError):
    """The operation conflicts with current state (e.g. a patch does not apply)."""

    kind = "conflict"


def from_os_error(exc: OSError, *, tool: str | None = None) -> ToolError:
    """Map an :class:`OSError` onto the tool error taxonomy."""
    target = exc.filename if exc.filename is not None else ""
    reason = exc.strerror or str(exc)
    message = f"{reason}: {target}" if target else reason
    details = {"errno": exc.errno} if exc.errno is not None else None

    if isinstance(exc, FileNotFoundError):
        return NotFoundError(message, tool=tool, details=details)
    if isinstance(exc, PermissionError):
        return PermissionDeniedError(message, tool=tool, details=details)
    if isinstance(exc, FileExistsError):
        return AlreadyExistsError(message, tool=tool, details=details)
    if isinstance(exc, (IsADirectoryError, NotADirectoryError)):
        return InvalidArgumentError(message, tool=tool, details=details)
    return ExecutionFailedError(message, tool=tool, details=details)
