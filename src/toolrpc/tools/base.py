"""Tool contract — the common interface every tool implements.

A :class:`Tool` is typed: it declares a pydantic parameter model and output
model and implements ``execute``. The registry stores tools behind the
type-erased :class:`ToolInvoker` protocol, which speaks plain JSON; the
adapters here do the model validation and serialization at that boundary.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from toolrpc.errors import InvalidParamsError, ToolError, from_os_error

logger = logging.getLogger(__name__)


class ToolParams(BaseModel):
    """Base for tool parameter models. Unknown fields are rejected."""

    model_config = {"extra": "forbid"}


class ToolOutput(BaseModel):
    """Base for tool output models."""

    def to_json(self) -> dict[str, Any]:
        """Serialize to JSON-compatible data, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


ParamsT = TypeVar("ParamsT", bound=ToolParams)
OutputT = TypeVar("OutputT", bound=ToolOutput)


class Tool(ABC, Generic[ParamsT, OutputT]):
    """A named unit of functionality with typed parameters and output.

    Subclasses set ``name``, ``description``, ``params_model`` and
    ``output_model`` and implement :meth:`execute`. Failures are raised as
    :class:`~toolrpc.errors.ToolError` subclasses.
    """

    name: ClassVar[str]
    description: ClassVar[str] = ""
    params_model: ClassVar[type[ToolParams]]
    output_model: ClassVar[type[ToolOutput]]

    @abstractmethod
    async def execute(self, params: ParamsT) -> OutputT:
        """Run the tool."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


@runtime_checkable
class ToolInvoker(Protocol):
    """Type-erased call path: JSON params in, JSON result out."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    def parameters_schema(self) -> dict[str, Any]: ...

    def output_schema(self) -> dict[str, Any] | None: ...

    async def invoke(self, params: Any) -> Any:
        """Validate *params*, run the tool and return JSON-compatible output.

        Raises:
            InvalidParamsError: If *params* does not fit the parameter model.
            ToolError: If the tool itself fails.
        """
        ...


def _validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    """Reduce pydantic errors to a JSON-safe list."""
    return [
        {
            "loc": [str(part) for part in err["loc"]],
            "msg": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


def _validate_params(name: str, model: type[ToolParams], params: Any) -> ToolParams:
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise InvalidParamsError(name, detail="params must be a JSON object")
    try:
        return model.model_validate(params)
    except ValidationError as exc:
        errors = _validation_errors(exc)
        fields = ", ".join(".".join(err["loc"]) or "<root>" for err in errors)
        raise InvalidParamsError(name, errors, detail=fields) from exc


def _serialize(result: Any) -> Any:
    if isinstance(result, ToolOutput):
        return result.to_json()
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", exclude_none=True)
    return to_jsonable_python(result)


async def _run(name: str, call: Awaitable[Any]) -> Any:
    try:
        return await call
    except ToolError as exc:
        if exc.tool is None:
            exc.tool = name
        raise
    except OSError as exc:
        raise from_os_error(exc, tool=name) from exc


class TypedToolInvoker:
    """Adapts a :class:`Tool` to the :class:`ToolInvoker` protocol."""

    def __init__(self, tool: Tool[Any, Any]) -> None:
        self._tool = tool

    @property
    def tool(self) -> Tool[Any, Any]:
        return self._tool

    @property
    def name(self) -> str:
        return self._tool.name

    @property
    def description(self) -> str:
        return self._tool.description

    def parameters_schema(self) -> dict[str, Any]:
        return self._tool.params_model.model_json_schema()

    def output_schema(self) -> dict[str, Any] | None:
        return self._tool.output_model.model_json_schema()

    async def invoke(self, params: Any) -> Any:
        typed = _validate_params(self.name, self._tool.params_model, params)
        logger.debug("Executing tool %s", self.name)
        output = await _run(self.name, self._tool.execute(typed))
        return _serialize(output)


class FunctionInvoker:
    """Adapts a plain async callable taking a params model.

    Usage::

        class EchoParams(ToolParams):
            text: str

        async def echo(params: EchoParams) -> dict[str, str]:
            return {"echo": params.text}

        registry.register(FunctionInvoker("echo", echo, params_model=EchoParams))
    """

    def __init__(
        self,
        name: str,
        fn: Callable[[Any], Awaitable[Any]],
        *,
        params_model: type[ToolParams],
        description: str = "",
    ) -> None:
        self._name = name
        self._fn = fn
        self._params_model = params_model
        self._description = description

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    def parameters_schema(self) -> dict[str, Any]:
        return self._params_model.model_json_schema()

    def output_schema(self) -> dict[str, Any] | None:
        return None

    async def invoke(self, params: Any) -> Any:
        typed = _validate_params(self._name, self._params_model, params)
        output = await _run(self._name, self._fn(typed))
        return _serialize(output)
