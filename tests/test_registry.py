"""Tests for ToolRegistry, the tool contract adapters and schema export."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel

from toolrpc.errors import DuplicateToolError, InvalidParamsError, NotFoundError, ToolNotFoundError
from toolrpc.registry import ToolRegistry, as_invoker
from toolrpc.schema import ToolSchema, to_bedrock_tool_spec, to_openai_function
from toolrpc.tools.base import FunctionInvoker, Tool, ToolInvoker, ToolOutput, ToolParams, TypedToolInvoker


class EchoParams(ToolParams):
    text: str
    times: int = 1


class EchoOutput(ToolOutput):
    echo: str
    note: str | None = None


class EchoTool(Tool[EchoParams, EchoOutput]):
    name = "echo"
    description = "Repeat text"
    params_model = EchoParams
    output_model = EchoOutput

    async def execute(self, params: EchoParams) -> EchoOutput:
        return EchoOutput(echo=params.text * params.times)


class MissingTool(Tool[EchoParams, EchoOutput]):
    name = "missing"
    params_model = EchoParams
    output_model = EchoOutput

    async def execute(self, params: EchoParams) -> EchoOutput:
        raise FileNotFoundError(2, "No such file or directory", params.text)


class NoTool(Tool[EchoParams, EchoOutput]):
    name = "no"
    params_model = EchoParams
    output_model = EchoOutput

    async def execute(self, params: EchoParams) -> EchoOutput:
        raise NotFoundError("not here")


class TestTypedToolInvoker:
    async def test_invoke_serializes_without_none(self) -> None:
        invoker = TypedToolInvoker(EchoTool())
        assert await invoker.invoke({"text": "ab", "times": 2}) == {"echo": "abab"}

    async def test_none_params_means_empty(self) -> None:
        invoker = TypedToolInvoker(EchoTool())
        with pytest.raises(InvalidParamsError) as exc_info:
            await invoker.invoke(None)
        assert exc_info.value.errors[0]["loc"] == ["text"]

    async def test_non_object_params(self) -> None:
        invoker = TypedToolInvoker(EchoTool())
        with pytest.raises(InvalidParamsError, match="JSON object"):
            await invoker.invoke(["x"])

    async def test_unknown_field_rejected(self) -> None:
        invoker = TypedToolInvoker(EchoTool())
        with pytest.raises(InvalidParamsError, match="bogus"):
            await invoker.invoke({"text": "a", "bogus": 1})

    async def test_wrong_type(self) -> None:
        invoker = TypedToolInvoker(EchoTool())
        with pytest.raises(InvalidParamsError) as exc_info:
            await invoker.invoke({"text": "a", "times": "many"})
        assert exc_info.value.tool == "echo"

    async def test_os_error_mapped(self) -> None:
        invoker = TypedToolInvoker(MissingTool())
        with pytest.raises(NotFoundError) as exc_info:
            await invoker.invoke({"text": "/nope"})
        assert exc_info.value.tool == "missing"

    async def test_tool_error_gets_tool_name(self) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await TypedToolInvoker(NoTool()).invoke({"text": "a"})
        assert exc_info.value.tool == "no"

    def test_schemas(self) -> None:
        invoker = TypedToolInvoker(EchoTool())
        assert invoker.parameters_schema()["required"] == ["text"]
        assert "echo" in invoker.output_schema()["properties"]

    def test_satisfies_protocol(self) -> None:
        assert isinstance(TypedToolInvoker(EchoTool()), ToolInvoker)


class TestFunctionInvoker:
    async def test_invoke(self) -> None:
        async def shout(params: EchoParams) -> dict[str, Any]:
            return {"loud": params.text.upper()}

        invoker = FunctionInvoker("shout", shout, params_model=EchoParams, description="Shout")
        assert await invoker.invoke({"text": "hi"}) == {"loud": "HI"}
        assert invoker.output_schema() is None
        assert isinstance(invoker, ToolInvoker)

    async def test_model_result_serialized(self) -> None:
        class Out(BaseModel):
            value: int
            extra: str | None = None

        async def fn(params: EchoParams) -> Out:
            return Out(value=params.times)

        invoker = FunctionInvoker("fn", fn, params_model=EchoParams)
        assert await invoker.invoke({"text": "", "times": 4}) == {"value": 4}


class TestToolRegistry:
    def test_register_and_resolve(self) -> None:
        registry = ToolRegistry([EchoTool()])
        assert "echo" in registry
        assert len(registry) == 1
        assert registry.resolve("echo").name == "echo"
        assert registry.get("other") is None

    def test_duplicate_rejected(self) -> None:
        registry = ToolRegistry([EchoTool()])
        with pytest.raises(DuplicateToolError):
            registry.register(EchoTool())
        assert len(registry) == 1

    def test_resolve_missing(self) -> None:
        with pytest.raises(ToolNotFoundError):
            ToolRegistry().resolve("nope")

    def test_register_function(self) -> None:
        async def fn(params: EchoParams) -> str:
            return params.text

        registry = ToolRegistry()
        invoker = registry.register_function("fn", fn, params_model=EchoParams)
        assert registry.resolve("fn") is invoker

    def test_names_sorted_and_iteration(self) -> None:
        registry = ToolRegistry([NoTool(), EchoTool(), MissingTool()])
        assert registry.names() == ["echo", "missing", "no"]
        assert list(registry) == ["echo", "missing", "no"]

    def test_as_invoker_rejects_other(self) -> None:
        with pytest.raises(TypeError, match="Expected a Tool"):
            as_invoker(object())  # type: ignore[arg-type]

    def test_as_invoker_passes_invoker_through(self) -> None:
        invoker = TypedToolInvoker(EchoTool())
        assert as_invoker(invoker) is invoker


class TestSchemaExport:
    def test_registry_schemas(self) -> None:
        schemas = ToolRegistry([EchoTool(), NoTool()]).schemas()
        assert [s.name for s in schemas] == ["echo", "no"]
        assert schemas[0].description == "Repeat text"

    def test_openai_format(self) -> None:
        schema = ToolSchema.from_invoker(TypedToolInvoker(EchoTool()))
        fn = to_openai_function(schema)
        assert fn["type"] == "function"
        assert fn["function"]["name"] == "echo"
        assert fn["function"]["parameters"]["properties"]["text"]["type"] == "string"

    def test_bedrock_format(self) -> None:
        schema = ToolSchema(name="t", description="d")
        spec = to_bedrock_tool_spec(schema)
        assert spec == {
            "toolSpec": {
                "name": "t",
                "description": "d",
                "inputSchema": {"json": {"type": "object", "properties": {}}},
            }
        }
