"""Tool descriptors and their export formats (OpenAI functions, Bedrock tool specs)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from toolrpc.tools.base import ToolInvoker


class ToolSchema(BaseModel):
    """Name, description and JSON Schemas of a registered tool."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    output: dict[str, Any] | None = None

    @classmethod
    def from_invoker(cls, invoker: ToolInvoker) -> ToolSchema:
        return cls(
            name=invoker.name,
            description=invoker.description,
            parameters=invoker.parameters_schema(),
            output=invoker.output_schema(),
        )


def to_openai_function(schema: ToolSchema) -> dict[str, Any]:
    """Convert a :class:`ToolSchema` to an OpenAI-compatible function schema."""
    return {
        "type": "function",
        "function": {
            "name": schema.name,
            "description": schema.description,
            "parameters": schema.parameters or {"type": "object", "properties": {}},
        },
    }


def to_bedrock_tool_spec(schema: ToolSchema) -> dict[str, Any]:
    """Convert a :class:`ToolSchema` to a Bedrock Converse ``toolSpec`` entry."""
    return {
        "toolSpec": {
            "name": schema.name,
            "description": schema.description,
            "inputSchema": {
                "json": schema.parameters or {"type": "object", "properties": {}},
            },
        }
    }
