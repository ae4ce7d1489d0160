"""Dispatcher — routes JSON-RPC request text to registered tools.

Each call to :meth:`Dispatcher.dispatch` runs one request through a fixed
sequence: parse, validate the envelope, normalize params from the input
convention, resolve the method, validate params and execute the tool,
render the result in the output convention, and serialize the response.
Every failure along the way becomes a JSON-RPC error response.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from toolrpc.errors import InvalidParamsError, ToolError, ToolNotFoundError
from toolrpc.jsonrpc import (
    ErrorCode,
    JsonRpcError,
    JsonRpcFault,
    JsonRpcResponse,
    extract_id,
    parse_request,
)
from toolrpc.registry import ToolRegistry
from toolrpc.schema import ToolSchema
from toolrpc.tools.base import Tool, ToolInvoker
from toolrpc.transform import FormatConfig, FormatTransformer
from toolrpc.utils.telemetry import (
    ATTR_INPUT_FORMAT,
    ATTR_OUTPUT_FORMAT,
    ATTR_TOOL_ERROR_KIND,
    get_tracer,
    record_rpc_error,
    set_request_attributes,
)

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


def _reject_constant(token: str) -> Any:
    msg = f"{token} is not valid JSON"
    raise ValueError(msg)


class Dispatcher:
    """Immutable JSON-RPC front end over a fixed set of tools.

    The tool map and format configuration are fixed at construction and
    shared read-only by all requests, so one instance may serve many
    concurrent dispatches. Build a new instance to reconfigure.

    Usage::

        dispatcher = Dispatcher(
            ToolRegistry([DirectoryList(), FileRead()]),
            formats=FormatConfig.plain_to_wrapped(),
        )
        response_text = await dispatcher.dispatch(request_text)
    """

    def __init__(
        self,
        tools: ToolRegistry | Iterable[Tool[Any, Any] | ToolInvoker] = (),
        *,
        formats: FormatConfig | None = None,
    ) -> None:
        registry = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)
        # Private copy: later registrations on the caller's registry are not seen.
        self._registry = ToolRegistry(invoker for _, invoker in registry.items())
        self._tools: Mapping[str, ToolInvoker] = MappingProxyType(dict(self._registry.items()))
        self._transformer = FormatTransformer(formats)

    @property
    def formats(self) -> FormatConfig:
        return self._transformer.config

    @property
    def transformer(self) -> FormatTransformer:
        return self._transformer

    @property
    def tools(self) -> Mapping[str, ToolInvoker]:
        """Read-only view of the registered invokers, keyed by method name."""
        return self._tools

    def methods(self) -> list[str]:
        return self._registry.names()

    def schemas(self) -> list[ToolSchema]:
        return self._registry.schemas()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def dispatch(self, request: str | bytes) -> str:
        """Handle one request and return the response as JSON text.

        Never raises for malformed input or tool failures; those produce
        error responses.
        """
        try:
            payload = json.loads(request, parse_constant=_reject_constant)
        except RecursionError:
            logger.debug("Rejecting request nested too deeply to parse")
            response = JsonRpcResponse.failure(
                None,
                JsonRpcError(code=int(ErrorCode.PARSE_ERROR), message="Parse error: nesting too deep"),
            )
            return self._encode(response)
        except (ValueError, TypeError) as exc:
            logger.debug("Rejecting unparseable request: %s", exc)
            response = JsonRpcResponse.failure(
                None,
                JsonRpcError(code=int(ErrorCode.PARSE_ERROR), message=f"Parse error: {exc}"),
            )
            return self._encode(response)

        response = await self.handle(payload)
        return self._encode(response)

    async def dispatch_message(self, payload: Any) -> dict[str, Any]:
        """Handle an already-decoded request and return the response wire dict."""
        response = await self.handle(payload)
        return response.to_wire()

    async def dispatch_many(self, requests: Iterable[str | bytes]) -> list[str]:
        """Dispatch independent requests concurrently; responses keep input order."""
        return list(await asyncio.gather(*[self.dispatch(r) for r in requests]))

    async def handle(self, payload: Any) -> JsonRpcResponse:
        """Run the request state machine on a decoded JSON payload."""
        request_id = extract_id(payload)
        method = payload.get("method") if isinstance(payload, dict) else None

        with _tracer.start_as_current_span("jsonrpc.dispatch") as span:
            set_request_attributes(span, method if isinstance(method, str) else None, request_id)
            span.set_attribute(ATTR_INPUT_FORMAT, self.formats.input_format.value)
            span.set_attribute(ATTR_OUTPUT_FORMAT, self.formats.output_format.value)

            try:
                result = await self._process(payload)
            except JsonRpcFault as fault:
                record_rpc_error(span, fault.code, fault.message)
                if isinstance(fault.data, dict) and "kind" in fault.data:
                    span.set_attribute(ATTR_TOOL_ERROR_KIND, str(fault.data["kind"]))
                error = JsonRpcError(
                    code=fault.code,
                    message=fault.message,
                    data=self._transformer.transform_error_data(fault.data),
                )
                return JsonRpcResponse.failure(request_id, error)

        return JsonRpcResponse.success(request_id, result)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _process(self, payload: Any) -> Any:
        request = parse_request(payload)
        try:
            params = self._transformer.transform_params(request.params)
        except RecursionError as exc:
            raise JsonRpcFault(ErrorCode.INVALID_PARAMS, "Invalid params: nesting too deep") from exc
        invoker = self._resolve(request.method)

        try:
            result = await invoker.invoke(params)
        except InvalidParamsError as exc:
            raise JsonRpcFault(
                ErrorCode.INVALID_PARAMS,
                str(exc),
                {"errors": exc.errors} if exc.errors else None,
            ) from exc
        except ToolError as exc:
            logger.warning("Tool %s failed (%s): %s", request.method, exc.kind, exc.message)
            raise JsonRpcFault(ErrorCode.INTERNAL_ERROR, str(exc), exc.to_data()) from exc
        except Exception as exc:
            logger.exception("Unexpected failure in tool %s", request.method)
            raise JsonRpcFault(
                ErrorCode.INTERNAL_ERROR,
                "Internal error",
                {"kind": "internal", "message": str(exc), "tool": request.method},
            ) from exc

        try:
            return self._transformer.transform_result(result)
        except RecursionError as exc:
            logger.exception("Result of tool %s is nested too deeply", request.method)
            raise JsonRpcFault(
                ErrorCode.INTERNAL_ERROR,
                "Internal error",
                {"kind": "internal", "message": "Result nesting too deep", "tool": request.method},
            ) from exc

    def _resolve(self, method: str) -> ToolInvoker:
        try:
            return self._registry.resolve(method)
        except ToolNotFoundError as exc:
            logger.debug("Method not found: %s", method)
            raise JsonRpcFault(
                ErrorCode.METHOD_NOT_FOUND,
                "Method not found",
                {"method": exc.name},
            ) from exc

    @staticmethod
    def _encode(response: JsonRpcResponse) -> str:
        try:
            return json.dumps(response.to_wire(), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.exception("Response for id %r is not JSON-serializable", response.id)
            fallback = JsonRpcResponse.failure(
                response.id,
                JsonRpcError(
                    code=int(ErrorCode.INTERNAL_ERROR),
                    message="Internal error",
                    data={"kind": "internal", "message": f"Unserializable response: {exc}"},
                ),
            )
            return json.dumps(fallback.to_wire(), ensure_ascii=False)
