"""JSON-RPC 2.0 envelope models and error codes.

Only the message shapes live here; routing and the request state machine
are in :mod:`toolrpc.dispatcher`.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Annotated, Any, Literal

from pydantic import AllowInfNan, BaseModel, Strict, StrictInt, StrictStr, ValidationError, model_validator

from toolrpc.errors import ToolRpcError

JSONRPC_VERSION = "2.0"

FiniteFloatId = Annotated[float, Strict(), AllowInfNan(False)]

RequestId = StrictStr | StrictInt | FiniteFloatId | None


class ErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class JsonRpcFault(ToolRpcError):
    """A protocol-level failure, converted to an error envelope at the dispatch boundary."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = int(code)
        self.message = message
        self.data = data
        super().__init__(f"[{self.code}] {message}")

    def to_error(self) -> JsonRpcError:
        return JsonRpcError(code=self.code, message=self.message, data=self.data)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message.

    Unknown members are ignored. ``params`` stays untyped here; it is
    normalized by the format transformer and validated by the tool.
    """

    model_config = {"extra": "ignore"}

    jsonrpc: Literal["2.0"]
    method: StrictStr
    params: Any = None
    id: RequestId = None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            wire["data"] = self.data
        return wire


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response: exactly one of ``result`` or ``error``."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId = None
    result: Any = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> JsonRpcResponse:
        if self.error is not None and self.result is not None:
            msg = "A response carries either a result or an error, not both"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: Any, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, error: JsonRpcError) -> JsonRpcResponse:
        return cls(id=request_id, error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_wire(self) -> dict[str, Any]:
        """Return the wire dict; a ``null`` result is still emitted on success."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            wire["error"] = self.error.to_wire()
        else:
            wire["result"] = self.result
        wire["id"] = self.id
        return wire


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def extract_id(payload: Any) -> Any:
    """Best-effort read of the request id for echoing in error responses.

    Returns ``None`` when the payload is not an object or the id has an
    invalid type (e.g. a boolean, a nested object or a non-finite float).
    """
    if not isinstance(payload, dict):
        return None
    request_id = payload.get("id")
    if isinstance(request_id, bool):
        return None
    if isinstance(request_id, float) and not math.isfinite(request_id):
        return None
    if isinstance(request_id, (str, int, float)):
        return request_id
    return None


def parse_request(payload: Any) -> JsonRpcRequest:
    """Validate a decoded JSON payload as a request envelope.

    Raises:
        JsonRpcFault: ``INVALID_REQUEST`` when the payload is not a valid envelope.
    """
    if not isinstance(payload, dict):
        raise JsonRpcFault(ErrorCode.INVALID_REQUEST, "Invalid request: expected a JSON object")
    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise JsonRpcFault(ErrorCode.INVALID_REQUEST, "Invalid request: unsupported JSON-RPC version")
    try:
        return JsonRpcRequest.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        detail = ", ".join(fields) if fields else "malformed envelope"
        raise JsonRpcFault(
            ErrorCode.INVALID_REQUEST,
            f"Invalid request: bad or missing {detail}",
        ) from exc


def make_request(method: str, params: Any = None, request_id: Any = None) -> dict[str, Any]:
    """Build a request envelope dict (handy for embedding code and tests).

    ``id`` is only emitted when *request_id* is given.
    """
    request: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        request["params"] = params
    if request_id is not None:
        request["id"] = request_id
    return request
