"""OpenTelemetry tracing helpers for the dispatcher.

Thin wrapper around the OpenTelemetry API. Without a configured SDK the API
hands out no-op tracers, so instrumented code costs next to nothing unless
the embedding application opts in.

Usage::

    from toolrpc.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("jsonrpc.dispatch") as span:
        span.set_attribute(ATTR_RPC_METHOD, "file_read")

To export spans, call :func:`configure_telemetry` once at startup (requires
the ``otel`` extra: ``pip install toolrpc[otel]``).
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Span attribute keys (OpenTelemetry RPC semantic conventions where they exist)
# ---------------------------------------------------------------------------

ATTR_RPC_SYSTEM = "rpc.system"
ATTR_RPC_METHOD = "rpc.method"
ATTR_RPC_REQUEST_ID = "rpc.jsonrpc.request_id"
ATTR_RPC_ERROR_CODE = "rpc.jsonrpc.error_code"
ATTR_RPC_ERROR_MESSAGE = "rpc.jsonrpc.error_message"
ATTR_INPUT_FORMAT = "toolrpc.formats.input"
ATTR_OUTPUT_FORMAT = "toolrpc.formats.output"
ATTR_TOOL_ERROR_KIND = "toolrpc.tool.error_kind"

RPC_SYSTEM = "jsonrpc"

_INSTRUMENTATION_NAME = "toolrpc"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name* (no-op without an SDK)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def set_request_attributes(span: trace.Span, method: str | None, request_id: Any) -> None:
    """Tag *span* with the JSON-RPC method and id, skipping what is unknown."""
    span.set_attribute(ATTR_RPC_SYSTEM, RPC_SYSTEM)
    if method is not None:
        span.set_attribute(ATTR_RPC_METHOD, method)
    if request_id is not None:
        span.set_attribute(ATTR_RPC_REQUEST_ID, str(request_id))


def record_rpc_error(span: trace.Span, code: int, message: str) -> None:
    """Mark *span* as failed with a JSON-RPC error code."""
    span.set_attribute(ATTR_RPC_ERROR_CODE, code)
    span.set_attribute(ATTR_RPC_ERROR_MESSAGE, message)
    span.set_status(trace.Status(trace.StatusCode.ERROR, message))


def configure_telemetry(
    *,
    service_name: str = "toolrpc",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider (requires ``toolrpc[otel]``).

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for OTLP, the exporter) is missing.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install toolrpc[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for OTLP export. "
                "Install it with: pip install toolrpc[otel]"
            )
            raise ImportError(msg) from exc
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    trace.set_tracer_provider(provider)
